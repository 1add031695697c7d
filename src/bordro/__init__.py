"""Bordro payroll calculation package."""
