"""Calculation services behind the payroll API."""

from .salary_service import SalaryCalculator, get_salary_calculator

__all__ = ["SalaryCalculator", "get_salary_calculator"]
