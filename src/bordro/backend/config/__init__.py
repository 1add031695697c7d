"""Year-based payroll tax configuration."""
