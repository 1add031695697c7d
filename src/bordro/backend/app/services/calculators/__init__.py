"""Domain-specific calculation helpers."""

from .payroll import (
    calculate_disability_deduction,
    calculate_income_tax,
    calculate_minimum_living_allowance,
    calculate_minimum_wage_exemption,
    calculate_sgk_contributions,
    calculate_stamp_tax,
    validate_salary_limits,
)
from .utils import (
    calculate_progressive_tax,
    clamp,
    format_percentage,
    round_currency,
    round_rate,
    select_bracket,
)

__all__ = [
    "calculate_disability_deduction",
    "calculate_income_tax",
    "calculate_minimum_living_allowance",
    "calculate_minimum_wage_exemption",
    "calculate_progressive_tax",
    "calculate_sgk_contributions",
    "calculate_stamp_tax",
    "clamp",
    "format_percentage",
    "round_currency",
    "round_rate",
    "select_bracket",
    "validate_salary_limits",
]
