"""Income tax, SGK and stamp tax calculations for a single monthly salary.

Every function here is pure: it reads a :class:`TaxConfiguration` and, where
relevant, a :class:`CalculationContext`, and never touches the registry.
"""

from __future__ import annotations

from bordro.backend.app.models import (
    CalculationContext,
    IncomeTaxResult,
    SGKContributions,
)
from bordro.backend.config.year_config import (
    TaxConfiguration,
    is_minimum_wage_exempt_for_stamp_tax,
)
from bordro.backend.errors import SalaryLimitError

from .utils import calculate_progressive_tax, clamp


def calculate_minimum_living_allowance(
    config: TaxConfiguration, context: CalculationContext
) -> float:
    """Return the tax-free allowance for the marital and dependant status."""

    return config.minimum_living_allowance.amount_for(
        context.is_married, context.dependent_count
    )


def calculate_disability_deduction(
    config: TaxConfiguration, context: CalculationContext
) -> float:
    if not context.is_disabled or not context.disability_degree:
        return 0.0
    return config.disability_amount(context.disability_degree)


def calculate_income_tax(
    taxable_income: float,
    context: CalculationContext,
    config: TaxConfiguration,
) -> IncomeTaxResult:
    """Apply allowances and the progressive schedule to ``taxable_income``."""

    allowance = calculate_minimum_living_allowance(config, context)
    disability = calculate_disability_deduction(config, context)
    adjusted_income = max(0.0, taxable_income - allowance - disability)

    tax, bracket = calculate_progressive_tax(adjusted_income, config.brackets)
    tax = max(0.0, tax)
    effective_rate = tax / adjusted_income if adjusted_income > 0 else 0.0

    return IncomeTaxResult(
        tax=tax,
        applied_bracket=bracket,
        effective_rate=effective_rate,
        adjusted_income=adjusted_income,
    )


def calculate_sgk_contributions(
    gross_salary: float, config: TaxConfiguration
) -> SGKContributions:
    """Return SGK and unemployment shares on the clamped contribution base.

    The base is floored at ``lower_limit`` and capped at ``upper_limit``, so
    contributions stop growing above the ceiling and never drop below the
    amount due on a minimum-wage salary.
    """

    rates = config.sgk_rates
    sgk_base = clamp(gross_salary, rates.lower_limit, rates.upper_limit)

    return SGKContributions(
        employee_share=sgk_base * rates.employee_rate,
        employer_share=sgk_base * rates.effective_employer_rate,
        unemployment_employee=sgk_base * rates.unemployment_employee_rate,
        unemployment_employer=sgk_base * rates.unemployment_employer_rate,
        sgk_base=sgk_base,
    )


def calculate_minimum_wage_exemption(
    gross_salary: float, config: TaxConfiguration
) -> float:
    """Return the part of ``gross_salary`` shielded from stamp tax."""

    if not is_minimum_wage_exempt_for_stamp_tax(config.year):
        return 0.0
    return max(0.0, min(gross_salary, config.minimum_wage.gross))


def calculate_stamp_tax(gross_salary: float, config: TaxConfiguration) -> float:
    exempt_amount = calculate_minimum_wage_exemption(gross_salary, config)
    taxable_amount = max(0.0, gross_salary - exempt_amount)
    return taxable_amount * config.stamp_tax_rate


def validate_salary_limits(gross_salary: float, config: TaxConfiguration) -> None:
    """Raise :class:`SalaryLimitError` for negative or implausibly large salaries."""

    if gross_salary < 0:
        raise SalaryLimitError("Gross salary cannot be negative")

    ceiling = config.annual_salary_ceiling
    if gross_salary > ceiling:
        raise SalaryLimitError(
            f"Gross salary cannot exceed annual limit of {ceiling:.2f} TL"
        )
