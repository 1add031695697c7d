"""Typed request/response models shared across the payroll services.

Requests and results are Pydantic models so that validation and serialisation
stay in one place for both the library entry points and the HTTP routes. The
intermediate values produced while a single salary is being evaluated are
plain frozen dataclasses: they never cross the API boundary and do not need
validation.
"""

from __future__ import annotations

from dataclasses import dataclass

from bordro.backend.config.schema import TaxBracket

from .api import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_PRECISION,
    MIN_SUPPORTED_YEAR,
    GrossToNetRequest,
    NetToGrossRequest,
    SalaryBreakdown,
    SalaryCalculationRequest,
    SalaryCalculationResult,
    SalaryContextInput,
    SalaryLimits,
    format_validation_error,
    parse_request,
)

__all__ = [
    "CalculationContext",
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_PRECISION",
    "GrossToNetRequest",
    "IncomeTaxResult",
    "MIN_SUPPORTED_YEAR",
    "NetToGrossRequest",
    "SGKContributions",
    "SalaryBreakdown",
    "SalaryCalculationRequest",
    "SalaryCalculationResult",
    "SalaryContextInput",
    "SalaryLimits",
    "format_validation_error",
    "parse_request",
]


@dataclass(frozen=True)
class CalculationContext:
    """Per-request inputs that influence the income tax computation.

    ``cumulative_income`` approximates year-to-date earnings as
    ``gross * month``; month-by-month bracket carry is not tracked, so
    ``cumulative_tax`` is always zero for now.
    """

    year: int
    month: int
    cumulative_income: float
    cumulative_tax: float = 0.0
    is_married: bool = False
    dependent_count: int = 0
    is_disabled: bool = False
    disability_degree: int | None = None


@dataclass(frozen=True)
class IncomeTaxResult:
    """Outcome of applying the progressive schedule to taxable income."""

    tax: float
    applied_bracket: TaxBracket
    effective_rate: float
    adjusted_income: float


@dataclass(frozen=True)
class SGKContributions:
    """Employee and employer social security shares for one salary."""

    employee_share: float
    employer_share: float
    unemployment_employee: float
    unemployment_employer: float
    sgk_base: float

    @property
    def employee_total(self) -> float:
        return self.employee_share + self.unemployment_employee
