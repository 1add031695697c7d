"""Pydantic models describing the public calculation API surface."""

from __future__ import annotations

from collections.abc import Mapping
import math
from datetime import date
from typing import Any, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from bordro.backend.config.schema import TaxBracket
from bordro.backend.errors import SalaryValidationError, ValidationIssue

__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_PRECISION",
    "MIN_SUPPORTED_YEAR",
    "GrossToNetRequest",
    "NetToGrossRequest",
    "SalaryBreakdown",
    "SalaryCalculationRequest",
    "SalaryCalculationResult",
    "SalaryContextInput",
    "SalaryLimits",
    "format_validation_error",
    "parse_request",
]

MIN_SUPPORTED_YEAR = 2024
DEFAULT_MAX_ITERATIONS = 50
DEFAULT_PRECISION = 0.01
MAX_ITERATIONS_RANGE = (10, 200)
MAX_PRECISION = 10.0

# Error types raised by the validators below already carry user-facing text.
_DOMAIN_ERROR_CODES = frozenset(
    {
        "invalid_year",
        "invalid_month",
        "invalid_dependent_count",
        "invalid_disability_degree",
        "invalid_max_iterations",
        "invalid_precision",
        "invalid_gross_salary",
        "invalid_net_salary",
        "ambiguous_salary",
        "missing_salary",
    }
)

RequestModel = TypeVar("RequestModel", bound=BaseModel)


def _require_positive(value: float | None, code: str, label: str) -> float | None:
    if value is None or not math.isfinite(value) or value <= 0:
        raise PydanticCustomError(code, f"{label} must be a positive number")
    return value


class SalaryContextInput(BaseModel):
    """Optional calculation context shared by every salary request."""

    model_config = ConfigDict(
        extra="forbid", alias_generator=to_camel, populate_by_name=True
    )

    year: int | None = None
    month: int | None = None
    is_married: bool = False
    dependent_count: int = 0
    is_disabled: bool = False
    disability_degree: int | None = None

    @field_validator("is_married", "is_disabled", mode="before")
    @classmethod
    def _coerce_flags(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("dependent_count", mode="before")
    @classmethod
    def _default_dependants(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("year")
    @classmethod
    def _validate_year(cls, value: int | None) -> int | None:
        if value is None:
            return value
        latest = date.today().year + 1
        if value < MIN_SUPPORTED_YEAR or value > latest:
            raise PydanticCustomError(
                "invalid_year",
                "Year must be between {minimum} and {maximum}",
                {"minimum": MIN_SUPPORTED_YEAR, "maximum": latest},
            )
        return value

    @field_validator("month")
    @classmethod
    def _validate_month(cls, value: int | None) -> int | None:
        if value is not None and not 1 <= value <= 12:
            raise PydanticCustomError("invalid_month", "Month must be between 1 and 12")
        return value

    @field_validator("dependent_count")
    @classmethod
    def _validate_dependants(cls, value: int) -> int:
        if value < 0:
            raise PydanticCustomError(
                "invalid_dependent_count", "Dependent count cannot be negative"
            )
        return value

    @field_validator("disability_degree")
    @classmethod
    def _validate_disability_degree(cls, value: int | None) -> int | None:
        if value is not None and value not in (1, 2, 3):
            raise PydanticCustomError(
                "invalid_disability_degree", "Disability degree must be 1, 2, or 3"
            )
        return value


class SolverOptionsMixin(BaseModel):
    """Tuning knobs for the net to gross solver."""

    model_config = ConfigDict(
        extra="forbid", alias_generator=to_camel, populate_by_name=True
    )

    max_iterations: int | None = None
    precision: float | None = None

    @field_validator("max_iterations")
    @classmethod
    def _validate_max_iterations(cls, value: int | None) -> int | None:
        low, high = MAX_ITERATIONS_RANGE
        if value is not None and not low <= value <= high:
            raise PydanticCustomError(
                "invalid_max_iterations",
                "Max iterations must be between {low} and {high} (got {value})",
                {"low": low, "high": high, "value": value},
            )
        return value

    @field_validator("precision")
    @classmethod
    def _validate_precision(cls, value: float | None) -> float | None:
        if value is not None and not 0 < value <= MAX_PRECISION:
            raise PydanticCustomError(
                "invalid_precision", "Precision must be greater than 0 and at most 10"
            )
        return value

    @property
    def resolved_max_iterations(self) -> int:
        return self.max_iterations or DEFAULT_MAX_ITERATIONS

    @property
    def resolved_precision(self) -> float:
        return self.precision or DEFAULT_PRECISION


class GrossToNetRequest(SalaryContextInput):
    """Request for deriving net pay from a known gross salary."""

    gross_salary: float | None = Field(default=None, validate_default=True)

    @field_validator("gross_salary")
    @classmethod
    def _validate_gross(cls, value: float | None) -> float | None:
        return _require_positive(value, "invalid_gross_salary", "Gross salary")


class NetToGrossRequest(SolverOptionsMixin, SalaryContextInput):
    """Request for deriving the gross salary that yields a target net pay."""

    net_salary: float | None = Field(default=None, validate_default=True)

    @field_validator("net_salary")
    @classmethod
    def _validate_net(cls, value: float | None) -> float | None:
        return _require_positive(value, "invalid_net_salary", "Net salary")


class SalaryCalculationRequest(SolverOptionsMixin, SalaryContextInput):
    """Dispatcher payload carrying exactly one of gross or net salary."""

    gross_salary: float | None = None
    net_salary: float | None = None

    @field_validator("gross_salary")
    @classmethod
    def _validate_gross(cls, value: float | None) -> float | None:
        if value is None:
            return value
        return _require_positive(value, "invalid_gross_salary", "Gross salary")

    @field_validator("net_salary")
    @classmethod
    def _validate_net(cls, value: float | None) -> float | None:
        if value is None:
            return value
        return _require_positive(value, "invalid_net_salary", "Net salary")

    @staticmethod
    def _direction_error(has_gross: bool, has_net: bool) -> PydanticCustomError | None:
        if has_gross and has_net:
            return PydanticCustomError(
                "ambiguous_salary",
                "Cannot specify both gross and net salary. Please provide only one.",
            )
        if not has_gross and not has_net:
            return PydanticCustomError(
                "missing_salary", "Must specify either gross or net salary."
            )
        return None

    @model_validator(mode="after")
    def _require_single_direction(self) -> "SalaryCalculationRequest":
        error = self._direction_error(
            self.gross_salary is not None, self.net_salary is not None
        )
        if error is not None:
            raise error
        return self

    @classmethod
    def direction_issues(cls, payload: Mapping[str, Any]) -> list[ValidationIssue]:
        """Return the gross/net presence problem found in a raw ``payload``.

        Field errors stop pydantic before ``_require_single_direction`` runs, so
        ``parse_request`` uses this to report both kinds of problem together.
        """

        def supplied(name: str) -> bool:
            return payload.get(name, payload.get(to_camel(name))) is not None

        error = cls._direction_error(supplied("gross_salary"), supplied("net_salary"))
        if error is None:
            return []
        return [ValidationIssue(field="", message=error.message(), code=error.type)]


class SalaryBreakdown(BaseModel):
    """Intermediate figures explaining how the income tax was derived."""

    model_config = ConfigDict(frozen=True)

    taxable_income: float
    applied_tax_bracket: TaxBracket
    minimum_wage_exemption: float
    minimum_living_allowance: float
    effective_tax_rate: float


class SalaryCalculationResult(BaseModel):
    """Full payroll breakdown for a single monthly salary."""

    model_config = ConfigDict(frozen=True)

    gross_salary: float
    net_salary: float
    sgk_employee_share: float
    unemployment_insurance: float
    income_tax: float
    stamp_tax: float
    total_deductions: float
    employer_cost: float
    employer_sgk_share: float
    employer_unemployment_insurance: float
    breakdown: SalaryBreakdown


class SalaryLimits(BaseModel):
    """Policy bounds for salaries in a given year."""

    model_config = ConfigDict(frozen=True)

    min_gross_salary: float
    max_gross_salary: float
    min_net_salary: float
    max_net_salary: float


def _issue_from_error(error: Mapping[str, Any]) -> ValidationIssue:
    location = ".".join(str(part) for part in error.get("loc", ()))
    message = error.get("msg", "Invalid value")
    code = str(error.get("type", "invalid"))
    if code == "extra_forbidden":
        message = f"Unknown field '{location}'"
    elif location and code not in _DOMAIN_ERROR_CODES:
        message = f"{location}: {message}"
    return ValidationIssue(field=location, message=message, code=code)


def format_validation_error(error: ValidationError) -> SalaryValidationError:
    """Convert a pydantic ``ValidationError`` into the domain error type."""

    issues = [_issue_from_error(issue) for issue in error.errors()]
    return SalaryValidationError(issues)


def parse_request(
    model: type[RequestModel], payload: Mapping[str, Any] | BaseModel
) -> RequestModel:
    """Validate ``payload`` against ``model`` raising ``SalaryValidationError``."""

    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_none=True)
    if not isinstance(payload, Mapping):
        raise SalaryValidationError(
            [ValidationIssue(field="", message="Payload must be a mapping", code="invalid_payload")]
        )
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        error = format_validation_error(exc)
        if not issubclass(model, SalaryCalculationRequest):
            raise error from exc

        issues = list(error.issues)
        reported = {issue.code for issue in issues}
        issues.extend(
            issue
            for issue in model.direction_issues(payload)
            if issue.code not in reported
        )
        raise SalaryValidationError(issues) from exc
