"""Error types raised by the payroll calculation core."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationIssue:
    """Single field-level problem found while validating a request."""

    field: str
    message: str
    code: str

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class SalaryCalculationError(ValueError):
    """Base class for recoverable, request-scoped calculation failures."""


class SalaryValidationError(SalaryCalculationError):
    """Raised when a request payload violates one or more input rules.

    Every issue found in the payload is reported at once so callers can fix
    their request in a single round trip.
    """

    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues: tuple[ValidationIssue, ...] = tuple(issues)
        messages = "; ".join(issue.message for issue in self.issues)
        super().__init__(f"Validation errors: {messages}")


class UnsupportedYearError(SalaryCalculationError):
    """Raised when no tax configuration is registered for a year."""

    def __init__(self, year: int, supported_years: Sequence[int] = ()) -> None:
        self.year = year
        self.supported_years: tuple[int, ...] = tuple(supported_years)
        super().__init__(f"Tax configuration not available for year {year}")


class ConvergenceError(SalaryCalculationError):
    """Raised when the net to gross solver exhausts its iteration budget."""

    def __init__(self, iterations: int) -> None:
        self.iterations = iterations
        super().__init__(
            f"Could not converge to solution after {iterations} iterations"
        )


class SalaryLimitError(SalaryCalculationError):
    """Raised when a gross salary falls outside the accepted range."""


__all__ = [
    "ConvergenceError",
    "SalaryCalculationError",
    "SalaryLimitError",
    "SalaryValidationError",
    "UnsupportedYearError",
    "ValidationIssue",
]
