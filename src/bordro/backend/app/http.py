"""HTTP helper utilities shared across Flask blueprints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

from flask import current_app, jsonify

from bordro.backend.errors import (
    ConvergenceError,
    SalaryCalculationError,
    SalaryLimitError,
    SalaryValidationError,
    UnsupportedYearError,
)


if TYPE_CHECKING:  # pragma: no cover - only for static type checkers
    from bordro.backend.app.services import SalaryCalculator

CALCULATOR_EXTENSION = "bordro.salary_calculator"


@dataclass(frozen=True)
class ProblemResponse:
    """Lightweight representation of an RFC 7807-style error payload."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        if self.extra:
            payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Convenience factory mirroring Flask's ``jsonify`` interface."""

    additional: Mapping[str, Any] | None = extra or None
    return ProblemResponse(error=error, status=status, message=message, extra=additional)


def problem_from_error(error: SalaryCalculationError) -> ProblemResponse:
    """Map a calculation failure onto its problem payload and status code."""

    message = str(error)
    if isinstance(error, SalaryValidationError):
        return problem_response(
            "validation_error",
            status=400,
            message=message,
            issues=[issue.as_dict() for issue in error.issues],
        )
    if isinstance(error, UnsupportedYearError):
        return problem_response(
            "unsupported_year",
            status=404,
            message=message,
            year=error.year,
            supported_years=list(error.supported_years),
        )
    if isinstance(error, ConvergenceError):
        return problem_response(
            "convergence_error",
            status=422,
            message=message,
            iterations=error.iterations,
        )
    if isinstance(error, SalaryLimitError):
        return problem_response("salary_limit_exceeded", status=400, message=message)
    return problem_response("calculation_error", status=400, message=message)


def get_calculator() -> SalaryCalculator:
    """Return the calculator attached to the running application."""

    return current_app.extensions[CALCULATOR_EXTENSION]


__all__ = [
    "CALCULATOR_EXTENSION",
    "ProblemResponse",
    "get_calculator",
    "problem_from_error",
    "problem_response",
]
