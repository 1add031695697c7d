"""Utilities for serialising payroll results into JSON responses."""

from __future__ import annotations

from typing import Any, Tuple

from flask import jsonify

from bordro.backend.app.models import SalaryCalculationResult, SalaryLimits
from bordro.backend.app.services.calculators import (
    format_percentage,
    round_currency,
    round_rate,
)
from bordro.backend.config.year_config import TaxBracket, TaxConfiguration

ResponseTuple = Tuple[Any, int]

_RATE_FIELDS = frozenset({"effective_tax_rate", "rate"})


def _round_amounts(payload: dict[str, Any]) -> dict[str, Any]:
    rounded: dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, dict):
            rounded[key] = _round_amounts(value)
        elif isinstance(value, float):
            rounded[key] = round_rate(value) if key in _RATE_FIELDS else round_currency(value)
        else:
            rounded[key] = value
    return rounded


def _serialise_bracket(bracket: TaxBracket) -> dict[str, Any]:
    return {
        **bracket.model_dump(mode="json"),
        "label": format_percentage(bracket.rate),
    }


def serialise_salary_result(result: SalaryCalculationResult) -> dict[str, Any]:
    """Return ``result`` as JSON-ready data with money rounded to kuruş."""

    payload = _round_amounts(result.model_dump(mode="json"))
    payload["breakdown"]["applied_tax_bracket"] = _serialise_bracket(
        result.breakdown.applied_tax_bracket
    )
    return payload


def build_salary_response(result: SalaryCalculationResult) -> ResponseTuple:
    """Return a Flask JSON response for a salary calculation ``result``."""

    return jsonify(serialise_salary_result(result)), 200


def build_limits_response(year: int, limits: SalaryLimits) -> ResponseTuple:
    payload = {"year": year, **_round_amounts(limits.model_dump(mode="json"))}
    return jsonify(payload), 200


def build_configuration_response(config: TaxConfiguration) -> ResponseTuple:
    """Expose the year configuration, labelling each bracket rate."""

    payload = config.model_dump(mode="json")
    payload["brackets"] = [_serialise_bracket(bracket) for bracket in config.brackets]
    return jsonify(payload), 200
