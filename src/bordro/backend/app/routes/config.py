"""Expose configuration metadata for clients choosing a tax year."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify

from bordro.backend.app.http import get_calculator
from bordro.backend.app.services import SalaryCalculator
from bordro.backend.app.services.salary_service import resolve_default_year
from bordro.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata(calculator: SalaryCalculator) -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration registry."""

    supported_years = list(calculator.registry.available_years())
    default_year = resolve_default_year()
    if default_year not in supported_years:
        default_year = supported_years[-1] if supported_years else None
    return {
        "version": get_project_version(),
        "supported_years": supported_years,
        "default_year": default_year,
    }


def _serialise_year(calculator: SalaryCalculator, year: int) -> dict[str, Any]:
    registry = calculator.registry
    minimum_wage = registry.get_minimum_wage(year)
    limits = registry.get_sgk_limits(year)
    return {
        "year": year,
        "minimum_wage": minimum_wage.model_dump(mode="json"),
        "sgk_limits": {
            "lower_limit": limits.lower_limit,
            "upper_limit": limits.upper_limit,
        },
        "stamp_tax_minimum_wage_exempt": registry.is_minimum_wage_exempt_for_stamp_tax(year),
    }


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose lightweight application metadata such as the version identifier."""

    calculator = get_calculator()
    return jsonify(get_configuration_metadata(calculator)), 200


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return all configured years with their headline payroll figures."""

    calculator = get_calculator()
    metadata = get_configuration_metadata(calculator)
    payload = {
        "years": [
            _serialise_year(calculator, year) for year in metadata["supported_years"]
        ],
        "default_year": metadata["default_year"],
        "supported_years": metadata["supported_years"],
    }
    return jsonify(payload), 200
