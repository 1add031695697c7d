"""REST endpoints for payroll calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from bordro.backend.app.http import get_calculator
from bordro.backend.app.services.salary_service import resolve_default_year
from bordro.backend.services import (
    build_configuration_response,
    build_limits_response,
    build_salary_response,
    parse_salary_payload,
    parse_year_argument,
)

blueprint = Blueprint("salary", __name__, url_prefix="/api/v1/salary")


@blueprint.post("/calculate")
def calculate_salary() -> tuple[Any, int]:
    """Compute payroll from whichever of gross or net salary was supplied."""

    payload = parse_salary_payload(request)
    return build_salary_response(get_calculator().calculate_salary(payload))


@blueprint.post("/gross-to-net")
def calculate_gross_to_net() -> tuple[Any, int]:
    payload = parse_salary_payload(request)
    return build_salary_response(get_calculator().calculate_gross_to_net(payload))


@blueprint.post("/net-to-gross")
def calculate_net_to_gross() -> tuple[Any, int]:
    payload = parse_salary_payload(request)
    return build_salary_response(get_calculator().calculate_net_to_gross(payload))


@blueprint.get("/limits")
def get_salary_limits() -> tuple[Any, int]:
    """Return minimum and maximum salary bounds for the requested year."""

    year = parse_year_argument(request) or resolve_default_year()
    limits = get_calculator().get_salary_limits(year)
    return build_limits_response(year, limits)


@blueprint.get("/tax-configuration")
def get_tax_configuration() -> tuple[Any, int]:
    year = parse_year_argument(request) or resolve_default_year()
    configuration = get_calculator().registry.get_configuration(year)
    return build_configuration_response(configuration)
