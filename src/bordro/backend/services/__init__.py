"""Request/response helpers shared by the payroll HTTP routes."""

from .request_parser import parse_salary_payload, parse_year_argument
from .response_builder import (
    build_configuration_response,
    build_limits_response,
    build_salary_response,
)

__all__ = [
    "build_configuration_response",
    "build_limits_response",
    "build_salary_response",
    "parse_salary_payload",
    "parse_year_argument",
]
