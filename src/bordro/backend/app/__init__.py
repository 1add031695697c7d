"""Application factory for the payroll backend services."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING
from warnings import warn

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import BadRequest

from bordro.backend.config.schema import ConfigurationError
from bordro.backend.errors import SalaryCalculationError

from .http import CALCULATOR_EXTENSION, problem_from_error, problem_response

if TYPE_CHECKING:  # pragma: no cover - only for static type checkers
    from .services import SalaryCalculator

_LOGGER = logging.getLogger(__name__)

ALLOWED_ORIGINS_ENV = "BORDRO_ALLOWED_ORIGINS"


def _parse_allowed_origins(raw: str | None) -> set[str]:
    """Convert an environment variable into a normalised set of origins."""

    if not raw:
        return set()

    return {origin.strip() for origin in raw.split(",") if origin.strip()}


def create_app(calculator: SalaryCalculator | None = None) -> Flask:
    """Create and configure the Flask application instance.

    ``calculator`` defaults to the process-wide instance bound to the bundled
    tax configuration; tests pass their own to isolate registry state.
    """

    # Deferred: the route modules import request models from this package.
    from .routes import register_routes
    from .routes.config import get_configuration_metadata
    from .services import get_salary_calculator

    app = Flask(__name__)
    app.extensions[CALCULATOR_EXTENSION] = calculator or get_salary_calculator()

    allowed_origins = _parse_allowed_origins(os.getenv(ALLOWED_ORIGINS_ENV))

    if not allowed_origins:
        warn(
            "No allowed origins configured; cross-origin requests will be rejected.",
            stacklevel=1,
        )

    CORS(
        app,
        resources={r"/api/*": {"origins": sorted(allowed_origins)}},
        supports_credentials=False,
        methods=["GET", "OPTIONS", "POST"],
        allow_headers=["Content-Type"],
    )

    register_routes(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        payload = {
            "status": "ok",
            **get_configuration_metadata(app.extensions[CALCULATOR_EXTENSION]),
        }
        return jsonify(payload)

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        """Return consistent JSON responses for malformed payloads."""

        message = error.description or "Invalid request"
        return problem_response("bad_request", status=400, message=message).to_response()

    @app.errorhandler(SalaryCalculationError)
    def handle_calculation_error(error: SalaryCalculationError):
        """Map payroll domain errors onto problem responses."""

        problem = problem_from_error(error)
        if problem.status >= 422:
            _LOGGER.warning("Payroll calculation failed: %s", error)
        return problem.to_response()

    @app.errorhandler(ConfigurationError)
    def handle_configuration_error(error: ConfigurationError):
        """Report broken bundled tax data as a server fault."""

        _LOGGER.error("Tax configuration could not be loaded: %s", error)
        return problem_response(
            "configuration_error",
            status=500,
            message="Tax configuration is unavailable",
        ).to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        """Gracefully surface remaining validation errors to clients."""

        return problem_response(
            "validation_error", status=400, message=str(error)
        ).to_response()

    return app


__all__ = ["ALLOWED_ORIGINS_ENV", "create_app"]
