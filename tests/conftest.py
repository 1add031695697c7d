"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from bordro.backend.app import create_app  # noqa: E402
from bordro.backend.app.services import SalaryCalculator  # noqa: E402
from bordro.backend.config.year_config import (  # noqa: E402
    TaxConfiguration,
    TaxConfigurationRegistry,
    load_year_configuration,
)


@pytest.fixture()
def registry() -> TaxConfigurationRegistry:
    """Return a fresh registry backed by the bundled YAML files."""

    return TaxConfigurationRegistry.from_manifest()


@pytest.fixture()
def config_2025() -> TaxConfiguration:
    return load_year_configuration(2025)


@pytest.fixture()
def calculator(registry: TaxConfigurationRegistry) -> SalaryCalculator:
    return SalaryCalculator(registry)


@pytest.fixture()
def app(calculator: SalaryCalculator) -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app(calculator)
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()
