"""Integration tests for the health check endpoint."""

from http import HTTPStatus

import pytest
from flask.testing import FlaskClient

from bordro.backend.app.services.salary_service import DEFAULT_YEAR_ENV
from bordro.backend.version import get_project_version


def test_health_endpoint_reports_registered_years(
    client: FlaskClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(DEFAULT_YEAR_ENV, "2025")

    response = client.get("/health")

    assert response.status_code == HTTPStatus.OK
    assert response.mimetype == "application/json"
    assert response.get_json() == {
        "status": "ok",
        "version": get_project_version(),
        "supported_years": [2025],
        "default_year": 2025,
    }


@pytest.mark.parametrize("configured", ["2031", "not-a-year"])
def test_health_default_year_falls_back_to_latest_supported(
    client: FlaskClient, monkeypatch: pytest.MonkeyPatch, configured: str
) -> None:
    """An unregistered or unparsable default year never leaks into metadata."""

    monkeypatch.setenv(DEFAULT_YEAR_ENV, configured)

    payload = client.get("/health").get_json()

    assert payload["default_year"] == payload["supported_years"][-1] == 2025
