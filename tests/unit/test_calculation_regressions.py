"""Regression coverage ensuring calculator outputs stay stable."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from bordro.backend.app.services import SalaryCalculator

_DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "salary_scenarios.json"


@pytest.mark.parametrize(
    "scenario",
    json.loads(_DATA_PATH.read_text("utf-8")),
    ids=lambda item: f"{item['name']}_{item['payload']['year']}",
)
def test_gross_to_net_matches_regression_scenario(
    calculator: SalaryCalculator, scenario: dict[str, object]
) -> None:
    """The salary service returns the expected breakdown for known payloads."""

    payload = scenario["payload"]
    expectations = scenario["expectations"]

    result = calculator.calculate_gross_to_net(payload)

    assert result.gross_salary == pytest.approx(payload["grossSalary"])
    for key, value in expectations["result"].items():
        assert getattr(result, key) == pytest.approx(value, abs=1e-6), key

    for key, value in expectations["breakdown"].items():
        assert getattr(result.breakdown, key) == pytest.approx(value, abs=1e-6), key

    assert result.breakdown.applied_tax_bracket.min_amount == expectations["bracket_min"]


@pytest.mark.parametrize(
    "scenario",
    json.loads(_DATA_PATH.read_text("utf-8")),
    ids=lambda item: item["name"],
)
def test_net_to_gross_recovers_regression_gross(
    calculator: SalaryCalculator, scenario: dict[str, object]
) -> None:
    payload = dict(scenario["payload"])
    gross = payload.pop("grossSalary")
    payload["netSalary"] = scenario["expectations"]["result"]["net_salary"]

    result = calculator.calculate_net_to_gross(payload)

    assert result.gross_salary == pytest.approx(gross, abs=0.05)
    assert result.net_salary == pytest.approx(payload["netSalary"], abs=0.01)
