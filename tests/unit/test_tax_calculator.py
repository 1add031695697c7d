"""Unit tests for the pure payroll calculators."""

from __future__ import annotations

import pytest

from bordro.backend.app.models import CalculationContext
from bordro.backend.app.services.calculators import (
    calculate_disability_deduction,
    calculate_income_tax,
    calculate_minimum_living_allowance,
    calculate_minimum_wage_exemption,
    calculate_progressive_tax,
    calculate_sgk_contributions,
    calculate_stamp_tax,
    clamp,
    format_percentage,
    select_bracket,
    validate_salary_limits,
)
from bordro.backend.config.year_config import TaxConfiguration
from bordro.backend.errors import SalaryLimitError


def _context(**overrides) -> CalculationContext:
    values = {"year": 2025, "month": 1, "cumulative_income": 0.0}
    values.update(overrides)
    return CalculationContext(**values)


@pytest.mark.parametrize(
    ("amount", "expected_tax", "expected_min"),
    [
        (0, 0.0, 0),
        (100_000, 15_000.0, 0),
        (158_000, 23_700.0, 0),
        (200_000, 32_100.0, 158_000),
        (500_000, 104_000.0, 330_000),
        (1_200_000, 293_000.0, 330_000),
        (5_000_000, 1_658_000.0, 4_300_000),
    ],
)
def test_progressive_tax_uses_cumulative_brackets(
    config_2025: TaxConfiguration, amount: float, expected_tax: float, expected_min: float
) -> None:
    tax, bracket = calculate_progressive_tax(amount, config_2025.brackets)

    assert tax == pytest.approx(expected_tax)
    assert bracket.min_amount == expected_min


def test_select_bracket_falls_back_to_first_for_non_positive_amounts(
    config_2025: TaxConfiguration,
) -> None:
    assert select_bracket(-10, config_2025.brackets) is config_2025.brackets[0]


def test_income_tax_applies_allowances_before_brackets(
    config_2025: TaxConfiguration,
) -> None:
    context = _context(is_married=True, dependent_count=1)

    result = calculate_income_tax(42_500, context, config_2025)

    assert result.adjusted_income == pytest.approx(42_500 - 18_000 - 3_600)
    assert result.tax == pytest.approx(20_900 * 0.15)
    assert result.effective_rate == pytest.approx(0.15)


def test_income_tax_is_zero_when_allowances_exceed_income(
    config_2025: TaxConfiguration,
) -> None:
    result = calculate_income_tax(10_000, _context(), config_2025)

    assert result.tax == 0.0
    assert result.adjusted_income == 0.0
    assert result.effective_rate == 0.0
    assert result.applied_bracket is config_2025.brackets[0]


def test_minimum_living_allowance_counts_dependants(config_2025: TaxConfiguration) -> None:
    assert calculate_minimum_living_allowance(config_2025, _context()) == 14_400
    assert calculate_minimum_living_allowance(
        config_2025, _context(is_married=True, dependent_count=3)
    ) == pytest.approx(18_000 + 3 * 3_600)


@pytest.mark.parametrize(
    ("is_disabled", "degree", "expected"),
    [(True, 1, 9_900), (True, 2, 5_700), (True, 3, 2_400), (False, 1, 0), (True, None, 0)],
)
def test_disability_deduction(
    config_2025: TaxConfiguration, is_disabled: bool, degree: int | None, expected: float
) -> None:
    context = _context(is_disabled=is_disabled, disability_degree=degree)

    assert calculate_disability_deduction(config_2025, context) == pytest.approx(expected)


@pytest.mark.parametrize(
    ("gross", "expected_base"),
    [(10_000, 26_005.5), (50_000, 50_000), (500_000, 195_041.4)],
    ids=["below_floor", "within_limits", "above_ceiling"],
)
def test_sgk_base_is_clamped_to_limits(
    config_2025: TaxConfiguration, gross: float, expected_base: float
) -> None:
    sgk = calculate_sgk_contributions(gross, config_2025)

    assert sgk.sgk_base == pytest.approx(expected_base)
    assert sgk.employee_share == pytest.approx(expected_base * 0.14)
    assert sgk.unemployment_employee == pytest.approx(expected_base * 0.01)
    assert sgk.employer_share == pytest.approx(expected_base * 0.1875)
    assert sgk.unemployment_employer == pytest.approx(expected_base * 0.02)
    assert sgk.employee_total == pytest.approx(expected_base * 0.15)


def test_sgk_employer_share_without_discount(config_2025: TaxConfiguration) -> None:
    rates = config_2025.sgk_rates.model_copy(update={"apply_employer_discount": False})
    config = config_2025.model_copy(update={"sgk_rates": rates})

    sgk = calculate_sgk_contributions(50_000, config)

    assert sgk.employer_share == pytest.approx(50_000 * 0.2275)


def test_stamp_tax_exempts_minimum_wage_portion(config_2025: TaxConfiguration) -> None:
    assert calculate_stamp_tax(20_000, config_2025) == 0.0
    assert calculate_stamp_tax(50_000, config_2025) == pytest.approx(
        (50_000 - 26_005.5) * 0.00759
    )
    assert calculate_minimum_wage_exemption(50_000, config_2025) == pytest.approx(26_005.5)


def test_stamp_tax_applies_to_full_gross_before_exemption_year(
    config_2025: TaxConfiguration,
) -> None:
    config = config_2025.model_copy(update={"year": 2023})

    assert calculate_minimum_wage_exemption(50_000, config) == 0.0
    assert calculate_stamp_tax(50_000, config) == pytest.approx(50_000 * 0.00759)


def test_salary_limits(config_2025: TaxConfiguration) -> None:
    validate_salary_limits(0, config_2025)
    validate_salary_limits(195_041.4 * 12, config_2025)

    with pytest.raises(SalaryLimitError, match="cannot be negative"):
        validate_salary_limits(-1, config_2025)

    with pytest.raises(SalaryLimitError, match="annual limit of 2340496.80 TL"):
        validate_salary_limits(2_400_000, config_2025)


def test_helpers() -> None:
    assert clamp(5, 10, 20) == 10
    assert clamp(25, 10, 20) == 20
    assert format_percentage(0.15) == "15%"
    assert format_percentage(0.00759) == "0.76%"
