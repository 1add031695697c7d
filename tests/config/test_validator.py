from bordro.backend.config.validator import (
    main,
    validate_all_years,
    validate_year_configuration,
)
from bordro.backend.config.year_config import load_year_configuration


def test_current_configurations_are_valid() -> None:
    results = validate_all_years()
    assert all(not issues for issues in results.values()), results


def test_validator_flags_sgk_floor_that_differs_from_minimum_wage() -> None:
    config = load_year_configuration(2025)
    sgk_rates = config.sgk_rates.model_copy(update={"lower_limit": 20_000})
    broken = config.model_copy(update={"sgk_rates": sgk_rates})

    errors = validate_year_configuration(broken)

    assert any(error.startswith("sgk:") and "minimum wage" in error for error in errors)


def test_validator_flags_discount_above_employer_rate() -> None:
    config = load_year_configuration(2025)
    sgk_rates = config.sgk_rates.model_copy(update={"employer_discounted_rate": 0.3})
    broken = config.model_copy(update={"sgk_rates": sgk_rates})

    errors = validate_year_configuration(broken)

    assert any("discounted employer rate" in error for error in errors)


def test_validator_flags_inconsistent_minimum_wage_breakdown() -> None:
    config = load_year_configuration(2025)
    minimum_wage = config.minimum_wage.model_copy(update={"daily": 900.0})
    broken = config.model_copy(update={"minimum_wage": minimum_wage})

    errors = validate_year_configuration(broken)

    assert any("daily amount" in error for error in errors)
    assert any("hourly amount" in error for error in errors)


def test_validator_flags_decreasing_rates_and_allowances() -> None:
    config = load_year_configuration(2025)
    brackets = list(config.brackets)
    brackets[1] = brackets[1].model_copy(update={"rate": 0.1})
    allowance = config.minimum_living_allowance.model_copy(update={"married": 10_000})
    broken = config.model_copy(
        update={"brackets": tuple(brackets), "minimum_living_allowance": allowance}
    )

    errors = validate_year_configuration(broken)

    assert any("income_tax.brackets" in error for error in errors)
    assert any("married allowance" in error for error in errors)


def test_cli_reports_success(capsys) -> None:
    assert main(["2025"]) == 0
    assert "[2025] OK" in capsys.readouterr().out


def test_cli_reports_unknown_year(capsys) -> None:
    assert main(["2019"]) == 1
    assert "[2019] failed to load configuration" in capsys.readouterr().out
