"""Utilities for validating year configuration data and surfacing issues.

The schema already rejects structurally broken files (unordered brackets,
discontinuous cumulative tax, rates outside ``[0, 1]``). The checks here catch
data that parses but is inconsistent with how Turkish payroll figures relate to
each other, which is what usually goes wrong when a new year is added by hand.
"""

from __future__ import annotations

import argparse
from typing import Sequence

from .year_config import (
    MinimumWage,
    SGKRates,
    TaxConfiguration,
    available_years,
    load_year_configuration,
)

# Daily minimum wage is the monthly figure over 30 days; hourly assumes a
# 7.5 hour working day.
_DAYS_PER_MONTH = 30
_HOURS_PER_DAY = 7.5
_AMOUNT_TOLERANCE = 0.05


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_sgk(scope: str, rates: SGKRates, minimum_wage: MinimumWage) -> list[str]:
    errors: list[str] = []

    if rates.employer_discounted_rate > rates.employer_rate:
        errors.append(
            _format_scope(scope, "discounted employer rate cannot exceed the employer rate")
        )

    if abs(rates.lower_limit - minimum_wage.gross) > _AMOUNT_TOLERANCE:
        errors.append(
            _format_scope(
                scope,
                (
                    f"lower limit {rates.lower_limit} should equal the minimum wage "
                    f"gross {minimum_wage.gross}"
                ),
            )
        )

    if rates.upper_limit <= rates.lower_limit:
        errors.append(_format_scope(scope, "upper limit must exceed the lower limit"))

    return errors


def _validate_minimum_wage(scope: str, minimum_wage: MinimumWage) -> list[str]:
    errors: list[str] = []

    expected_daily = minimum_wage.gross / _DAYS_PER_MONTH
    if abs(minimum_wage.daily - expected_daily) > _AMOUNT_TOLERANCE:
        errors.append(
            _format_scope(
                scope,
                f"daily amount {minimum_wage.daily} does not match gross / {_DAYS_PER_MONTH}",
            )
        )

    expected_hourly = minimum_wage.daily / _HOURS_PER_DAY
    if abs(minimum_wage.hourly - expected_hourly) > _AMOUNT_TOLERANCE:
        errors.append(
            _format_scope(
                scope,
                f"hourly amount {minimum_wage.hourly} does not match daily / {_HOURS_PER_DAY}",
            )
        )

    return errors


def _validate_brackets(config: TaxConfiguration) -> list[str]:
    errors: list[str] = []
    rates = [bracket.rate for bracket in config.brackets]
    if rates != sorted(rates):
        errors.append(
            _format_scope("income_tax.brackets", "rates should not decrease as income rises")
        )
    return errors


def _validate_allowances(config: TaxConfiguration) -> list[str]:
    errors: list[str] = []
    allowance = config.minimum_living_allowance
    if allowance.married < allowance.single:
        errors.append(
            _format_scope(
                "income_tax.minimum_living_allowance",
                "married allowance should not be lower than the single allowance",
            )
        )

    degrees = sorted(entry.degree for entry in config.disability_deductions)
    if degrees and degrees != [1, 2, 3]:
        errors.append(
            _format_scope(
                "income_tax.disability_deductions",
                f"expected amounts for degrees 1, 2 and 3, found {degrees}",
            )
        )

    amounts = [config.disability_amount(degree) for degree in degrees]
    if amounts != sorted(amounts, reverse=True):
        errors.append(
            _format_scope(
                "income_tax.disability_deductions",
                "amounts should decrease from degree 1 to degree 3",
            )
        )

    return errors


def validate_year_configuration(config: TaxConfiguration) -> list[str]:
    """Return a list of validation issues for the provided configuration."""

    errors: list[str] = []

    errors.extend(_validate_sgk("sgk", config.sgk_rates, config.minimum_wage))
    errors.extend(_validate_minimum_wage("minimum_wage", config.minimum_wage))
    errors.extend(_validate_brackets(config))
    errors.extend(_validate_allowances(config))

    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate all configured years and return issues keyed by year."""

    targets = years or available_years()
    results: dict[int, list[str]] = {}

    for year in targets:
        config = load_year_configuration(year)
        results[int(year)] = validate_year_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate configured payroll tax years and report inconsistencies."
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific years to validate (defaults to all configured years)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    if not years:
        parser.print_help()
        return 1

    exit_code = 0

    for year in years:
        try:
            config = load_year_configuration(year)
        except (FileNotFoundError, ValueError) as error:
            print(f"[{year}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_year_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{year}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{year}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
