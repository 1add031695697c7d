"""Orchestrate request validation, configuration lookup and payroll maths.

``SalaryCalculator`` is the entry point for both directions of the payroll
computation. Gross to net is a straight pass through the calculators; net to
gross has no closed form (the SGK clamp, the bracket boundaries and the stamp
tax exemption all introduce kinks), so it is solved by bisection over the
gross to net function, which is monotonically non-decreasing.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import date
from functools import lru_cache
from time import perf_counter
from typing import Any

from pydantic import BaseModel

from bordro.backend.app.models import (
    CalculationContext,
    GrossToNetRequest,
    NetToGrossRequest,
    SalaryBreakdown,
    SalaryCalculationRequest,
    SalaryCalculationResult,
    SalaryContextInput,
    SalaryLimits,
    parse_request,
)
from bordro.backend.config.year_config import (
    TaxConfiguration,
    TaxConfigurationRegistry,
    default_registry,
)
from bordro.backend.errors import ConvergenceError

from .calculators import (
    calculate_income_tax,
    calculate_minimum_living_allowance,
    calculate_minimum_wage_exemption,
    calculate_sgk_contributions,
    calculate_stamp_tax,
    validate_salary_limits,
)

_LOGGER = logging.getLogger(__name__)

DEFAULT_YEAR_ENV = "BORDRO_DEFAULT_YEAR"
PROFILE_ENV = "BORDRO_PROFILE_CALCULATIONS"

# Seeds for the bisection interval, as multiples of the target net salary.
# Total deductions between 10% and roughly 50% of gross keep the root inside
# [1.1, 2.0] for every bundled configuration.
LOWER_BOUND_FACTOR = 1.1
UPPER_BOUND_FACTOR = 2.0
INITIAL_GUESS_FACTOR = 1.3

# Approximate net ceiling relative to the SGK upper limit.
NET_CEILING_FACTOR = 0.7

Payload = Mapping[str, Any] | BaseModel


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv(PROFILE_ENV, "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None) -> Iterator[None]:
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _log_timings(label: str, timings: dict[str, float] | None) -> None:
    if timings:
        _LOGGER.debug(
            "%s timings (ms): %s",
            label,
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )


def resolve_default_year(today: date | None = None) -> int:
    """Return the tax year used when a request omits one."""

    raw = os.getenv(DEFAULT_YEAR_ENV, "").strip()
    if raw:
        try:
            return int(raw)
        except ValueError:
            _LOGGER.warning("Ignoring invalid value for %s: %s", DEFAULT_YEAR_ENV, raw)
    return (today or date.today()).year


class SalaryCalculator:
    """Compute payroll figures against an explicitly supplied registry."""

    def __init__(self, registry: TaxConfigurationRegistry) -> None:
        self.registry = registry

    def calculate_gross_to_net(self, payload: Payload) -> SalaryCalculationResult:
        """Return the full deduction breakdown for a known gross salary."""

        request = parse_request(GrossToNetRequest, payload)
        return self._gross_to_net(request, request.gross_salary)

    def calculate_net_to_gross(self, payload: Payload) -> SalaryCalculationResult:
        """Find the gross salary whose net pay matches the requested amount."""

        request = parse_request(NetToGrossRequest, payload)
        return self._net_to_gross(
            request,
            request.net_salary,
            max_iterations=request.resolved_max_iterations,
            precision=request.resolved_precision,
        )

    def calculate_salary(self, payload: Payload) -> SalaryCalculationResult:
        """Dispatch to the gross or net computation, whichever was supplied."""

        request = parse_request(SalaryCalculationRequest, payload)
        if request.gross_salary is not None:
            return self._gross_to_net(request, request.gross_salary)

        return self._net_to_gross(
            request,
            request.net_salary,
            max_iterations=request.resolved_max_iterations,
            precision=request.resolved_precision,
        )

    def get_salary_limits(self, year: int | None = None) -> SalaryLimits:
        resolved_year = year or resolve_default_year()
        limits = self.registry.get_sgk_limits(resolved_year)
        minimum_wage = self.registry.get_minimum_wage(resolved_year)

        return SalaryLimits(
            min_gross_salary=minimum_wage.gross,
            max_gross_salary=limits.upper_limit,
            min_net_salary=minimum_wage.net,
            max_net_salary=limits.upper_limit * NET_CEILING_FACTOR,
        )

    def _resolve_period(self, request: SalaryContextInput) -> tuple[int, int]:
        today = date.today()
        year = request.year or resolve_default_year(today)
        month = request.month or today.month
        return year, month

    def _build_context(
        self, request: SalaryContextInput, gross_salary: float, year: int, month: int
    ) -> CalculationContext:
        return CalculationContext(
            year=year,
            month=month,
            cumulative_income=gross_salary * month,
            cumulative_tax=0.0,
            is_married=request.is_married,
            dependent_count=request.dependent_count,
            is_disabled=request.is_disabled,
            disability_degree=request.disability_degree,
        )

    def _gross_to_net(
        self, request: SalaryContextInput, gross_salary: float
    ) -> SalaryCalculationResult:
        year, month = self._resolve_period(request)
        config = self.registry.get_configuration(year)
        return self._evaluate(request, gross_salary, config, month)

    def _evaluate(
        self,
        request: SalaryContextInput,
        gross_salary: float,
        config: TaxConfiguration,
        month: int,
    ) -> SalaryCalculationResult:
        validate_salary_limits(gross_salary, config)
        context = self._build_context(request, gross_salary, config.year, month)

        sgk = calculate_sgk_contributions(gross_salary, config)
        taxable_income = gross_salary - sgk.employee_total
        income_tax = calculate_income_tax(taxable_income, context, config)
        stamp_tax = calculate_stamp_tax(gross_salary, config)

        total_deductions = sgk.employee_total + income_tax.tax + stamp_tax
        employer_cost = gross_salary + sgk.employer_share + sgk.unemployment_employer

        breakdown = SalaryBreakdown(
            taxable_income=taxable_income,
            applied_tax_bracket=income_tax.applied_bracket,
            minimum_wage_exemption=calculate_minimum_wage_exemption(gross_salary, config),
            minimum_living_allowance=calculate_minimum_living_allowance(config, context),
            effective_tax_rate=income_tax.effective_rate,
        )

        return SalaryCalculationResult(
            gross_salary=gross_salary,
            net_salary=gross_salary - total_deductions,
            sgk_employee_share=sgk.employee_share,
            unemployment_insurance=sgk.unemployment_employee,
            income_tax=income_tax.tax,
            stamp_tax=stamp_tax,
            total_deductions=total_deductions,
            employer_cost=employer_cost,
            employer_sgk_share=sgk.employer_share,
            employer_unemployment_insurance=sgk.unemployment_employer,
            breakdown=breakdown,
        )

    def _net_to_gross(
        self,
        request: SalaryContextInput,
        net_salary: float,
        *,
        max_iterations: int,
        precision: float,
    ) -> SalaryCalculationResult:
        timings: dict[str, float] | None = {} if _profiling_enabled() else None

        with _profile_section("configuration", timings):
            year, month = self._resolve_period(request)
            config = self.registry.get_configuration(year)

        with _profile_section("bisection", timings):
            result = self._bisect(
                request,
                net_salary,
                config,
                month,
                max_iterations=max_iterations,
                precision=precision,
            )

        _log_timings("net_to_gross", timings)
        return result

    def _bisect(
        self,
        request: SalaryContextInput,
        net_salary: float,
        config: TaxConfiguration,
        month: int,
        *,
        max_iterations: int,
        precision: float,
    ) -> SalaryCalculationResult:
        lower_bound = net_salary * LOWER_BOUND_FACTOR
        upper_bound = net_salary * UPPER_BOUND_FACTOR
        guess = net_salary * INITIAL_GUESS_FACTOR

        for iteration in range(1, max_iterations + 1):
            result = self._evaluate(request, guess, config, month)
            difference = result.net_salary - net_salary

            if abs(difference) <= precision:
                _LOGGER.debug(
                    "Net %.2f solved to gross %.2f in %d iteration(s)",
                    net_salary,
                    guess,
                    iteration,
                )
                return result

            if difference > 0:
                upper_bound = guess
            else:
                lower_bound = guess
            guess = (lower_bound + upper_bound) / 2

            if upper_bound - lower_bound < precision:
                # Flat stretches (clamped SGK base) can leave the interval
                # collapsed without ever meeting the net tolerance.
                result = self._evaluate(request, guess, config, month)
                if abs(result.net_salary - net_salary) > precision:
                    _LOGGER.warning(
                        "Bisection interval collapsed at gross %.2f with net %.2f "
                        "(target %.2f)",
                        guess,
                        result.net_salary,
                        net_salary,
                    )
                return result

        _LOGGER.warning(
            "Net to gross did not converge for net %.2f after %d iterations",
            net_salary,
            max_iterations,
        )
        raise ConvergenceError(max_iterations)


@lru_cache(maxsize=1)
def get_salary_calculator() -> SalaryCalculator:
    """Return a calculator bound to the bundled configuration registry."""

    return SalaryCalculator(default_registry())


__all__ = [
    "DEFAULT_YEAR_ENV",
    "PROFILE_ENV",
    "SalaryCalculator",
    "get_salary_calculator",
    "resolve_default_year",
]
