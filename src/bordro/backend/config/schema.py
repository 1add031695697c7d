"""Pydantic models describing the payroll tax year configuration schema."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self

# Cumulative tax figures are published rounded to whole lira; anything beyond
# this tolerance is a genuine discontinuity in the schedule.
CUMULATIVE_TAX_TOLERANCE = 0.01


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _validate_rate(value: float, label: str) -> float:
    if value < 0 or value > 1:
        raise ConfigurationError(f"{label} must be between 0 and 1")
    return value


class TaxBracket(ImmutableModel):
    """Single income tax bracket with its pre-computed cumulative tax."""

    min_amount: float = Field(alias="min")
    max_amount: float | None = Field(default=None, alias="max")
    rate: float
    cumulative_tax: float = 0.0

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBracket:
        _validate_rate(self.rate, "Tax rates")
        if self.min_amount < 0:
            raise ConfigurationError("Bracket lower bounds must be non-negative")
        if self.max_amount is not None and self.max_amount <= self.min_amount:
            raise ConfigurationError("Bracket upper bounds must exceed lower bounds")
        if self.cumulative_tax < 0:
            raise ConfigurationError("Cumulative tax must be non-negative")
        return self

    @property
    def width(self) -> float | None:
        if self.max_amount is None:
            return None
        return self.max_amount - self.min_amount

    def tax_at_upper_bound(self) -> float | None:
        """Return the total tax owed at ``max_amount`` (``None`` if unbounded)."""

        if self.width is None:
            return None
        return self.cumulative_tax + self.rate * self.width


class SGKRates(ImmutableModel):
    """Social security (SGK) and unemployment insurance parameters."""

    employee_rate: float
    employer_rate: float
    employer_discounted_rate: float
    unemployment_employee_rate: float
    unemployment_employer_rate: float
    short_term_insurance_rate: float = 0.0
    lower_limit: float
    upper_limit: float
    apply_employer_discount: bool = True

    @model_validator(mode="after")
    def _validate_rates(self) -> SGKRates:
        for name in (
            "employee_rate",
            "employer_rate",
            "employer_discounted_rate",
            "unemployment_employee_rate",
            "unemployment_employer_rate",
            "short_term_insurance_rate",
        ):
            _validate_rate(getattr(self, name), f"SGK '{name}'")
        if self.lower_limit < 0:
            raise ConfigurationError("SGK lower limit must be non-negative")
        if self.upper_limit < self.lower_limit:
            raise ConfigurationError("SGK upper limit cannot be below the lower limit")
        return self

    @property
    def effective_employer_rate(self) -> float:
        if self.apply_employer_discount:
            return self.employer_discounted_rate
        return self.employer_rate


class MinimumWage(ImmutableModel):
    """Statutory minimum wage figures for a year."""

    gross: float
    net: float
    daily: float
    hourly: float

    @model_validator(mode="after")
    def _validate_amounts(self) -> MinimumWage:
        for name in ("gross", "net", "daily", "hourly"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"Minimum wage '{name}' must be non-negative")
        if self.net > self.gross:
            raise ConfigurationError("Minimum wage net cannot exceed gross")
        return self


class MinimumLivingAllowance(ImmutableModel):
    """Tax-free allowance selected by marital status and dependants."""

    single: float
    married: float
    per_child: float

    @model_validator(mode="after")
    def _validate_amounts(self) -> MinimumLivingAllowance:
        if min(self.single, self.married, self.per_child) < 0:
            raise ConfigurationError("Minimum living allowances must be non-negative")
        return self

    def amount_for(self, is_married: bool, dependants: int) -> float:
        base = self.married if is_married else self.single
        return base + dependants * self.per_child


class DisabilityDeduction(ImmutableModel):
    """Additional tax-free allowance for a disability degree."""

    degree: int
    amount: float

    @field_validator("degree")
    @classmethod
    def _validate_degree(cls, value: int) -> int:
        if value not in (1, 2, 3):
            raise ConfigurationError("Disability degree must be 1, 2, or 3")
        return value

    @field_validator("amount")
    @classmethod
    def _validate_amount(cls, value: float) -> float:
        if value < 0:
            raise ConfigurationError("Disability deduction amounts must be non-negative")
        return value


class TaxConfiguration(ImmutableModel):
    """Structured representation of a payroll tax year."""

    year: int
    meta: Mapping[str, Any] = Field(default_factory=dict)
    brackets: Sequence[TaxBracket]
    sgk_rates: SGKRates
    stamp_tax_rate: float
    minimum_wage: MinimumWage
    minimum_living_allowance: MinimumLivingAllowance
    disability_deductions: Sequence[DisabilityDeduction] = Field(default_factory=tuple)

    @model_validator(mode="before")
    @classmethod
    def _flatten_sections(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration file must define a mapping at the top level")

        prepared = dict(data)
        meta = prepared.get("meta")
        if meta is None:
            prepared["meta"] = {}
        elif not isinstance(meta, Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")

        income_tax = prepared.pop("income_tax", None)
        if income_tax is not None:
            if not isinstance(income_tax, Mapping):
                raise ConfigurationError("'income_tax' section must be a mapping")
            for key in ("brackets", "minimum_living_allowance", "disability_deductions"):
                if key in income_tax:
                    prepared[key] = income_tax[key]

        if "sgk" in prepared:
            prepared["sgk_rates"] = prepared.pop("sgk")

        stamp_tax = prepared.pop("stamp_tax", None)
        if stamp_tax is not None:
            if not isinstance(stamp_tax, Mapping) or "rate" not in stamp_tax:
                raise ConfigurationError("'stamp_tax' section must define a 'rate'")
            prepared["stamp_tax_rate"] = stamp_tax["rate"]

        return prepared

    @field_validator("brackets", "disability_deductions", mode="before")
    @classmethod
    def _coerce_sequence(cls, value: Any) -> Sequence[Any]:
        if value is None:
            return ()
        if isinstance(value, Iterable) and not isinstance(value, (str, Mapping)):
            return tuple(value)
        raise ConfigurationError("Bracket and deduction tables must be lists")

    @model_validator(mode="after")
    def _validate_year(self) -> Self:
        _validate_rate(self.stamp_tax_rate, "Stamp tax rate")
        self._validate_bracket_sequence(self.brackets)

        degrees = [entry.degree for entry in self.disability_deductions]
        if len(degrees) != len(set(degrees)):
            raise ConfigurationError("Disability degrees must be unique")
        return self

    @staticmethod
    def _validate_bracket_sequence(brackets: Sequence[TaxBracket]) -> None:
        if not brackets:
            raise ConfigurationError("At least one tax bracket must be defined")
        if brackets[0].min_amount != 0:
            raise ConfigurationError("The first tax bracket must start at zero")
        if brackets[0].cumulative_tax != 0:
            raise ConfigurationError("The first tax bracket must carry no cumulative tax")

        for index, (previous, current) in enumerate(zip(brackets, brackets[1:]), start=1):
            if previous.max_amount is None:
                raise ConfigurationError("Only the final tax bracket may be unbounded")
            if current.min_amount <= previous.min_amount:
                raise ConfigurationError("Tax brackets must be in ascending order")
            if current.min_amount != previous.max_amount:
                raise ConfigurationError(
                    f"Tax bracket {index} must start where bracket {index - 1} ends"
                )
            expected = previous.tax_at_upper_bound()
            if expected is None or abs(current.cumulative_tax - expected) > CUMULATIVE_TAX_TOLERANCE:
                raise ConfigurationError(
                    f"Tax bracket {index} cumulative tax {current.cumulative_tax} "
                    f"does not match {expected} owed at its lower bound"
                )

        if brackets[-1].max_amount is not None:
            raise ConfigurationError("Final tax bracket must have an open upper bound")

    def disability_amount(self, degree: int | None) -> float:
        if degree is None:
            return 0.0
        for entry in self.disability_deductions:
            if entry.degree == degree:
                return entry.amount
        return 0.0

    @property
    def annual_salary_ceiling(self) -> float:
        return self.sgk_rates.upper_limit * 12


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported tax year in the manifest."""

    year: int
    filename: str | None = None
    status: str = "active"

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available tax year configuration files."""

    years: Sequence[TaxYearManifestEntry]

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))


__all__ = [
    "CUMULATIVE_TAX_TOLERANCE",
    "ConfigurationError",
    "DisabilityDeduction",
    "ImmutableModel",
    "MinimumLivingAllowance",
    "MinimumWage",
    "SGKRates",
    "TaxBracket",
    "TaxConfiguration",
    "TaxYearManifest",
    "TaxYearManifestEntry",
]
