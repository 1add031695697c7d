"""Configuration loader and the per-year tax configuration registry."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache, partial
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from bordro.backend.errors import UnsupportedYearError

from .schema import (
    ConfigurationError,
    DisabilityDeduction,
    MinimumLivingAllowance,
    MinimumWage,
    SGKRates,
    TaxBracket,
    TaxConfiguration,
    TaxYearManifest,
    TaxYearManifestEntry,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
MANIFEST_FILE = CONFIG_DIRECTORY / "manifest.yaml"

# Wages up to the minimum wage are exempt from stamp tax from 2024 onwards.
STAMP_TAX_EXEMPTION_START_YEAR = 2024

_LOGGER = logging.getLogger(__name__)

ConfigurationFactory = Callable[[], TaxConfiguration]


@dataclass(frozen=True)
class SGKLimits:
    """Floor and ceiling applied to the SGK contribution base."""

    lower_limit: float
    upper_limit: float


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


def _resolve_directory(directory: Path | None) -> Path:
    return directory if directory is not None else CONFIG_DIRECTORY


@lru_cache(maxsize=4)
def load_manifest(directory: Path | None = None) -> TaxYearManifest:
    """Load and cache the configuration manifest."""

    manifest_file = (
        MANIFEST_FILE if directory is None else directory / MANIFEST_FILE.name
    )
    if not manifest_file.exists():
        raise FileNotFoundError("Configuration manifest not found")

    raw_manifest = _load_yaml(manifest_file)

    try:
        return TaxYearManifest.model_validate(raw_manifest)
    except ValidationError as error:
        raise ConfigurationError(f"Manifest validation failed: {error}") from error


def manifest_entries(directory: Path | None = None) -> Sequence[TaxYearManifestEntry]:
    """Expose the configured manifest entries."""

    return load_manifest(directory).years


def load_year_configuration(year: int, directory: Path | None = None) -> TaxConfiguration:
    """Load configuration for the specified tax year from disk.

    The result is not cached here; :class:`TaxConfigurationRegistry` owns the
    process-wide cache.
    """

    try:
        manifest_entry = load_manifest(directory).get_entry(year)
    except KeyError as exc:
        raise FileNotFoundError(f"Configuration for year {year} not declared in manifest") from exc

    config_file = _resolve_directory(directory) / manifest_entry.resolved_filename
    if not config_file.exists():
        raise FileNotFoundError(
            f"Configuration file for year {year} missing: {config_file.name}"
        )

    raw_config = _load_yaml(config_file)
    raw_config.setdefault("year", year)

    try:
        configuration = TaxConfiguration.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(f"Configuration validation failed for {year}: {error}") from error

    if configuration.year != year:
        raise ConfigurationError(
            f"Configuration year mismatch: expected {year}, found {configuration.year}"
        )

    _LOGGER.debug("Loaded tax configuration for %s from %s", year, config_file.name)
    return configuration


def is_minimum_wage_exempt_for_stamp_tax(year: int) -> bool:
    """Return ``True`` when minimum-wage earnings are exempt from stamp tax."""

    return year >= STAMP_TAX_EXEMPTION_START_YEAR


class TaxConfigurationRegistry:
    """Thread-safe, lazily populated mapping of tax year to configuration.

    Years are registered either as ready-made :class:`TaxConfiguration`
    instances or as zero-argument factories. Factories run at most once per
    year, on first access; the resulting configuration is kept for the life of
    the registry.
    """

    def __init__(self) -> None:
        self._factories: dict[int, ConfigurationFactory] = {}
        self._configurations: dict[int, TaxConfiguration] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_manifest(cls, directory: Path | None = None) -> TaxConfigurationRegistry:
        """Build a registry with one lazy YAML loader per manifest entry."""

        registry = cls()
        for entry in manifest_entries(directory):
            registry.register_year(
                entry.year, partial(load_year_configuration, entry.year, directory)
            )
        return registry

    def register_year(
        self,
        year: int,
        configuration: TaxConfiguration | ConfigurationFactory,
        *,
        replace: bool = False,
    ) -> None:
        """Register ``configuration`` (or a factory producing it) for ``year``."""

        if isinstance(configuration, TaxConfiguration):
            if configuration.year != year:
                raise ConfigurationError(
                    f"Configuration year mismatch: expected {year}, found {configuration.year}"
                )
            ready = configuration
            factory: ConfigurationFactory = lambda: ready  # noqa: E731
        elif callable(configuration):
            factory = configuration
        else:
            raise ConfigurationError("Configurations must be TaxConfiguration instances or factories")

        with self._lock:
            if year in self._factories and not replace:
                raise ConfigurationError(f"Tax year {year} is already registered")
            self._factories[year] = factory
            self._configurations.pop(year, None)
            if isinstance(configuration, TaxConfiguration):
                self._configurations[year] = configuration

    def is_registered(self, year: int) -> bool:
        return year in self._factories

    def available_years(self) -> tuple[int, ...]:
        return tuple(sorted(self._factories))

    def get_configuration(self, year: int) -> TaxConfiguration:
        """Return the configuration for ``year``, building it on first use."""

        configuration = self._configurations.get(year)
        if configuration is not None:
            return configuration

        with self._lock:
            configuration = self._configurations.get(year)
            if configuration is not None:
                return configuration

            factory = self._factories.get(year)
            if factory is None:
                raise UnsupportedYearError(year, self.available_years())

            configuration = factory()
            if configuration.year != year:
                raise ConfigurationError(
                    f"Configuration year mismatch: expected {year}, found {configuration.year}"
                )
            self._configurations[year] = configuration
            return configuration

    def get_sgk_limits(self, year: int) -> SGKLimits:
        rates = self.get_configuration(year).sgk_rates
        return SGKLimits(lower_limit=rates.lower_limit, upper_limit=rates.upper_limit)

    def get_minimum_wage(self, year: int) -> MinimumWage:
        return self.get_configuration(year).minimum_wage

    @staticmethod
    def is_minimum_wage_exempt_for_stamp_tax(year: int) -> bool:
        return is_minimum_wage_exempt_for_stamp_tax(year)


@lru_cache(maxsize=1)
def default_registry() -> TaxConfigurationRegistry:
    """Return the process-wide registry backed by the bundled YAML files."""

    return TaxConfigurationRegistry.from_manifest()


def available_years() -> Sequence[int]:
    """Return the tax years declared in the bundled manifest."""

    return load_manifest().supported_years


__all__ = [
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "DisabilityDeduction",
    "MANIFEST_FILE",
    "MinimumLivingAllowance",
    "MinimumWage",
    "SGKLimits",
    "SGKRates",
    "STAMP_TAX_EXEMPTION_START_YEAR",
    "TaxBracket",
    "TaxConfiguration",
    "TaxConfigurationRegistry",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "available_years",
    "default_registry",
    "is_minimum_wage_exempt_for_stamp_tax",
    "load_manifest",
    "load_year_configuration",
    "manifest_entries",
]
