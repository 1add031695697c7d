"""Expose the installed project version to the API and health checks."""

from __future__ import annotations

import re
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

PACKAGE_NAME: Final = "bordro"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"

_SECTION_PATTERN = re.compile(r"^\[(?P<name>[^\]]+)\]\s*$")
_VERSION_PATTERN = re.compile(r"""^version\s*=\s*["'](?P<version>[^"']+)["']""")


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the distribution version, reading ``pyproject.toml`` for source checkouts."""

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return read_pyproject_version(PYPROJECT_PATH)


def read_pyproject_version(path: Path) -> str:
    """Return ``[project].version`` from the ``pyproject.toml`` at ``path``."""

    if not path.exists():
        raise RuntimeError(f"Unable to locate project metadata at {path}")

    section: str | None = None
    for line in path.read_text(encoding="utf-8").splitlines():
        header = _SECTION_PATTERN.match(line.strip())
        if header:
            section = header.group("name")
            continue
        if section != "project":
            continue
        match = _VERSION_PATTERN.match(line.strip())
        if match:
            return match.group("version")

    raise RuntimeError(f"No [project] version declared in {path.name}")


__all__ = ["PACKAGE_NAME", "get_project_version", "read_pyproject_version"]
