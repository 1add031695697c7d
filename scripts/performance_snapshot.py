#!/usr/bin/env python3
"""Collect baseline timings for the payroll calculations."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from time import perf_counter
from typing import Any, Callable

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from bordro.backend.app.services import get_salary_calculator  # noqa: E402

GROSS_PAYLOAD = {
    "year": 2025,
    "month": 6,
    "grossSalary": 85000,
    "isMarried": True,
    "dependentCount": 2,
}

NET_PAYLOAD = {
    "year": 2025,
    "month": 6,
    "netSalary": 60000,
    "isMarried": False,
    "dependentCount": 0,
}


def _time(operation: Callable[[dict[str, Any]], Any], payload: dict[str, Any], iterations: int) -> dict[str, float]:
    operation(payload)  # Warm cache
    start = perf_counter()
    for _ in range(iterations):
        operation(payload)
    elapsed = perf_counter() - start
    return {
        "iterations": iterations,
        "total_ms": elapsed * 1000,
        "average_ms": (elapsed / iterations) * 1000,
    }


def main() -> None:
    iterations = int(os.getenv("BORDRO_PROFILE_ITERATIONS", "200"))
    calculator = get_salary_calculator()
    report = {
        "gross_to_net": _time(calculator.calculate_gross_to_net, GROSS_PAYLOAD, iterations),
        "net_to_gross": _time(calculator.calculate_net_to_gross, NET_PAYLOAD, iterations),
    }
    print(json.dumps(report, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
