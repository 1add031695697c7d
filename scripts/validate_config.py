#!/usr/bin/env python3
"""Check the bundled tax year YAML files from a source checkout.

Equivalent to the ``bordro-validate-config`` console script, for contributors
who have not installed the package.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from bordro.backend.config.validator import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
