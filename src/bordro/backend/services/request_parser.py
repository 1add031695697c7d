"""Helpers for normalising incoming salary calculation requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest


def parse_salary_payload(req: Request) -> dict[str, Any]:
    """Extract a JSON object payload from ``req``.

    Field-level validation is left to the request models so that every issue
    is reported together.
    """

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    return dict(data)


def parse_year_argument(req: Request) -> int | None:
    """Return the optional ``year`` query parameter as an integer."""

    raw = req.args.get("year")
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise BadRequest("Query parameter 'year' must be an integer") from exc
