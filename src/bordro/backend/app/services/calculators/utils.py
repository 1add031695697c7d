"""Utility helpers for calculator modules."""

from __future__ import annotations

from collections.abc import Sequence

from bordro.backend.config.year_config import TaxBracket


def format_percentage(value: float) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = round(value * 100, 6)
    if float(int(percentage)) == percentage:
        return f"{int(percentage)}%"
    return f"{percentage:.2f}%"


def select_bracket(amount: float, brackets: Sequence[TaxBracket]) -> TaxBracket:
    """Return the highest bracket whose lower bound lies strictly below ``amount``.

    Amounts of zero or less fall into the first bracket.
    """

    applied = brackets[0]
    for bracket in brackets:
        if amount > bracket.min_amount:
            applied = bracket
        else:
            break
    return applied


def calculate_progressive_tax(
    amount: float, brackets: Sequence[TaxBracket]
) -> tuple[float, TaxBracket]:
    """Calculate progressive tax for ``amount`` using cumulative ``brackets``.

    Only the applied bracket is evaluated: its ``cumulative_tax`` already holds
    the tax owed on everything below its lower bound.
    """

    bracket = select_bracket(amount, brackets)
    if amount <= 0:
        return 0.0, bracket

    taxable_in_bracket = amount - bracket.min_amount
    if bracket.width is not None:
        taxable_in_bracket = min(taxable_in_bracket, bracket.width)

    return bracket.cumulative_tax + taxable_in_bracket * bracket.rate, bracket


def clamp(value: float, lower: float, upper: float) -> float:
    """Restrict ``value`` to the closed interval ``[lower, upper]``."""

    return min(max(value, lower), upper)


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    return round(value, 2)


def round_rate(value: float) -> float:
    """Round rate values to four decimals."""

    return round(value, 4)
