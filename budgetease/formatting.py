"""Formatting utilities for currency display."""

from __future__ import annotations

from typing import Any, Union


def format_currency(amount: Union[float, int], include_sign: bool = True) -> str:
    """Format a currency amount with proper formatting.

    Args:
        amount: The amount to format
        include_sign: Whether to include the dollar sign

    Returns:
        Formatted currency string (e.g., "$1,234.56" or "1,234.56")

    Example:
        >>> format_currency(1234.56)
        '$1,234.56'
        >>> format_currency(-42, include_sign=False)
        '-42.00'
    """
    formatted = f"{abs(amount):,.2f}"
    sign = "-" if amount < 0 else ""
    return f"{sign}${formatted}" if include_sign else f"{sign}{formatted}"


def as_float(value: Any, default: float = 0.0) -> float:
    """Read a possibly missing profile figure as a float."""
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        return default
