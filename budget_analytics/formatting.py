"""Formatting utilities for currency, signed totals and percentage changes."""

from __future__ import annotations

from typing import Any, Union

from .categories import DISPLAY, sign_for
from .config import CURRENCY


def format_number(amount: Union[float, int]) -> str:
    """Swiss-style grouping with 0 to 2 decimals.

    Example:
        >>> format_number(8500)
        '8’500'
        >>> format_number(1234.5)
        '1’234.5'
    """
    text = f"{abs(amount):,.2f}".replace(',', '’')
    if text.endswith('.00'):
        text = text[:-3]
    elif text.endswith('0'):
        text = text[:-1]
    return f"-{text}" if amount < 0 and text != '0' else text


def format_currency(amount: Union[float, int, None], currency: str = CURRENCY) -> str:
    """Format an amount with its currency suffix.

    Example:
        >>> format_currency(1234.56)
        '1’234.56 CHF'
        >>> format_currency(None)
        '0 CHF'
    """
    if amount is None or amount != amount:
        return f"0 {currency}"
    return f"{format_number(amount)} {currency}"


def format_signed(entry_type: Any, amount: Union[float, int], currency: str = CURRENCY) -> str:
    """Prefix a magnitude with the display direction of its type ("+8’500 CHF")."""
    prefix = '+' if sign_for(entry_type, DISPLAY) > 0 else '-'
    return f"{prefix}{format_currency(abs(amount), currency)}"


def format_percentage(percentage: Union[float, str]) -> str:
    """One-decimal percentage change, ``"N/A"`` passes through.

    Example:
        >>> format_percentage(12.345)
        '+12.3%'
        >>> format_percentage('N/A')
        'N/A'
    """
    if isinstance(percentage, str):
        return percentage
    sign = '+' if percentage > 0 else ''
    return f"{sign}{percentage:.1f}%"
