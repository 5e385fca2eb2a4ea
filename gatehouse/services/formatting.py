"""Display formatting helpers, also exposed as template filters."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal

_CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}

_CENTS = Decimal("0.01")
_ELLIPSIS = "..."
_WORD = re.compile(r"\S+")


def format_currency(amount: float, currency: str = "USD") -> str:
    """Format ``amount`` as money, e.g. ``-$1,234.50``."""

    code = (currency or "USD").upper()
    symbol = _CURRENCY_SYMBOLS.get(code, f"{code} ")
    # Halves round away from zero; -0.001 renders as $0.00 rather than -$0.00.
    value = Decimal(str(amount)).quantize(_CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max(max_length - len(_ELLIPSIS), 0)] + _ELLIPSIS


def to_title_case(text: str) -> str:
    return _WORD.sub(lambda match: match.group(0)[:1].upper() + match.group(0)[1:].lower(), text)


__all__ = ["format_currency", "to_title_case", "truncate"]
