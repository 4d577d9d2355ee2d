"""Duration text in the ``1h2m3.5s`` notation used by configuration and titles."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from fractions import Fraction

__all__ = ["format_duration", "parse_duration"]

_NS_PER_SECOND = 1_000_000_000

_UNITS: dict[str, Fraction] = {
    "ns": Fraction(1, 1_000_000_000),
    "us": Fraction(1, 1_000_000),
    "\u00b5s": Fraction(1, 1_000_000),
    "\u03bcs": Fraction(1, 1_000_000),
    "ms": Fraction(1, 1_000),
    "s": Fraction(1),
    "m": Fraction(60),
    "h": Fraction(3600),
}

_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|\u00b5s|\u03bcs|ms|s|m|h)")


def _with_fraction(value: int, unit: int) -> str:
    whole, rest = divmod(value, unit)
    digits = len(str(unit)) - 1
    fraction = str(rest).zfill(digits).rstrip("0")
    return f"{whole}.{fraction}" if fraction else str(whole)


def format_duration(seconds: float) -> str:
    """Render a number of seconds as text such as ``5m0s`` or ``1.5ms``."""
    nanos = round(Fraction(seconds) * _NS_PER_SECOND)
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)

    if nanos < _NS_PER_SECOND:
        if nanos < 1_000:
            return f"{sign}{nanos}ns"
        if nanos < 1_000_000:
            return f"{sign}{_with_fraction(nanos, 1_000)}\u00b5s"
        return f"{sign}{_with_fraction(nanos, 1_000_000)}ms"

    whole_seconds = nanos // _NS_PER_SECOND
    text = _with_fraction(whole_seconds % 60 * _NS_PER_SECOND + nanos % _NS_PER_SECOND, _NS_PER_SECOND) + "s"
    if whole_seconds >= 60:
        text = f"{whole_seconds // 60 % 60}m{text}"
    if whole_seconds >= 3600:
        text = f"{whole_seconds // 3600}h{text}"
    return sign + text


def parse_duration(text: str) -> float:
    """Parse text such as ``1h30m`` or ``-1.5s`` into seconds.

    Raises ValueError when the text is empty, lacks a unit or uses an unknown one.
    """
    original = text
    sign = 1
    if text[:1] in ("-", "+"):
        if text[0] == "-":
            sign = -1
        text = text[1:]
    if text == "0":
        return 0.0
    if not text:
        raise ValueError(f"invalid duration {original!r}")

    total = Fraction(0)
    position = 0
    while position < len(text):
        match = _PART.match(text, position)
        if match is None:
            raise ValueError(f"invalid duration {original!r}")
        number, unit = match.groups()
        try:
            amount = Fraction(Decimal(number))
        except InvalidOperation as exc:
            raise ValueError(f"invalid duration {original!r}") from exc
        total += amount * _UNITS[unit]
        position = match.end()
    return float(sign * total)