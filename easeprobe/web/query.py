"""Reading of query parameters for the web pages."""

from __future__ import annotations

import logging
import re
from typing import Callable, TypeVar

from easeprobe.durations import parse_duration
from easeprobe.probe.status import Status

__all__ = ["get_refresh_interval", "get_status", "get_num", "to_int", "to_float", "get_str"]

log = logging.getLogger(__name__)

T = TypeVar("T")

_INT = re.compile(r"[+-]?[0-9]+")
_ESCAPES = str.maketrans({"<": "&lt;", ">": "&gt;", "&": "&amp;", "'": "&#39;", '"': "&#34;"})


def get_refresh_interval(refresh: str, default: float) -> float:
    """The refresh interval in seconds, falling back to the default when absent or invalid."""
    if not refresh.strip():
        return default
    try:
        return parse_duration(refresh)
    except ValueError as exc:
        log.error("[Web] Invalid refresh time: %s", exc)
        return default


def get_status(text: str) -> Status | None:
    """The status named by the text, or None when the text is empty."""
    if text == "":
        return None
    return Status.parse(text)


def to_int(text: str) -> int:
    """A strict decimal integer; raise ValueError otherwise."""
    if not _INT.fullmatch(text):
        raise ValueError(f"invalid syntax: {text!r}")
    return int(text)


def to_float(text: str) -> float:
    """A floating point number without surrounding spaces; raise ValueError otherwise."""
    if not text or text != text.strip() or "_" in text:
        raise ValueError(f"invalid syntax: {text!r}")
    return float(text)


def get_num(text: str, default: T, convert: Callable[[str], T]) -> T:
    """Convert the text, falling back to the default when it is empty or invalid."""
    if text == "":
        return default
    try:
        return convert(text)
    except ValueError as exc:
        log.debug("[Web] Invalid number value: %s", exc)
        return default


def get_str(text: str) -> str:
    """The text with HTML special characters escaped and surrounding space removed."""
    return text.translate(_ESCAPES).strip()