"""The status of a probe."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

__all__ = ["Status"]


class Status(IntEnum):
    """Status of a probe, stored as an integer and written as a name."""

    INIT = 0
    UP = 1
    DOWN = 2
    UNKNOWN = 3
    BAD = 4

    def title(self) -> str:
        """The human title of the status."""
        return _TITLES.get(self, "Unknown")

    def emoji(self) -> str:
        """The emoji that stands for the status."""
        return _EMOJIS.get(self, "\u26d4\ufe0f")

    def encode(self) -> str:
        """The name written to YAML or JSON."""
        return _NAMES[self]

    @classmethod
    def parse(cls, text: str) -> Status:
        """Read a status name leniently; unknown names give UNKNOWN."""
        return _BY_NAME.get(text.lower(), cls.UNKNOWN)

    @classmethod
    def decode(cls, value: Any) -> Status:
        """Read a status name from loaded YAML or JSON; raise ValueError if invalid."""
        if not isinstance(value, str):
            raise ValueError(f"Status: invalid value {value!r}")
        try:
            return _BY_NAME[value.lower()]
        except KeyError:
            raise ValueError(f"Status: invalid value {value!r}") from None

    def __str__(self) -> str:
        return self.encode()


_TITLES = {
    Status.INIT: "Initialization",
    Status.UP: "Success",
    Status.DOWN: "Error",
    Status.UNKNOWN: "Unknown",
    Status.BAD: "Bad",
}

_NAMES = {
    Status.INIT: "init",
    Status.UP: "up",
    Status.DOWN: "down",
    Status.UNKNOWN: "unknown",
    Status.BAD: "bad",
}

_BY_NAME = {name: status for status, name in _NAMES.items()}

_EMOJIS = {
    Status.INIT: "🔎",
    Status.UP: "✅",
    Status.DOWN: "❌",
    Status.UNKNOWN: "⛔️",
    Status.BAD: "🚫",
}