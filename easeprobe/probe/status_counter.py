"""Counting of consecutive probe statuses with a bounded history."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

__all__ = ["StatusHistory", "StatusCounter"]


@dataclass(frozen=True)
class StatusHistory:
    """One recorded probe outcome."""

    status: bool
    message: str


@dataclass
class StatusCounter:
    """Counts how often the same status occurred in a row, keeping recent history."""

    max_len: int
    history: list[StatusHistory] = field(default_factory=list)
    current_status: bool = True
    status_count: int = 0

    def append_status(self, status: bool, message: str) -> None:
        """Record a status and update the run length of the current status."""
        if status != self.current_status:
            self.status_count = 0
            self.current_status = status
        if self.status_count < self.max_len:
            self.status_count += 1

        self.history.append(StatusHistory(status, message))
        if len(self.history) > self.max_len:
            del self.history[0]

    def set_max_len(self, max_len: int) -> None:
        """Change the history limit, dropping the oldest entries if needed."""
        self.max_len = max_len
        if len(self.history) > max_len:
            self.history = self.history[len(self.history) - max_len :]

    def clone(self) -> StatusCounter:
        """A copy that does not share the history list."""
        return StatusCounter(
            max_len=self.max_len,
            history=list(self.history),
            current_status=self.current_status,
            status_count=self.status_count,
        )

    def to_dict(self) -> dict[str, Any]:
        """The serialised form used in results."""
        return {
            "StatusHistory": [{"Status": h.status, "Message": h.message} for h in self.history],
            "MaxLen": self.max_len,
            "CurrentStatus": self.current_status,
            "StatusCount": self.status_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StatusCounter:
        """Build a counter from its serialised form."""
        history = [
            StatusHistory(bool(item.get("Status", False)), str(item.get("Message", "")))
            for item in data.get("StatusHistory") or []
        ]
        return cls(
            max_len=int(data.get("MaxLen", 0)),
            history=history,
            current_status=bool(data.get("CurrentStatus", False)),
            status_count=int(data.get("StatusCount", 0)),
        )