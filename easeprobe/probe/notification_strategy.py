"""When to send repeated alerts while a probe keeps failing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import yaml

__all__ = [
    "IntervalStrategy",
    "NotificationStrategyData",
    "DEFAULT_NOTIFICATION_STRATEGY",
    "DEFAULT_MAX_NOTIFICATION_TIMES",
    "DEFAULT_NOTIFICATION_FACTOR",
]


class IntervalStrategy(Enum):
    """How the gap between two alerts grows."""

    UNKNOWN = "unknown"
    REGULAR = "regular"
    INCREMENT = "increment"
    EXPONENTIAL = "exponent"

    @classmethod
    def decode(cls, value: Any) -> IntervalStrategy:
        """Read a strategy name; raise ValueError if it is not one."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"IntervalStrategy: invalid value {value!r}")
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(f"IntervalStrategy: invalid value {value!r}") from None


DEFAULT_NOTIFICATION_STRATEGY = IntervalStrategy.REGULAR
DEFAULT_MAX_NOTIFICATION_TIMES = 1
DEFAULT_NOTIFICATION_FACTOR = 1


@dataclass
class NotificationStrategyData:
    """Settings and running state of the alert strategy for one probe."""

    strategy: IntervalStrategy = DEFAULT_NOTIFICATION_STRATEGY
    max_times: int = DEFAULT_MAX_NOTIFICATION_TIMES
    factor: int = DEFAULT_NOTIFICATION_FACTOR
    notified: int = field(default=0, init=False)
    failed: int = field(default=0, init=False)
    next_round: int = field(default=1, init=False)
    interval: int = field(default=0, init=False)
    is_sent: bool = field(default=False, init=False, compare=False)

    def __post_init__(self) -> None:
        self.reset()

    def clone(self) -> NotificationStrategyData:
        """An independent copy of settings and state."""
        copy = NotificationStrategyData(self.strategy, self.max_times, self.factor)
        copy.notified = self.notified
        copy.failed = self.failed
        copy.next_round = self.next_round
        copy.interval = self.interval
        copy.is_sent = self.is_sent
        return copy

    def reset(self) -> None:
        """Forget the current failure run."""
        self.failed = 0
        self.notified = 0
        self.next_round = 1
        self.interval = 0
        self.is_sent = False

    def is_exceed_max_times(self) -> bool:
        """True once more alerts were due than the limit allows."""
        return self.notified > self.max_times

    def next_notification(self) -> None:
        """Work out the failure round at which the next alert is due."""
        if self.strategy is IntervalStrategy.REGULAR:
            self.interval = self.factor
        elif self.strategy is IntervalStrategy.INCREMENT:
            self.interval += self.factor
        elif self.strategy is IntervalStrategy.EXPONENTIAL:
            self.interval = self.failed * self.factor
        else:
            self.interval = 1
        self.next_round = self.failed + self.interval

    def process_status(self, status: bool) -> None:
        """Feed one probe outcome and decide whether an alert goes out."""
        self.is_sent = False
        if status:
            self.reset()
            return
        self.failed += 1
        if self.failed < self.next_round:
            return
        self.notified += 1
        if self.is_exceed_max_times():
            return
        self.next_notification()
        self.is_sent = True

    def need_to_send_notification(self) -> bool:
        """Whether the last processed outcome calls for an alert."""
        return self.is_sent

    def to_dict(self) -> dict[str, Any]:
        """The serialised form, in the field order of saved data."""
        return {
            "strategy": self.strategy.value,
            "factor": self.factor,
            "max": self.max_times,
            "notified": self.notified,
            "failed": self.failed,
            "next": self.next_round,
            "interval": self.interval,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NotificationStrategyData:
        """Build the data from its serialised form."""
        item = cls(
            IntervalStrategy.decode(data.get("strategy", DEFAULT_NOTIFICATION_STRATEGY.value)),
            int(data.get("max", DEFAULT_MAX_NOTIFICATION_TIMES)),
            int(data.get("factor", DEFAULT_NOTIFICATION_FACTOR)),
        )
        item.notified = int(data.get("notified", 0))
        item.failed = int(data.get("failed", 0))
        item.next_round = int(data.get("next", 1))
        item.interval = int(data.get("interval", 0))
        return item

    def to_yaml(self) -> str:
        """The data as a YAML document."""
        return yaml.safe_dump(self.to_dict(), sort_keys=False)

    @classmethod
    def from_yaml(cls, text: str) -> NotificationStrategyData:
        """Read the data from a YAML document."""
        data = yaml.safe_load(text)
        if not isinstance(data, dict):
            raise ValueError("notification strategy must be a mapping")
        return cls.from_dict(data)