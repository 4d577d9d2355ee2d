"""The outcome of a probe and the statistics gathered over its rounds."""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import yaml

from easeprobe.durations import format_duration
from easeprobe.probe.notification_strategy import NotificationStrategyData
from easeprobe.probe.status import Status
from easeprobe.probe.status_counter import StatusCounter

__all__ = ["Stat", "Result", "DEFAULT_STATUS_CHANGE_THRESHOLD"]

DEFAULT_STATUS_CHANGE_THRESHOLD = 1

_NS_PER_SECOND = 1_000_000_000
_ZERO_TIME_TEXT = "0001-01-01T00:00:00Z"
_TIME = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|z|[+-]\d{2}:\d{2})"
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _format_time(value: datetime | None) -> str:
    if value is None:
        return _ZERO_TIME_TEXT
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    fraction = f"{value.microsecond:06d}".rstrip("0")
    if fraction:
        text += "." + fraction
    offset = value.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _parse_time(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    text = str(value)
    if text == _ZERO_TIME_TEXT:
        return None
    match = _TIME.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid time {text!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micro = int((fraction or "").ljust(6, "0")[:6])
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
    )


def _nanos(seconds: float) -> int:
    return int(round(seconds * _NS_PER_SECOND))


def _seconds(nanos: Any) -> float:
    return int(nanos) / _NS_PER_SECOND


def _round_seconds(seconds: float) -> int:
    rounded = math.floor(abs(seconds) + 0.5)
    return -rounded if seconds < 0 else rounded


def _dump_json(data: dict[str, Any], indent: int | None) -> str:
    separators = (",", ":") if indent is None else (",", ": ")
    text = json.dumps(data, ensure_ascii=False, indent=indent, separators=separators)
    return (
        text.replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def _default_status_map() -> dict[Status, int]:
    return {Status.UP: 0, Status.DOWN: 0}


def _default_counter() -> StatusCounter:
    return StatusCounter(DEFAULT_STATUS_CHANGE_THRESHOLD)


@dataclass
class Stat:
    """Running statistics of a probe; durations are in seconds."""

    since: datetime = field(default_factory=_now)
    total: int = 0
    status: dict[Status, int] = field(default_factory=_default_status_map)
    up_time: float = 0.0
    down_time: float = 0.0
    counter: StatusCounter = field(default_factory=_default_counter)
    alert: NotificationStrategyData = field(default_factory=NotificationStrategyData)

    def clone(self) -> Stat:
        """A copy that shares no mutable state with this one."""
        return Stat(
            since=self.since,
            total=self.total,
            status=dict(self.status),
            up_time=self.up_time,
            down_time=self.down_time,
            counter=self.counter.clone(),
            alert=self.alert.clone(),
        )

    def to_dict(self) -> dict[str, Any]:
        """The serialised form, with durations in nanoseconds."""
        data: dict[str, Any] = {
            "since": _format_time(self.since),
            "total": self.total,
            "status": {
                str(int(key)): value
                for key, value in sorted(self.status.items(), key=lambda kv: str(int(kv[0])))
            },
            "uptime": _nanos(self.up_time),
            "downtime": _nanos(self.down_time),
        }
        data.update(self.counter.to_dict())
        data["alert"] = self.alert.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Stat:
        """Build statistics from their serialised form."""
        since = _parse_time(data.get("since"))
        return cls(
            since=since if since is not None else datetime(1, 1, 1, tzinfo=timezone.utc),
            total=int(data.get("total", 0)),
            status={Status(int(key)): int(value) for key, value in (data.get("status") or {}).items()},
            up_time=_seconds(data.get("uptime", 0)),
            down_time=_seconds(data.get("downtime", 0)),
            counter=StatusCounter.from_dict(data),
            alert=NotificationStrategyData.from_dict(data.get("alert") or {}),
        )


@dataclass
class Result:
    """The latest outcome of a probe; durations are in seconds."""

    name: str = ""
    endpoint: str = ""
    start_time: datetime = field(default_factory=_now)
    start_timestamp: int = 0
    round_trip_time: float = 0.0
    status: Status = Status.INIT
    pre_status: Status = Status.INIT
    message: str = ""
    latest_down_time: datetime | None = None
    recovery_duration: float = 0.0
    stat: Stat = field(default_factory=Stat)

    @classmethod
    def new(cls, name: str = "") -> Result:
        """A fresh result carrying the given probe name."""
        return cls(name=name)

    def clone(self) -> Result:
        """A copy whose statistics are independent of this one."""
        return Result(
            name=self.name,
            endpoint=self.endpoint,
            start_time=self.start_time,
            start_timestamp=self.start_timestamp,
            round_trip_time=self.round_trip_time,
            status=self.status,
            pre_status=self.pre_status,
            message=self.message,
            latest_down_time=self.latest_down_time,
            recovery_duration=self.recovery_duration,
            stat=self.stat.clone(),
        )

    def do_stat(self, seconds: float) -> None:
        """Count one round of the given length under the current status."""
        self.stat.total += 1
        self.stat.status[self.status] = self.stat.status.get(self.status, 0) + 1
        if self.status is Status.UP:
            self.stat.up_time += seconds
        else:
            self.stat.down_time += seconds

    def title(self) -> str:
        """The title used for notifications."""
        if self.pre_status is Status.INIT and self.status is Status.UP:
            return f"Monitoring {self.name}"
        if self.status is not Status.UP:
            return f"{self.name} Failure"
        downtime = format_duration(_round_seconds(self.recovery_duration))
        return f"{self.name} Recovery - ( {downtime} Downtime )"

    def to_dict(self) -> dict[str, Any]:
        """The serialised form, with durations in nanoseconds."""
        return {
            "name": self.name,
            "endpoint": self.endpoint,
            "time": _format_time(self.start_time),
            "timestamp": self.start_timestamp,
            "rtt": _nanos(self.round_trip_time),
            "status": self.status.encode(),
            "prestatus": self.pre_status.encode(),
            "message": self.message,
            "latestdowntime": _format_time(self.latest_down_time),
            "recoverytime": _nanos(self.recovery_duration),
            "stat": self.stat.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Result:
        """Build a result from its serialised form."""
        start = _parse_time(data.get("time"))
        return cls(
            name=str(data.get("name", "")),
            endpoint=str(data.get("endpoint", "")),
            start_time=start if start is not None else datetime(1, 1, 1, tzinfo=timezone.utc),
            start_timestamp=int(data.get("timestamp", 0)),
            round_trip_time=_seconds(data.get("rtt", 0)),
            status=Status.decode(data.get("status", "init")),
            pre_status=Status.decode(data.get("prestatus", "init")),
            message=str(data.get("message", "")),
            latest_down_time=_parse_time(data.get("latestdowntime")),
            recovery_duration=_seconds(data.get("recoverytime", 0)),
            stat=Stat.from_dict(data.get("stat") or {}),
        )

    def debug_json(self) -> str:
        """The result as compact JSON."""
        return _dump_json(self.to_dict(), None)

    def debug_json_indent(self) -> str:
        """The result as JSON indented by four spaces."""
        return _dump_json(self.to_dict(), 4)

    def to_yaml(self) -> str:
        """The result as a YAML document."""
        return yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)

    @classmethod
    def from_yaml(cls, text: str) -> Result:
        """Read a result from a YAML document."""
        data = yaml.safe_load(text)
        if not isinstance(data, dict):
            raise ValueError("result must be a mapping")
        return cls.from_dict(data)

    def sla_percent(self) -> float:
        """Share of up time in the measured time, as a percentage."""
        total = self.stat.up_time + self.stat.down_time
        if total <= 0:
            return 100.0 if self.status is Status.UP else 0.0
        return self.stat.up_time / total * 100