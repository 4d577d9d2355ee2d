"""Access logging for the web server in a plain, combined-log-like format."""

from __future__ import annotations

import functools
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

__all__ = ["AccessLog", "PlainFormatter", "AccessLogEntry", "new_structured_logger"]

_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _rfc1123(moment: datetime) -> str:
    zone = moment.tzname() or "UTC"
    return (
        f"{_DAYS[moment.weekday()]}, {moment.day:02d} {_MONTHS[moment.month - 1]} "
        f"{moment:%Y %H:%M:%S} {zone}"
    )


@dataclass
class AccessLog:
    """The fields of one access log line."""

    remote_addr: str = ""
    user_id: str = ""
    time: str = ""
    method: str = ""
    request: str = ""
    status: str = ""
    bytes: str = ""
    elapsed: str = ""
    referrer: str = ""
    user_agent: str = ""
    stack: str = ""
    panic: str = ""

    def __str__(self) -> str:
        line = (
            f'{self.remote_addr} {self.user_id} "{self.time}" {self.method} {self.request} '
            f'{self.status} {self.bytes} {self.elapsed} {self.referrer} "{self.user_agent}"'
        )
        if self.panic:
            line += f" {self.stack} {self.panic}"
        return line


class PlainFormatter(logging.Formatter):
    """Writes the local time and the message, nothing else."""

    def __init__(
        self,
        timestamp_format: str = "%Y-%m-%d %H:%M:%S",
        level_desc: tuple[str, ...] = ("PANC", "FATL", "ERRO", "WARN", "INFO", "DEBG"),
    ) -> None:
        super().__init__()
        self.timestamp_format = timestamp_format
        self.level_desc = level_desc

    def format(self, record: logging.LogRecord) -> str:
        timestamp = time.strftime(self.timestamp_format, time.localtime(record.created))
        return f"{timestamp} {record.getMessage()}"


@dataclass
class AccessLogEntry:
    """One request being logged; completed by ``write`` once the response is sent."""

    logger: logging.Logger
    access_log: AccessLog = field(default_factory=AccessLog)

    @classmethod
    def from_request(
        cls,
        logger: logging.Logger,
        method: str,
        scheme: str,
        host: str,
        request_uri: str,
        remote_addr: str,
        user_agent: str = "",
        referrer: str = "",
        request_id: str = "",
    ) -> AccessLogEntry:
        """Start an entry from the parts of an incoming request."""
        access = AccessLog(
            remote_addr=remote_addr,
            user_id=request_id,
            time=_rfc1123(datetime.now().astimezone()),
            method=method,
            request=f"{scheme}://{host}{request_uri}",
            referrer=referrer,
            user_agent=user_agent,
        )
        return cls(logger, access)

    def write(self, status: int, size: int, elapsed: float) -> None:
        """Record status, body size and elapsed seconds, then log the line."""
        self.access_log.status = str(status)
        self.access_log.bytes = str(size)
        self.access_log.elapsed = f"{elapsed * 1000.0:.3f}ms"
        self.logger.info("%s", self.access_log)

    def panic(self, value: Any, stack: bytes | str) -> None:
        """Attach a failure and its stack to the entry."""
        self.access_log.panic = str(value)
        self.access_log.stack = stack.decode(errors="replace") if isinstance(stack, bytes) else stack


def new_structured_logger(logger: logging.Logger) -> Callable[..., AccessLogEntry]:
    """Give the logger plain formatting and return a factory of request entries."""
    if not logger.handlers:
        logger.addHandler(logging.StreamHandler())
    formatter = PlainFormatter()
    for handler in logger.handlers:
        handler.setFormatter(formatter)
    return functools.partial(AccessLogEntry.from_request, logger)