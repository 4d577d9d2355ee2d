"""Timing of the phases of an HTTP request."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable

__all__ = ["TraceStats", "to_ms"]

log = logging.getLogger(__name__)


def to_ms(seconds: float) -> float:
    """Convert seconds to milliseconds."""
    return seconds * 1000.0


@dataclass
class TraceStats:
    """Start times and durations of the phases of one request, in seconds."""

    kind: str
    tag: str
    name: str
    clock: Callable[[], float] = field(default=time.monotonic, repr=False, compare=False)

    conn_start_at: float | None = None
    conn_took: float = 0.0
    dns_start_at: float | None = None
    dns_took: float = 0.0
    send_start_at: float | None = None
    send_took: float = 0.0
    tls_start_at: float | None = None
    tls_took: float = 0.0
    total_start_at: float | None = None
    total_took: float = 0.0
    transfer_start_at: float | None = None
    transfer_took: float = 0.0
    wait_start_at: float | None = None
    wait_took: float = 0.0

    @property
    def _prefix(self) -> str:
        return f"[{self.kind} {self.tag} {self.name}]"

    def _since(self, start: float | None) -> float:
        return 0.0 if start is None else self.clock() - start

    def get_conn(self, host_port: str) -> None:
        """A connection is requested: the whole request starts."""
        self.total_start_at = self.clock()
        log.debug("%s - total - start get connection to %s", self._prefix, host_port)

    def dns_start(self, host: str) -> None:
        """Name resolution starts."""
        self.dns_start_at = self.clock()
        log.debug("%s - dns - start resolve %s", self._prefix, host)

    def dns_done(self, addrs: Iterable[str] = (), error: BaseException | None = None) -> None:
        """Name resolution ends."""
        self.dns_took = self._since(self.dns_start_at)
        if error is not None:
            return
        log.debug(
            "%s - dns - resolve ip %s, time %.3fms", self._prefix, list(addrs), to_ms(self.dns_took)
        )

    def connect_start(self, network: str, addr: str) -> None:
        """The first connection attempt starts; later attempts keep the first time."""
        if self.conn_start_at is None:
            self.conn_start_at = self.clock()
        log.debug("%s - conn - start %s connect to %s", self._prefix, network, addr)

    def connect_done(self, network: str, addr: str, error: BaseException | None = None) -> None:
        """A connection attempt ends."""
        self.conn_took = self._since(self.conn_start_at)
        if error is not None:
            return
        log.debug(
            "%s - conn - %s connection created to %s. time: %.3fms",
            self._prefix,
            network,
            addr,
            to_ms(self.conn_took),
        )

    def tls_start(self) -> None:
        """The TLS handshake starts."""
        self.tls_start_at = self.clock()
        log.debug("%s - tls - start negotiation", self._prefix)

    def tls_done(self, server_name: str = "", error: BaseException | None = None) -> None:
        """The TLS handshake ends."""
        self.tls_took = self._since(self.tls_start_at)
        if error is not None:
            return
        log.debug(
            "%s - tls - negotiated to %r, time: %.3fms", self._prefix, server_name, to_ms(self.tls_took)
        )

    def got_conn(self, reused: bool = False, was_idle: bool = False, idle_time: float = 0.0) -> None:
        """A connection was obtained; only logged."""
        log.debug(
            "%s - connection established. reused: %s idle: %s idle time: %dms",
            self._prefix,
            reused,
            was_idle,
            int(to_ms(idle_time)),
        )

    def wrote_header_field(self, key: str, values: Iterable[str]) -> None:
        """A header field was written; the first one starts the send phase."""
        if self.send_start_at is None:
            self.send_start_at = self.clock()
        log.debug("%s - send - start write header field %s %s", self._prefix, key, list(values))

    def wrote_headers(self) -> None:
        """All headers were written."""
        self.send_took = self._since(self.send_start_at)
        log.debug("%s - send - headers written, time: %.3fms", self._prefix, to_ms(self.send_took))

    def wrote_request(self, error: BaseException | None = None) -> None:
        """The request was written; waiting for the server starts."""
        self.wait_start_at = self.clock()
        log.debug("%s - wait - start write request", self._prefix)

    def got_first_response_byte(self) -> None:
        """The first response byte arrived; transfer starts."""
        self.wait_took = self._since(self.wait_start_at)
        self.transfer_start_at = self.clock()
        log.debug("%s - transfer - start transfer the response", self._prefix)
        log.debug(
            "%s - wait - got first response byte, time: %.3fms", self._prefix, to_ms(self.wait_took)
        )

    def put_idle_conn(self, error: BaseException | None = None) -> None:
        """The connection went back to the pool: the request is finished."""
        self.done()

    def done(self) -> None:
        """Finish the trace and report it."""
        self.total_took = self._since(self.total_start_at)
        self.transfer_took = self._since(self.transfer_start_at)
        log.debug("%s - transfer - done, time: %.3fms", self._prefix, to_ms(self.transfer_took))
        log.debug("%s - total - done , time: %.3fms", self._prefix, to_ms(self.total_took))
        self.report()

    def report(self) -> str:
        """Build a table of the phase durations in milliseconds, log it and return it."""
        durations = (
            self.dns_took,
            self.conn_took,
            self.tls_took,
            self.send_took,
            self.wait_took,
            self.transfer_took,
            self.total_took,
        )
        values = "\t".join(f"{to_ms(took):.2f}" for took in durations)
        lines = [
            f"{self._prefix} ======================== Trace Stats ======================",
            f"{self._prefix} DNS\tConnect\tTLS\tSend\tWait\tTrans\tTotal",
            f"{self._prefix} {values}",
            f"{self._prefix} ===========================================================",
        ]
        for line in lines:
            log.debug("%s", line)
        return "\n".join(lines)