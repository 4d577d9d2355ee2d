"""A probe that completes a TLS handshake and checks the peer certificate dates."""

from __future__ import annotations

import logging
import re
import ssl
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Sequence

from cryptography import x509
from cryptography.hazmat.primitives.serialization import Encoding

from easeprobe.durations import format_duration
from easeprobe.probe.tcp_probe import DEFAULT_TIMEOUT, _disable_linger, open_connection

__all__ = ["TLSProbe", "earliest_cert_expiry", "last_chain_expiry"]

log = logging.getLogger(__name__)

_PEM_CERT = re.compile(rb"-----BEGIN CERTIFICATE-----.+?-----END CERTIFICATE-----", re.S)
_ZERO_TIME_UNIX = -62135596800.0


def _not_after(cert: x509.Certificate) -> datetime:
    value = getattr(cert, "not_valid_after_utc", None)
    return value if value is not None else cert.not_valid_after.replace(tzinfo=timezone.utc)


def _not_before(cert: x509.Certificate) -> datetime:
    value = getattr(cert, "not_valid_before_utc", None)
    return value if value is not None else cert.not_valid_before.replace(tzinfo=timezone.utc)


def earliest_cert_expiry(certificates: Iterable[x509.Certificate]) -> datetime | None:
    """The earliest expiry among the certificates, or None when there are none."""
    return min((_not_after(cert) for cert in certificates), default=None)


def last_chain_expiry(chains: Iterable[Sequence[x509.Certificate]]) -> datetime | None:
    """The latest of the chains' earliest expiries, or None when there are none."""
    latest: datetime | None = None
    for chain in chains:
        chain_expiry = earliest_cert_expiry(chain)
        if latest is None or (chain_expiry is not None and latest < chain_expiry):
            latest = chain_expiry
    return latest


def _unix(moment: datetime | None) -> float:
    return float(int(moment.timestamp())) if moment is not None else _ZERO_TIME_UNIX


def _load_root_cas(pem: bytes) -> list[x509.Certificate]:
    certificates = []
    for block in _PEM_CERT.findall(pem):
        try:
            certificates.append(x509.load_pem_x509_certificate(block))
        except ValueError:
            continue
    return certificates


@dataclass
class TLSProbe:
    """Checks that a TLS endpoint can be reached and its certificates are in date.

    ``alert_expire_before`` is in seconds; after a successful probe ``metrics``
    holds the expiry timestamps in Unix seconds.
    """

    name: str = ""
    host: str = ""
    proxy: str = ""
    insecure_skip_verify: bool = False
    no_linger: bool = False
    root_ca_pem_path: str = ""
    root_ca_pem: str = ""
    expire_skip_verify: bool = False
    alert_expire_before: float = 0.0
    kind: str = field(default="", init=False)
    timeout: float = field(default=DEFAULT_TIMEOUT, init=False)
    metrics: dict[str, float] = field(default_factory=dict, init=False)
    _root_cas: bytes | None = field(default=None, init=False, repr=False)

    def config(self, timeout: float | None = None) -> None:
        """Prepare the probe and load the root CAs.

        Raises OSError if the CA file cannot be read and ValueError if it holds no certificate.
        """
        self.kind = "tls"
        self.timeout = timeout if timeout and timeout > 0 else DEFAULT_TIMEOUT

        pem = self.root_ca_pem.encode()
        if not pem and self.root_ca_pem_path:
            pem = Path(self.root_ca_pem_path).read_bytes()

        self._root_cas = None
        if pem:
            certificates = _load_root_cas(pem)
            if not certificates:
                raise ValueError("cannot parse root ca pem")
            self._root_cas = b"".join(cert.public_bytes(Encoding.DER) for cert in certificates)
        log.debug("[%s / %s] configuration: %r", self.kind, self.name, self)

    def _ssl_context(self) -> ssl.SSLContext:
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        if self.insecure_skip_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        elif self._root_cas is not None:
            context.load_verify_locations(cadata=self._root_cas)
        else:
            context.load_default_certs()
        return context

    def _hostname(self) -> str:
        host = self.host.rpartition(":")[0] if ":" in self.host else self.host
        return host[1:-1] if host.startswith("[") and host.endswith("]") else host

    def do_probe(self) -> tuple[bool, str]:
        """Connect, shake hands and check the certificates; return success and a message."""
        try:
            conn = open_connection(self.proxy, self.host, self.timeout)
        except (OSError, ValueError) as exc:
            log.error("[%s / %s] tcp dial error: %s", self.kind, self.name, exc)
            return False, f"tcp dial error: {exc}"

        with conn:
            if not self.no_linger:
                _disable_linger(conn)
            conn.settimeout(self.timeout)
            try:
                context = self._ssl_context()
                tls_conn = context.wrap_socket(conn, server_hostname=self._hostname() or None)
            except (OSError, ValueError) as exc:
                log.error("[%s / %s] tls handshake error: %s", self.kind, self.name, exc)
                return False, f"tls handshake error: {exc}"

            with tls_conn:
                der = tls_conn.getpeercert(binary_form=True)
                verified = context.verify_mode != ssl.CERT_NONE

        peer = [x509.load_der_x509_certificate(der)] if der else []

        if not self.expire_skip_verify:
            now = datetime.now(timezone.utc)
            for cert in peer:
                if now > _not_after(cert) or now < _not_before(cert):
                    log.error("[%s / %s] host %s cert expired", self.kind, self.name, self.host)
                    return False, "certificate is expired or not yet valid"
                if self.alert_expire_before > 0:
                    left = (_not_after(cert) - now).total_seconds()
                    if left < self.alert_expire_before:
                        return False, f"certificate is expiring in {format_duration(left)}"

        chains = [peer] if verified and peer else []
        self.metrics = {
            "earliest_cert_expiry": _unix(earliest_cert_expiry(peer)),
            "last_chain_expiry_timestamp_seconds": _unix(last_chain_expiry(chains)),
        }
        return True, "TLS Endpoint Verified Successfully!"