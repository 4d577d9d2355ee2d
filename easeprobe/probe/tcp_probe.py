"""A probe that checks whether a TCP connection can be opened, directly or through SOCKS5."""

from __future__ import annotations

import ipaddress
import logging
import socket
import struct
from dataclasses import dataclass, field
from urllib.parse import unquote, urlsplit

__all__ = ["DEFAULT_TIMEOUT", "ProxyError", "TCPProbe", "open_connection"]

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
_DEFAULT_SOCKS_PORT = 1080

_SOCKS_REPLIES = {
    1: "general SOCKS server failure",
    2: "connection not allowed by ruleset",
    3: "network unreachable",
    4: "host unreachable",
    5: "connection refused",
    6: "TTL expired",
    7: "command not supported",
    8: "address type not supported",
}


class ProxyError(ValueError):
    """The proxy setting cannot be used."""


def _split_host_port(address: str) -> tuple[str, int]:
    if address.startswith("["):
        end = address.find("]")
        if end == -1 or address[end + 1 : end + 2] != ":":
            raise ValueError(f"address {address}: missing port in address")
        host, port = address[1:end], address[end + 2 :]
    else:
        host, sep, port = address.rpartition(":")
        if not sep:
            raise ValueError(f"address {address}: missing port in address")
        if ":" in host:
            raise ValueError(f"address {address}: too many colons in address")
    if not port.isdigit() or int(port) > 65535:
        raise ValueError(f"address {address}: invalid port")
    return host, int(port)


def _parse_proxy(proxy: str) -> tuple[str, int, str, str]:
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in proxy):
        raise ProxyError(f"Invalid proxy: {proxy!r} contains control characters")
    parts = urlsplit(proxy)
    if parts.scheme.lower() not in ("socks5", "socks5h"):
        raise ProxyError(f"Invalid proxy: {proxy}: unknown scheme {parts.scheme!r}")
    try:
        port = parts.port or _DEFAULT_SOCKS_PORT
    except ValueError as exc:
        raise ProxyError(f"Invalid proxy: {proxy}: {exc}") from None
    if not parts.hostname:
        raise ProxyError(f"Invalid proxy: {proxy}: missing host")
    return parts.hostname, port, unquote(parts.username or ""), unquote(parts.password or "")


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    data = bytearray()
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            raise ConnectionError("unexpected end of data from proxy")
        data += chunk
    return bytes(data)


def _socks5_connect(sock: socket.socket, target: str, username: str, password: str) -> None:
    host, port = _split_host_port(target)
    methods = [0x00, 0x02] if username else [0x00]
    sock.sendall(bytes([5, len(methods), *methods]))
    version, method = _recv_exact(sock, 2)
    if version != 5:
        raise ConnectionError(f"unexpected protocol version {version} from proxy")
    if method == 0xFF:
        raise ConnectionError("no acceptable authentication methods")
    if method == 0x02:
        user, secret = username.encode(), password.encode()
        sock.sendall(bytes([1, len(user)]) + user + bytes([len(secret)]) + secret)
        _, status = _recv_exact(sock, 2)
        if status != 0:
            raise ConnectionError("username/password authentication failed")
    elif method != 0x00:
        raise ConnectionError(f"unsupported authentication method {method}")

    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        name = host.encode("idna")
        address = bytes([3, len(name)]) + name
    else:
        address = bytes([1 if ip.version == 4 else 4]) + ip.packed
    sock.sendall(bytes([5, 1, 0]) + address + struct.pack("!H", port))

    _, reply, _, kind = _recv_exact(sock, 4)
    if reply != 0:
        reason = _SOCKS_REPLIES.get(reply, f"unknown code {reply}")
        raise ConnectionError(f"socks5 connect to {target} failed: {reason}")
    if kind == 1:
        _recv_exact(sock, 4 + 2)
    elif kind == 4:
        _recv_exact(sock, 16 + 2)
    elif kind == 3:
        _recv_exact(sock, _recv_exact(sock, 1)[0] + 2)
    else:
        raise ConnectionError(f"unknown address type {kind} from proxy")


def open_connection(proxy: str, host: str, timeout: float) -> socket.socket:
    """Open a TCP connection to ``host:port``, through a SOCKS5 proxy if one is given."""
    if not proxy.strip():
        return socket.create_connection(_split_host_port(host), timeout=timeout)
    proxy_host, proxy_port, username, password = _parse_proxy(proxy)
    sock = socket.create_connection((proxy_host, proxy_port), timeout=timeout)
    try:
        _socks5_connect(sock, host, username, password)
    except BaseException:
        sock.close()
        raise
    return sock


def _disable_linger(sock: socket.socket) -> None:
    """Close with a reset so that no TIME_WAIT state is left behind."""
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))
    except (OSError, AttributeError):
        pass


@dataclass
class TCPProbe:
    """Checks that a TCP connection to ``host`` can be established."""

    name: str
    host: str
    proxy: str = ""
    no_linger: bool = False
    kind: str = field(default="", init=False)
    timeout: float = field(default=DEFAULT_TIMEOUT, init=False)

    def config(self, timeout: float | None = None) -> None:
        """Prepare the probe; a missing or non-positive timeout takes the default."""
        self.kind = "tcp"
        self.timeout = timeout if timeout and timeout > 0 else DEFAULT_TIMEOUT
        log.debug("[%s / %s] configuration: %r", self.kind, self.name, self)

    def do_probe(self) -> tuple[bool, str]:
        """Try to connect; return whether it worked and a message."""
        try:
            conn = open_connection(self.proxy, self.host, self.timeout)
        except (OSError, ValueError) as exc:
            log.error("[%s / %s] error: %s", self.kind, self.name, exc)
            return False, f"Error: {exc}"
        with conn:
            if not self.no_linger:
                _disable_linger(conn)
        return True, "TCP Connection Established Successfully!"