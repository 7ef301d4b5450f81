"""Raw ICMP sockets and address resolution."""

from __future__ import annotations

import errno
import ipaddress
import select
import socket
import time
from dataclasses import dataclass
from typing import Optional

from ._exceptions import RawSocketPermissionError, ResolutionError
from ._log import logger

RECV_BUFFER = 65535

PERMISSION_ERRNOS = frozenset({errno.EPERM, errno.EACCES})

PERMISSION_MESSAGE = (
    "Raw socket requires elevated privileges. Use sudo or grant "
    "CAP_NET_RAW to the Python interpreter."
)


@dataclass(frozen=True)
class ResolvedAddress:
    address: str
    family: int

    @property
    def version(self) -> int:
        return 6 if self.family == socket.AF_INET6 else 4


def resolve_host(host: str) -> ResolvedAddress:
    """Resolve ``host`` with the system resolver, preferring IPv4."""
    try:
        literal = ipaddress.ip_address(host)
    except ValueError:
        pass
    else:
        family = socket.AF_INET6 if literal.version == 6 else socket.AF_INET
        return ResolvedAddress(address=str(literal), family=family)

    try:
        infos = socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    except (OSError, UnicodeError) as exc:
        raise ResolutionError(host) from exc

    candidates = [
        info for info in infos if info[0] in (socket.AF_INET, socket.AF_INET6)
    ]
    if not candidates:
        raise ResolutionError(host, f"No IP address for {host}")
    candidates.sort(key=lambda info: 0 if info[0] == socket.AF_INET else 1)
    family, _, _, _, sockaddr = candidates[0]
    return ResolvedAddress(address=sockaddr[0], family=family)


def is_permission_error(exc: OSError) -> bool:
    return isinstance(exc, PermissionError) or exc.errno in PERMISSION_ERRNOS


class EchoTransport:
    """One raw ICMP socket connected to a single address.

    ``timeout`` is a deadline for the whole exchange, set when the transport
    opens; :meth:`receive` raises :class:`TimeoutError` once it passes.
    """

    def __init__(self, destination: ResolvedAddress, timeout: float) -> None:
        self.destination = destination
        self.timeout = timeout
        self.deadline = time.monotonic() + timeout
        self._sock: Optional[socket.socket] = None

    @property
    def sock(self) -> socket.socket:
        if self._sock is None:
            if self.destination.family == socket.AF_INET6:
                proto = socket.IPPROTO_ICMPV6
            else:
                proto = socket.IPPROTO_ICMP
            try:
                sock = socket.socket(self.destination.family, socket.SOCK_RAW, proto)
            except OSError as exc:
                if is_permission_error(exc):
                    raise RawSocketPermissionError(PERMISSION_MESSAGE) from exc
                raise
            try:
                sock.connect((self.destination.address, 0))
            except OSError:
                sock.close()
                raise
            self._sock = sock
        return self._sock

    def open(self) -> "EchoTransport":
        self.sock
        return self

    def close(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            finally:
                self._sock = None

    def __enter__(self) -> "EchoTransport":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def strips_ip_header(self) -> bool:
        """ICMPv4 raw sockets deliver the IP header, ICMPv6 ones do not."""
        return self.destination.family == socket.AF_INET

    def send(self, packet: bytes) -> None:
        try:
            self.sock.send(packet)
        except OSError as exc:
            if is_permission_error(exc):
                raise RawSocketPermissionError(str(exc)) from exc
            raise

    def receive(self) -> bytes:
        remaining = self.deadline - time.monotonic()
        if remaining <= 0:
            raise TimeoutError(f"No reply from {self.destination.address}")
        ready, _, _ = select.select([self.sock], [], [], remaining)
        if not ready:
            raise TimeoutError(f"No reply from {self.destination.address}")
        try:
            data = self.sock.recv(RECV_BUFFER)
        except OSError as exc:
            if is_permission_error(exc):
                raise RawSocketPermissionError(str(exc)) from exc
            raise
        logger.debug("Received %d bytes from %s", len(data), self.destination.address)
        return data
