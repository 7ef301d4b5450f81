# tests/conftest.py
import errno
import socket
from dataclasses import replace

import pytest

from icmpsweep._codec import decode, echo_reply, encode
from icmpsweep._exceptions import RawSocketPermissionError, ResolutionError
from icmpsweep._probe import ProbeRunner
from icmpsweep._transport import ResolvedAddress

IPV4_HEADER = bytes([0x45]) + bytes(19)


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    def __init__(self, network, destination, timeout):
        self.network = network
        self.destination = destination
        self.timeout = timeout
        self.inbox = []
        self.closed = False

    @property
    def strips_ip_header(self):
        return self.destination.family == socket.AF_INET

    def __enter__(self):
        self.network.opened.append(self)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True

    def _frame(self, packet: bytes) -> bytes:
        return IPV4_HEADER + packet if self.strips_ip_header else packet

    def send(self, packet: bytes) -> None:
        request = decode(packet)
        self.network.sent.append(request)
        behaviour = self.network.script.get(request.sequence, ("reply", 10.0))
        kind = behaviour[0]
        family = self.destination.version

        def reply(sequence=request.sequence, identifier=request.identifier, code=0):
            message = echo_reply(family, identifier, sequence, request.payload)
            if code:
                message = replace(message, code=code)
            return self._frame(encode(message))

        if kind == "eperm":
            raise RawSocketPermissionError("Operation not permitted")
        if kind == "oserror":
            raise OSError(errno.ENETUNREACH, "Network is unreachable")
        if kind == "reply":
            self.inbox.append((behaviour[1], reply()))
        elif kind == "wrong_seq":
            self.inbox.append((1.0, reply(sequence=request.sequence + 100)))
        elif kind == "wrong_id":
            self.inbox.append((1.0, reply(identifier=request.identifier ^ 0xFFFF)))
        elif kind == "bad_code":
            self.inbox.append((behaviour[1], reply(code=1)))
        elif kind == "loopback":
            self.inbox.append((0.1, self._frame(packet)))
            self.inbox.append((behaviour[1], reply()))
        elif kind == "malformed":
            self.inbox.append((0.1, b"\x00\x01"))
            self.inbox.append((behaviour[1], reply()))
        # "timeout": nothing arrives

    def receive(self) -> bytes:
        if not self.inbox:
            self.network.clock.advance(self.timeout)
            raise TimeoutError("no reply")
        delay_ms, data = self.inbox.pop(0)
        self.network.clock.advance(delay_ms / 1000)
        return data


class FakeNetwork:
    """Transport factory whose behaviour is scripted per sequence number."""

    def __init__(self, script=None, clock=None):
        self.script = script or {}
        self.clock = clock or FakeClock()
        self.sent = []
        self.opened = []

    def __call__(self, destination, timeout):
        return FakeTransport(self, destination, timeout)


def static_resolver(address="192.0.2.1", family=socket.AF_INET):
    def resolve(host):
        return ResolvedAddress(address=address, family=family)

    return resolve


def failing_resolver(host):
    raise ResolutionError(host)


@pytest.fixture
def network():
    return FakeNetwork()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_runner(network, sleeps):
    def factory(**kwargs):
        kwargs.setdefault("resolver", static_resolver())
        kwargs.setdefault("transport_factory", network)
        kwargs.setdefault("clock", network.clock)
        kwargs.setdefault("sleep", sleeps.append)
        return ProbeRunner(**kwargs)

    return factory
