"""Probe sequences: one echo per transport, one sequence per host."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from ._codec import REPLY_TYPES, decode, echo_request, encode, strip_ip_header
from ._exceptions import MalformedReplyError, RawSocketPermissionError, ResolutionError
from ._log import logger
from ._models import FailureKind, HostReport, ProbeOutcome
from ._transport import EchoTransport, ResolvedAddress, resolve_host

DEFAULT_TIMEOUT = 3.0
DEFAULT_INTERVAL = 1.0
DEFAULT_PAYLOAD = b"icmpsweep"

Resolver = Callable[[str], ResolvedAddress]
TransportFactory = Callable[[ResolvedAddress, float], EchoTransport]


class ProbeRunner:
    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        interval: float = DEFAULT_INTERVAL,
        payload: bytes = DEFAULT_PAYLOAD,
        resolver: Resolver = resolve_host,
        transport_factory: TransportFactory = EchoTransport,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.timeout = timeout
        self.interval = interval
        self.payload = payload
        self.resolver = resolver
        self.transport_factory = transport_factory
        self.clock = clock
        self.sleep = sleep

    def send_echo(
        self,
        destination: ResolvedAddress,
        identifier: int,
        sequence: int,
        timeout: Optional[float] = None,
    ) -> ProbeOutcome:
        """Send a single Echo Request and wait for its matching reply.

        :class:`RawSocketPermissionError` propagates; every other failure is
        returned as a failed :class:`ProbeOutcome`.
        """
        identifier &= 0xFFFF
        wire_sequence = sequence & 0xFFFF
        request = echo_request(destination.version, identifier, wire_sequence, self.payload)
        packet = encode(request)
        expected_reply = REPLY_TYPES[destination.version]
        wait = self.timeout if timeout is None else timeout

        try:
            with self.transport_factory(destination, wait) as transport:
                started = self.clock()
                transport.send(packet)
                while True:
                    raw = transport.receive()
                    received_at = self.clock()
                    data = strip_ip_header(raw) if transport.strips_ip_header else raw
                    try:
                        reply = decode(data)
                    except MalformedReplyError as err:
                        logger.debug("Discarding malformed packet: %s", err)
                        continue

                    if not reply.is_echo or not reply.matches(identifier, wire_sequence):
                        continue
                    if reply.is_request:
                        # our own request seen on a loopback path
                        continue
                    if reply.type == expected_reply and reply.code == 0:
                        return ProbeOutcome.success(
                            sequence, (received_at - started) * 1000
                        )
                    return ProbeOutcome.failed(
                        sequence,
                        FailureKind.TRANSPORT_ERROR,
                        f"unexpected ICMP type {reply.type} code {reply.code}",
                    )
        except RawSocketPermissionError:
            raise
        except TimeoutError:
            return ProbeOutcome.failed(sequence, FailureKind.TIMEOUT)
        except OSError as exc:
            return ProbeOutcome.failed(sequence, FailureKind.TRANSPORT_ERROR, str(exc))

    def run_probe_sequence(
        self,
        host: str,
        packet_count: int,
        identifier: int,
        timeout: Optional[float] = None,
        *,
        stop: Optional[threading.Event] = None,
    ) -> HostReport:
        """Probe ``host`` ``packet_count`` times, one echo at a time.

        An unresolvable host ends the sequence at once with
        ``failure=RESOLUTION_ERROR``; packets already sent stay counted.
        """
        report = HostReport(target=host, identifier=identifier & 0xFFFF)
        stats = report.stats
        started = self.clock()
        logger.info("Starting %d probes to %s (id=%d)", packet_count, host, report.identifier)

        for sequence in range(1, packet_count + 1):
            if stop is not None and stop.is_set():
                logger.warning("Probe sequence to %s stopped at seq %d", host, sequence)
                break

            try:
                destination = self.resolver(host)
            except ResolutionError as exc:
                logger.error(str(exc))
                report.failure = FailureKind.RESOLUTION_ERROR
                report.error = str(exc)
                break
            report.resolved = destination.address

            outcome = self.send_echo(destination, identifier, sequence, timeout)
            report.outcomes.append(outcome)
            stats.record(outcome)

            if outcome.succeeded:
                logger.debug(
                    "%s seq %d: reply from %s in %.2f ms",
                    host,
                    sequence,
                    destination.address,
                    outcome.elapsed_ms,
                )
                if sequence < packet_count:
                    delay = self.interval - outcome.elapsed_ms / 1000
                    if delay > 0:
                        self.sleep(delay)
            elif outcome.failure is FailureKind.TIMEOUT:
                logger.warning("%s seq %d: timed out", host, sequence)
            else:
                logger.warning("%s seq %d: %s", host, sequence, outcome.detail)

        stats.finalize()
        report.elapsed = self.clock() - started
        return report
