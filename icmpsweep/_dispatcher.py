"""Concurrent dispatch of probe sequences across a host list."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional, Sequence

from ._exceptions import RawSocketPermissionError
from ._log import logger
from ._models import HostReport, RunReport
from ._probe import ProbeRunner

CompletionCallback = Callable[[HostReport], None]


class ConcurrencyBudget:
    """Counting admission gate for in-flight probe sequences."""

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError(f"Concurrency limit must be at least 1, got {limit}")
        self.limit = limit
        self._in_flight = 0
        self._peak = 0
        self._cond = threading.Condition()

    @property
    def in_flight(self) -> int:
        with self._cond:
            return self._in_flight

    @property
    def peak(self) -> int:
        with self._cond:
            return self._peak

    def acquire(self) -> None:
        """Block until a slot is free, then take it."""
        with self._cond:
            self._cond.wait_for(lambda: self._in_flight < self.limit)
            self._in_flight += 1
            self._peak = max(self._peak, self._in_flight)

    def release(self) -> None:
        with self._cond:
            if self._in_flight == 0:
                raise RuntimeError("release() called with no sequence in flight")
            self._in_flight -= 1
            self._cond.notify_all()

    def wait_idle(self) -> None:
        """Block until every admitted sequence has released its slot."""
        with self._cond:
            self._cond.wait_for(lambda: self._in_flight == 0)


class Dispatcher:
    """Run one probe sequence per host, at most ``concurrency_limit`` at once.

    Hosts are admitted in list order. The host's position in the list is its
    ICMP identifier, so concurrent sequences can tell their replies apart.
    A :class:`RawSocketPermissionError` in any sequence stops admission,
    asks running sequences to stop, and is re-raised from :meth:`run_all`.
    """

    def __init__(
        self,
        runner: ProbeRunner,
        concurrency_limit: int,
        *,
        on_complete: Optional[CompletionCallback] = None,
    ) -> None:
        self.runner = runner
        self.budget = ConcurrencyBudget(concurrency_limit)
        self.on_complete = on_complete
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._fatal: Optional[RawSocketPermissionError] = None

    def _run_host(
        self,
        host: str,
        index: int,
        packet_count: int,
        reports: list[Optional[HostReport]],
    ) -> None:
        try:
            report = self.runner.run_probe_sequence(
                host, packet_count, index, stop=self._stop
            )
            reports[index] = report
            if self.on_complete is not None and not self._stop.is_set():
                with self._lock:
                    self.on_complete(report)
        except RawSocketPermissionError as exc:
            logger.error(str(exc))
            with self._lock:
                if self._fatal is None:
                    self._fatal = exc
            self._stop.set()
        finally:
            self.budget.release()

    def run_all(self, hosts: Sequence[str], packet_count: int) -> RunReport:
        started = time.perf_counter()
        reports: list[Optional[HostReport]] = [None] * len(hosts)
        workers: list[threading.Thread] = []

        logger.info(
            "Dispatching %d hosts (%d packets each, %d concurrent)",
            len(hosts),
            packet_count,
            self.budget.limit,
        )
        for index, host in enumerate(hosts):
            self.budget.acquire()
            if self._stop.is_set():
                self.budget.release()
                break
            worker = threading.Thread(
                target=self._run_host,
                args=(host, index, packet_count, reports),
                name=f"icmpsweep-{index}",
            )
            worker.start()
            workers.append(worker)

        self.budget.wait_idle()
        for worker in workers:
            worker.join()

        if self._fatal is not None:
            raise self._fatal

        return RunReport(
            hosts=[report for report in reports if report is not None],
            elapsed=time.perf_counter() - started,
            peak_concurrency=self.budget.peak,
        )
