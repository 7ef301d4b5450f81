"""Result types produced by probe sequences."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional


class FailureKind(str, enum.Enum):
    TIMEOUT = "timeout"
    RESOLUTION_ERROR = "resolution error"
    PERMISSION_DENIED = "permission denied"
    TRANSPORT_ERROR = "transport error"
    MALFORMED_REPLY = "malformed reply"


@dataclass(frozen=True)
class ProbeOutcome:
    sequence: int
    succeeded: bool
    elapsed_ms: float = 0.0
    failure: Optional[FailureKind] = None
    detail: Optional[str] = None

    @classmethod
    def success(cls, sequence: int, elapsed_ms: float) -> "ProbeOutcome":
        return cls(sequence=sequence, succeeded=True, elapsed_ms=elapsed_ms)

    @classmethod
    def failed(
        cls, sequence: int, failure: FailureKind, detail: Optional[str] = None
    ) -> "ProbeOutcome":
        return cls(sequence=sequence, succeeded=False, failure=failure, detail=detail)

    def __str__(self) -> str:
        if self.succeeded:
            return f"seq={self.sequence} time={self.elapsed_ms:.2f} ms"
        reason = self.failure.value if self.failure else "failed"
        if self.detail:
            reason = f"{reason}: {self.detail}"
        return f"seq={self.sequence} {reason}"


@dataclass
class HostStats:
    sent: int = 0
    received: int = 0
    lost: int = 0
    rtt_min: Optional[float] = None
    rtt_avg: Optional[float] = None
    rtt_max: Optional[float] = None
    rtt_total: float = 0.0

    @property
    def loss_percent(self) -> float:
        return (self.lost / self.sent) * 100 if self.sent else 0.0

    def record(self, outcome: ProbeOutcome) -> None:
        self.sent += 1
        if not outcome.succeeded:
            self.lost += 1
            return
        rtt = outcome.elapsed_ms
        self.received += 1
        self.rtt_total += rtt
        if self.rtt_min is None or rtt < self.rtt_min:
            self.rtt_min = rtt
        if self.rtt_max is None or rtt > self.rtt_max:
            self.rtt_max = rtt

    def finalize(self) -> "HostStats":
        self.rtt_avg = self.rtt_total / self.received if self.received else None
        return self


@dataclass
class HostReport:
    target: str
    identifier: int
    stats: HostStats = field(default_factory=HostStats)
    resolved: Optional[str] = None
    outcomes: list[ProbeOutcome] = field(default_factory=list)
    failure: Optional[FailureKind] = None
    error: Optional[str] = None
    elapsed: float = 0.0

    @property
    def completed(self) -> bool:
        return self.failure is None

    def __str__(self) -> str:
        stats = self.stats
        address = self.resolved or "?"
        if self.failure is not None:
            return f"{self.target} ({address}): {self.error or self.failure.value}"
        line = (
            f"{self.target} ({address}): sent={stats.sent} received={stats.received} "
            f"lost={stats.lost} ({stats.loss_percent:.1f}% loss)"
        )
        if (
            stats.rtt_min is not None
            and stats.rtt_avg is not None
            and stats.rtt_max is not None
        ):
            line += (
                f" min/avg/max={stats.rtt_min:.3f}/{stats.rtt_avg:.3f}/"
                f"{stats.rtt_max:.3f} ms"
            )
        return line

    def __rich__(self) -> str:  # pragma: no cover - rich display helper
        return self.__str__()


@dataclass
class RunReport:
    hosts: list[HostReport]
    elapsed: float
    peak_concurrency: int

    @property
    def sent(self) -> int:
        return sum(report.stats.sent for report in self.hosts)

    @property
    def received(self) -> int:
        return sum(report.stats.received for report in self.hosts)

    @property
    def failed_hosts(self) -> list[HostReport]:
        return [report for report in self.hosts if not report.completed]
