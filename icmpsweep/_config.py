from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ._probe import DEFAULT_INTERVAL, DEFAULT_PAYLOAD, DEFAULT_TIMEOUT


@dataclass
class Settings:
    hosts_file: Path = Path("hosts.csv")
    delimiter: str = ","
    comment: str = "#"
    packet_count: int = 10       # echoes per host
    concurrency: int = 10        # simultaneous probe sequences
    timeout: float = DEFAULT_TIMEOUT
    interval: float = DEFAULT_INTERVAL
    payload: bytes = DEFAULT_PAYLOAD

    def validate(self) -> "Settings":
        if self.packet_count < 1:
            raise ValueError("packet count must be at least 1")
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if self.timeout < 0:
            raise ValueError("timeout cannot be negative")
        if self.interval < 0:
            raise ValueError("interval cannot be negative")
        if not self.delimiter:
            raise ValueError("delimiter cannot be empty")
        return self
