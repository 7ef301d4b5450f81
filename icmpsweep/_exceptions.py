"""Exception hierarchy for icmpsweep."""

from __future__ import annotations


class IcmpsweepError(Exception):
    """Base class for all icmpsweep errors."""


class EncodingError(IcmpsweepError, ValueError):
    """Raised when a message field does not fit its wire representation."""


class MalformedReplyError(IcmpsweepError, ValueError):
    """Raised when a received datagram is too short to be an ICMP message."""


class ResolutionError(IcmpsweepError):
    """Raised when a host cannot be resolved to an address."""

    def __init__(self, host: str, message: str | None = None) -> None:
        self.host = host
        super().__init__(message or f"Resolve error {host}")


class RawSocketPermissionError(IcmpsweepError, PermissionError):
    """Raised when raw socket creation fails due to missing privileges."""
