from ._codec import (
    ICMP_ECHO_REPLY,
    ICMP_ECHO_REQUEST,
    ICMPV6_ECHO_REPLY,
    ICMPV6_ECHO_REQUEST,
    EchoMessage,
    decode,
    encode,
    internet_checksum,
    strip_ip_header,
)
from ._config import Settings
from ._dispatcher import ConcurrencyBudget, Dispatcher
from ._exceptions import (
    EncodingError,
    IcmpsweepError,
    MalformedReplyError,
    RawSocketPermissionError,
    ResolutionError,
)
from ._hosts import parse_hosts, read_hosts
from ._models import FailureKind, HostReport, HostStats, ProbeOutcome, RunReport
from ._probe import ProbeRunner
from ._transport import EchoTransport, ResolvedAddress, resolve_host

__all__ = [
    "ICMP_ECHO_REPLY",
    "ICMP_ECHO_REQUEST",
    "ICMPV6_ECHO_REPLY",
    "ICMPV6_ECHO_REQUEST",
    "EchoMessage",
    "decode",
    "encode",
    "internet_checksum",
    "strip_ip_header",
    "Settings",
    "ConcurrencyBudget",
    "Dispatcher",
    "EncodingError",
    "IcmpsweepError",
    "MalformedReplyError",
    "RawSocketPermissionError",
    "ResolutionError",
    "parse_hosts",
    "read_hosts",
    "FailureKind",
    "HostReport",
    "HostStats",
    "ProbeOutcome",
    "RunReport",
    "ProbeRunner",
    "EchoTransport",
    "ResolvedAddress",
    "resolve_host",
]
