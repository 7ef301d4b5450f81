"""ICMP Echo encoding and decoding.

Wire layout shared by ICMPv4 (RFC 792) and ICMPv6 (RFC 4443) echo messages::

    0       1       2       3       4       5       6       7
    +-------+-------+-------+-------+-------+-------+-------+-------+
    | type  | code  |   checksum    |  identifier   |   sequence    |
    +-------+-------+-------+-------+-------+-------+-------+-------+
    | payload ...

The ICMPv4 checksum is computed here. The ICMPv6 checksum covers a
pseudo-header that only the kernel knows, so it is left as zero.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from ._exceptions import EncodingError, MalformedReplyError

ICMP_ECHO_REPLY = 0
ICMP_ECHO_REQUEST = 8
ICMPV6_ECHO_REQUEST = 128
ICMPV6_ECHO_REPLY = 129

ICMPV4_ECHO_TYPES = frozenset({ICMP_ECHO_REQUEST, ICMP_ECHO_REPLY})
ICMPV6_ECHO_TYPES = frozenset({ICMPV6_ECHO_REQUEST, ICMPV6_ECHO_REPLY})
ECHO_TYPES = ICMPV4_ECHO_TYPES | ICMPV6_ECHO_TYPES

REQUEST_TYPES = {4: ICMP_ECHO_REQUEST, 6: ICMPV6_ECHO_REQUEST}
REPLY_TYPES = {4: ICMP_ECHO_REPLY, 6: ICMPV6_ECHO_REPLY}

HEADER_FORMAT = "!BBHHH"
HEADER_LENGTH = struct.calcsize(HEADER_FORMAT)
MIN_MESSAGE_LENGTH = 4
MIN_IP_HEADER_LENGTH = 20


@dataclass(frozen=True)
class EchoMessage:
    type: int
    code: int = 0
    identifier: int = 0
    sequence: int = 0
    payload: bytes = b""
    checksum: int = 0

    @property
    def is_echo(self) -> bool:
        return self.type in ECHO_TYPES

    @property
    def is_request(self) -> bool:
        return self.type in (ICMP_ECHO_REQUEST, ICMPV6_ECHO_REQUEST)

    @property
    def is_reply(self) -> bool:
        return self.type in (ICMP_ECHO_REPLY, ICMPV6_ECHO_REPLY)

    @property
    def family(self) -> int:
        """IP version the message type belongs to (6 for ICMPv6 types >= 128)."""
        return 6 if self.type >= 128 else 4

    def matches(self, identifier: int, sequence: int) -> bool:
        return self.identifier == identifier and self.sequence == sequence


def echo_request(
    family: int, identifier: int, sequence: int, payload: bytes = b""
) -> EchoMessage:
    return EchoMessage(
        type=REQUEST_TYPES[family],
        identifier=identifier,
        sequence=sequence,
        payload=payload,
    )


def echo_reply(
    family: int, identifier: int, sequence: int, payload: bytes = b""
) -> EchoMessage:
    return EchoMessage(
        type=REPLY_TYPES[family],
        identifier=identifier,
        sequence=sequence,
        payload=payload,
    )


def internet_checksum(data: bytes) -> int:
    """One's-complement of the one's-complement sum of 16-bit words."""
    if len(data) % 2:
        data += b"\x00"
    total = sum(struct.unpack("!%dH" % (len(data) // 2), data))
    while total >> 16:
        total = (total >> 16) + (total & 0xFFFF)
    return (~total) & 0xFFFF


def verify_checksum(data: bytes) -> bool:
    """True when ``data`` already carries a valid Internet checksum."""
    return internet_checksum(data) == 0


def _pack_header(message: EchoMessage, checksum: int) -> bytes:
    try:
        return struct.pack(
            HEADER_FORMAT,
            message.type,
            message.code,
            checksum,
            message.identifier,
            message.sequence,
        )
    except struct.error as exc:
        raise EncodingError(f"Cannot encode {message!r}: {exc}") from exc


def encode(message: EchoMessage) -> bytes:
    """Serialize ``message``, filling in the checksum for ICMPv4 types."""
    payload = bytes(message.payload)
    packet = _pack_header(message, 0) + payload
    if message.type in ICMPV6_ECHO_TYPES:
        return packet
    checksum = internet_checksum(packet)
    return _pack_header(message, checksum) + payload


def decode(data: bytes) -> EchoMessage:
    """Parse an ICMP message with its IP header already removed.

    Non-echo messages keep zero identifier and sequence and an empty
    payload; callers must check ``type`` before trusting those fields.
    """
    if len(data) < MIN_MESSAGE_LENGTH:
        raise MalformedReplyError(
            f"Message shorter than ICMP header ({len(data)} < {MIN_MESSAGE_LENGTH} bytes)."
        )
    msg_type, code, checksum = struct.unpack("!BBH", data[:4])
    if len(data) < HEADER_LENGTH or msg_type not in ECHO_TYPES:
        return EchoMessage(type=msg_type, code=code, checksum=checksum)

    identifier, sequence = struct.unpack("!HH", data[4:8])
    return EchoMessage(
        type=msg_type,
        code=code,
        identifier=identifier,
        sequence=sequence,
        payload=bytes(data[HEADER_LENGTH:]),
        checksum=checksum,
    )


def strip_ip_header(data: bytes) -> bytes:
    """Drop the IPv4 header that raw ICMPv4 sockets prepend to each datagram."""
    if len(data) < MIN_IP_HEADER_LENGTH:
        return data
    ihl = (data[0] & 0x0F) * 4
    return data[ihl:]
