"""Presentation helpers for procsnap snapshots."""

import ipaddress
from collections.abc import Iterable
from dataclasses import dataclass

from procsnap.models import ConnectionStatus, TcpConnection

_WAITING = (ConnectionStatus.TIME_WAIT, ConnectionStatus.CLOSE_WAIT)


def format_bytes(size: int) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:5.1f}{unit}" if unit != "B" else f"{int(size):5d}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def format_address(raw: str) -> str:
    """
    Decode a kernel ``HEXIP:HEXPORT`` address into readable form.

    IPv4 addresses are 8 hex digits in host (little-endian) byte order;
    IPv6 addresses are 32 hex digits, four little-endian 32-bit words.
    Anything that does not decode is returned unchanged.

    >>> format_address("0100007F:0016")
    '127.0.0.1:22'
    """
    host, sep, port = raw.partition(":")
    if not sep:
        return raw

    try:
        port_number = int(port, 16)
        packed = bytes.fromhex(host)
    except ValueError:
        return raw

    if len(packed) == 4:
        return f"{ipaddress.IPv4Address(packed[::-1])}:{port_number}"
    if len(packed) == 16:
        words = b"".join(packed[i : i + 4][::-1] for i in range(0, 16, 4))
        return f"[{ipaddress.IPv6Address(words)}]:{port_number}"
    return raw


@dataclass(slots=True, frozen=True)
class ConnectionSummary:
    """Connection counts by broad state."""

    established: int
    listening: int
    waiting: int
    total: int


def summarize_connections(connections: Iterable[TcpConnection]) -> ConnectionSummary:
    established = listening = waiting = total = 0
    for connection in connections:
        total += 1
        if connection.status is ConnectionStatus.ESTABLISHED:
            established += 1
        elif connection.status is ConnectionStatus.LISTEN:
            listening += 1
        elif connection.status in _WAITING:
            waiting += 1
    return ConnectionSummary(
        established=established,
        listening=listening,
        waiting=waiting,
        total=total,
    )
