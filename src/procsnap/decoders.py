"""Positional record decoders for the network tables in /proc/net."""

from procsnap.errors import MalformedRecord
from procsnap.models import ConnectionStatus, InterfaceCounters, TcpConnection

# /proc/net/dev: receive block (8 columns) then transmit block (8 columns).
NET_DEV_COLUMNS = 16
# Offsets of the counters kept from each block; fifo/frame/compressed/
# multicast (rx) and fifo/colls/carrier/compressed (tx) are dropped.
_RX_OFFSET = 0
_TX_OFFSET = 8

# /proc/net/tcp prints tx_queue:rx_queue and tr:tm->when as single tokens,
# so a row tokenizes as: sl local rem st tx:rx tr:tm retrnsmt uid timeout inode ...
TCP_MIN_TOKENS = 10
_TCP_LOCAL = 1
_TCP_REMOTE = 2
_TCP_STATE = 3
_TCP_UID = 7
_TCP_INODE = 9

_U64_MAX = 2**64 - 1


def _parse_counter(token: str, line: str, line_number: int | None) -> int:
    if not (token.isascii() and token.isdigit()):
        raise MalformedRecord(f"Non-numeric counter {token!r}", line, line_number)
    value = int(token)
    if value > _U64_MAX:
        raise MalformedRecord(f"Counter {token} exceeds 64 bits", line, line_number)
    return value


def decode_interface_line(
    line: str, line_number: int | None = None
) -> tuple[str, InterfaceCounters]:
    """
    Decode one interface row of /proc/net/dev.

    Args:
        line: Raw row, e.g. ``"  eth0: 100 1 0 0 0 0 0 0 200 2 0 0 0 0 0 0"``.
        line_number: 1-based position in the source, for error reporting.

    Returns:
        The interface name (leading whitespace removed) and its counters.

    Raises:
        MalformedRecord: No colon, fewer than sixteen columns, or a column
            that is not an unsigned 64-bit integer.
    """
    name, sep, rest = line.partition(":")
    if not sep:
        raise MalformedRecord("Missing interface separator ':'", line, line_number)

    name = name.lstrip(" \t")
    columns = rest.split()
    if len(columns) < NET_DEV_COLUMNS:
        raise MalformedRecord(
            f"Expected {NET_DEV_COLUMNS} columns, found {len(columns)}",
            line,
            line_number,
        )

    values = [_parse_counter(token, line, line_number) for token in columns[:NET_DEV_COLUMNS]]
    counters = InterfaceCounters(
        rx_bytes=values[_RX_OFFSET],
        rx_packets=values[_RX_OFFSET + 1],
        rx_errors=values[_RX_OFFSET + 2],
        rx_dropped=values[_RX_OFFSET + 3],
        tx_bytes=values[_TX_OFFSET],
        tx_packets=values[_TX_OFFSET + 1],
        tx_errors=values[_TX_OFFSET + 2],
        tx_dropped=values[_TX_OFFSET + 3],
    )
    return name, counters


def decode_tcp_line(line: str, line_number: int | None = None) -> TcpConnection:
    """
    Decode one socket row of /proc/net/tcp or /proc/net/tcp6.

    The state column never fails the row: unknown codes become UNKNOWN.
    The uid is normalised to an int, so a zero-padded token such as
    ``01000`` comes back as ``1000``. Raises MalformedRecord when the row is
    too short or the uid is not an ASCII decimal literal.
    """
    tokens = line.split()
    if len(tokens) < TCP_MIN_TOKENS:
        raise MalformedRecord(
            f"Expected at least {TCP_MIN_TOKENS} columns, found {len(tokens)}",
            line,
            line_number,
        )

    uid_token = tokens[_TCP_UID]
    if not (uid_token.isascii() and uid_token.isdigit()):
        raise MalformedRecord(f"Non-numeric uid {uid_token!r}", line, line_number)

    return TcpConnection(
        local_address=tokens[_TCP_LOCAL],
        remote_address=tokens[_TCP_REMOTE],
        status=ConnectionStatus.from_hex(tokens[_TCP_STATE]),
        uid=int(uid_token),
        inode=tokens[_TCP_INODE],
    )
