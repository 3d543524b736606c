"""Data models for procsnap."""

import json
from dataclasses import asdict, dataclass, field
from enum import Enum

from procsnap.errors import MalformedRecord, SnapshotError

# Names of the counters on the aggregate "cpu" line of /proc/stat, in order.
CPU_COUNTER_NAMES = (
    "user",
    "nice",
    "system",
    "idle",
    "iowait",
    "irq",
    "softirq",
    "steal",
    "guest",
    "guest_nice",
)


def to_compact_json(document: object) -> str:
    """Serialize a document the way every procsnap JSON output is shaped."""
    return json.dumps(document, separators=(",", ":"))


class ConnectionStatus(Enum):
    """TCP socket states as numbered by the kernel's connection table."""

    UNKNOWN = 0
    ESTABLISHED = 1
    SYN_SENT = 2
    SYN_RECV = 3
    FIN_WAIT1 = 4
    FIN_WAIT2 = 5
    TIME_WAIT = 6
    CLOSE = 7
    CLOSE_WAIT = 8
    LAST_ACK = 9
    LISTEN = 10
    CLOSING = 11

    @classmethod
    def from_hex(cls, token: str) -> "ConnectionStatus":
        """Decode a hexadecimal state token; anything unrecognised is UNKNOWN."""
        try:
            code = int(token, 16)
        except ValueError:
            return cls.UNKNOWN
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN

    @property
    def label(self) -> str:
        return self.name


@dataclass(slots=True, frozen=True)
class CpuSnapshot:
    """Named counters of the aggregate CPU line, in source order."""

    label: str
    counters: tuple[tuple[str, int], ...]

    @classmethod
    def parse(cls, line: str) -> "CpuSnapshot":
        parts = line.split()
        if not parts:
            raise MalformedRecord("Empty CPU statistics line", line)

        counters: list[tuple[str, int]] = []
        for index, value in enumerate(parts[1:]):
            if index < len(CPU_COUNTER_NAMES):
                name = CPU_COUNTER_NAMES[index]
            else:
                name = f"field{index + 1}"
            try:
                counters.append((name, int(value)))
            except ValueError as exc:
                raise MalformedRecord(f"Non-numeric CPU counter {name!r}", line) from exc

        return cls(label=parts[0], counters=tuple(counters))

    def as_dict(self) -> dict[str, int]:
        return dict(self.counters)


@dataclass(slots=True, frozen=True)
class MemorySnapshot:
    """Ordered (key, value-with-unit) pairs, e.g. ("MemTotal", "16318420 kB")."""

    entries: tuple[tuple[str, str], ...]

    @classmethod
    def parse(cls, text: str) -> "MemorySnapshot":
        entries = []
        for line in text.splitlines():
            if not line.strip():
                continue
            key, _, value = line.partition(":")
            entries.append((key.strip(), value.strip()))
        return cls(entries=tuple(entries))

    def kib(self, key: str) -> int | None:
        """Numeric part of a value (kB for every meminfo size field)."""
        for name, value in self.entries:
            if name == key:
                parts = value.split()
                if parts and parts[0].isascii() and parts[0].isdigit():
                    return int(parts[0])
                return None
        return None

    def as_dict(self) -> dict[str, str]:
        return dict(self.entries)


@dataclass(slots=True, frozen=True)
class ProcessStatus:
    """Raw "key: value" lines of one process's status record, in source order."""

    entries: tuple[tuple[str, str], ...]

    @classmethod
    def parse(cls, text: str) -> "ProcessStatus":
        entries = []
        for line in text.splitlines():
            if not line.strip():
                continue
            key, _, value = line.partition(":")
            entries.append((key.strip(), value.strip()))
        return cls(entries=tuple(entries))

    def get(self, key: str, default: str | None = None) -> str | None:
        for name, value in self.entries:
            if name == key:
                return value
        return default

    def as_dict(self) -> dict[str, str]:
        return dict(self.entries)


@dataclass(slots=True, frozen=True)
class InterfaceCounters:
    """Receive/transmit counters of one network interface."""

    rx_bytes: int
    rx_packets: int
    rx_errors: int
    rx_dropped: int
    tx_bytes: int
    tx_packets: int
    tx_errors: int
    tx_dropped: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class NetworkInterfaceStats:
    """Per-interface counters keyed by interface name, in source order."""

    interfaces: dict[str, InterfaceCounters]
    skipped: tuple[MalformedRecord, ...] = field(default=())

    def to_json(self) -> str:
        return to_compact_json(
            {name: counters.as_dict() for name, counters in self.interfaces.items()}
        )


@dataclass(slots=True, frozen=True)
class TcpConnection:
    """One row of the TCP connection table; addresses stay in hex IP:PORT form."""

    local_address: str
    remote_address: str
    status: ConnectionStatus
    uid: int
    inode: str

    def as_dict(self) -> dict[str, object]:
        return {
            "local_address": self.local_address,
            "remote_address": self.remote_address,
            "status": self.status.label,
            "uid": self.uid,
            "inode": self.inode,
        }


@dataclass(slots=True, frozen=True)
class TcpConnectionTable:
    """Connections in source order, plus the rows that could not be decoded."""

    connections: tuple[TcpConnection, ...]
    skipped: tuple[MalformedRecord, ...] = field(default=())

    def to_json(self) -> str:
        return to_compact_json(
            {"connections": [connection.as_dict() for connection in self.connections]}
        )


@dataclass(slots=True, frozen=True)
class ReadResult:
    """
    Outcome of one reader call: either a text value or a typed error.

    Readers hand this back instead of raising so that a host can display a
    failure without handling exceptions.
    """

    value: str | None = None
    error: SnapshotError | None = None

    @classmethod
    def success(cls, value: str) -> "ReadResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: SnapshotError) -> "ReadResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> str:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value if self.value is not None else ""

    @property
    def text(self) -> str:
        """The value, or an ``Error: ...`` line suitable for display."""
        if self.error is not None:
            return f"Error: {self.error.message}"
        return self.value if self.value is not None else ""
