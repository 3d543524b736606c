"""Snapshot readers for the /proc pseudo-filesystem."""

import logging
import sys
import traceback
from itertools import islice
from pathlib import Path
from typing import TextIO

import psutil

from procsnap.config import DEFAULT_MEMINFO_LINES, DEFAULT_PROC_ROOT
from procsnap.decoders import decode_interface_line, decode_tcp_line
from procsnap.errors import (
    MalformedRecord,
    ProcessNotFoundOrDenied,
    SnapshotError,
    SourceUnavailable,
)
from procsnap.models import (
    InterfaceCounters,
    NetworkInterfaceStats,
    ReadResult,
    TcpConnection,
    TcpConnectionTable,
)

logger = logging.getLogger(__name__)

PROCESS_STATUS_TEMPLATE = "{pid}/status"
NET_DEV_HEADER_LINES = 2
TCP_HEADER_LINES = 1
LOOPBACK_INTERFACE = "lo"


def _open_source(path: Path) -> TextIO:
    return open(path, encoding="utf-8", errors="replace")


def _describe(exc: OSError) -> str:
    return exc.strerror or str(exc)


def _log(level: int, msg: str, *args) -> None:
    """Log through the module logger; a failing handler never reaches the caller."""
    try:
        logger.log(level, msg, *args)
    except Exception:
        if logging.raiseExceptions:
            sys.stderr.write("--- Logging error ---\n")
            traceback.print_exc(file=sys.stderr)


class _ProcReader:
    """Common state of every reader: the root the sources live under."""

    def __init__(self, proc_root: Path | str = DEFAULT_PROC_ROOT) -> None:
        self._proc_root = Path(proc_root)

    @property
    def proc_root(self) -> Path:
        """Get the root directory sources are resolved against."""
        return self._proc_root


class CpuSnapshotReader(_ProcReader):
    """Reads the aggregate CPU line of ``stat``."""

    @property
    def source(self) -> Path:
        return self._proc_root / "stat"

    def read(self) -> ReadResult:
        """
        Return the first line of the CPU statistics source, verbatim.

        An empty source yields an empty, successful result.
        """
        path = self.source
        try:
            with _open_source(path) as source:
                line = source.readline()
        except OSError as exc:
            _log(logging.ERROR, "Failed to open %s: %s", path, _describe(exc))
            return ReadResult.failure(
                SourceUnavailable("Failed to read CPU information", str(path))
            )

        line = line.rstrip("\r\n")
        _log(logging.INFO, "Read CPU info: %s", line)
        return ReadResult.success(line)


class MemorySnapshotReader(_ProcReader):
    """Reads the leading lines of ``meminfo``."""

    def __init__(
        self,
        proc_root: Path | str = DEFAULT_PROC_ROOT,
        line_limit: int = DEFAULT_MEMINFO_LINES,
    ) -> None:
        """
        Initialize the MemorySnapshotReader.

        Args:
            proc_root: Directory holding the ``meminfo`` source.
            line_limit: How many leading lines to keep. Default 5.
        """
        super().__init__(proc_root)
        self._line_limit = max(0, line_limit)

    @property
    def line_limit(self) -> int:
        """Get the number of lines kept."""
        return self._line_limit

    @line_limit.setter
    def line_limit(self, value: int) -> None:
        """Set the number of lines kept."""
        self._line_limit = max(0, value)

    @property
    def source(self) -> Path:
        return self._proc_root / "meminfo"

    def read(self) -> ReadResult:
        """Return up to ``line_limit`` lines, each newline-terminated, in order."""
        path = self.source
        lines: list[str] = []
        try:
            with _open_source(path) as source:
                for line in islice(source, self._line_limit):
                    lines.append(line if line.endswith("\n") else line + "\n")
        except OSError as exc:
            _log(logging.ERROR, "Failed to open %s: %s", path, _describe(exc))
            return ReadResult.failure(
                SourceUnavailable("Failed to read memory information", str(path))
            )

        _log(logging.INFO, "Read memory info (%d lines)", len(lines))
        return ReadResult.success("".join(lines))


class ProcessInfoReader(_ProcReader):
    """Reads the full status record of one process."""

    def source(self, pid: int) -> Path:
        return self._proc_root / PROCESS_STATUS_TEMPLATE.format(pid=pid)

    def read(self, pid: int) -> ReadResult:
        """
        Return every line of the process's status record, newline-terminated.

        The pid is not validated: zero, negative or vanished pids produce a
        path that fails to open, reported as ProcessNotFoundOrDenied.
        """
        path = self.source(pid)
        lines: list[str] = []
        try:
            with _open_source(path) as source:
                for line in source:
                    lines.append(line if line.endswith("\n") else line + "\n")
        except OSError as exc:
            pid_exists = self._pid_exists_hint(pid)
            _log(
                logging.ERROR,
                "Failed to open %s: %s (pid exists: %s)",
                path,
                _describe(exc),
                "unknown" if pid_exists is None else pid_exists,
            )
            return ReadResult.failure(
                ProcessNotFoundOrDenied(
                    "Process not found or permission denied",
                    pid=pid,
                    source=str(path),
                    pid_exists=pid_exists,
                )
            )

        _log(logging.INFO, "Read process info for PID: %s", pid)
        return ReadResult.success("".join(lines))

    def _pid_exists_hint(self, pid: int) -> bool | None:
        """Ask the live system whether the pid exists; None off the real /proc."""
        if self._proc_root != DEFAULT_PROC_ROOT or not isinstance(pid, int):
            return None
        try:
            return psutil.pid_exists(pid)
        except (OverflowError, ValueError):
            # Outside the platform's pid_t range
            return None


class NetworkInterfaceStatsReader(_ProcReader):
    """Reads per-interface counters from ``net/dev``, loopback excluded."""

    @property
    def source(self) -> Path:
        return self._proc_root / "net" / "dev"

    def snapshot(self) -> NetworkInterfaceStats:
        """
        Collect the counters of every non-loopback interface.

        Lines that do not decode are skipped and kept on the result's
        ``skipped`` list; they never abort the snapshot.

        Raises:
            SourceUnavailable: The source could not be opened or read.
        """
        path = self.source
        interfaces: dict[str, InterfaceCounters] = {}
        skipped: list[MalformedRecord] = []
        try:
            with _open_source(path) as source:
                for line_number, line in enumerate(source, start=1):
                    if line_number <= NET_DEV_HEADER_LINES or not line.strip():
                        continue
                    line = line.rstrip("\r\n")
                    if line.partition(":")[0].lstrip(" \t") == LOOPBACK_INTERFACE:
                        continue
                    try:
                        name, counters = decode_interface_line(line, line_number)
                    except MalformedRecord as exc:
                        exc.source = str(path)
                        skipped.append(exc)
                        continue
                    interfaces[name] = counters
        except OSError as exc:
            _log(logging.ERROR, "Failed to open %s: %s", path, _describe(exc))
            raise SourceUnavailable("Failed to read network statistics", str(path)) from exc

        _log(
            logging.INFO,
            "Read network interface statistics (%d interfaces, %d malformed lines skipped)",
            len(interfaces),
            len(skipped),
        )
        return NetworkInterfaceStats(interfaces=interfaces, skipped=tuple(skipped))

    def read(self) -> ReadResult:
        """Return the snapshot as a JSON object keyed by interface name."""
        try:
            stats = self.snapshot()
        except SnapshotError as exc:
            return ReadResult.failure(exc)
        return ReadResult.success(stats.to_json())


class TcpConnectionTableReader(_ProcReader):
    """Reads the socket rows of ``net/tcp`` (or ``net/tcp6``)."""

    def __init__(self, proc_root: Path | str = DEFAULT_PROC_ROOT, ipv6: bool = False) -> None:
        super().__init__(proc_root)
        self._ipv6 = ipv6

    @property
    def source(self) -> Path:
        return self._proc_root / "net" / ("tcp6" if self._ipv6 else "tcp")

    def snapshot(self) -> TcpConnectionTable:
        """
        Collect one connection per table row, in source order.

        Raises:
            SourceUnavailable: The table could not be opened; the message
                carries the operating system's description of the failure.
        """
        path = self.source
        connections: list[TcpConnection] = []
        skipped: list[MalformedRecord] = []
        try:
            with _open_source(path) as source:
                for line_number, line in enumerate(source, start=1):
                    if line_number <= TCP_HEADER_LINES or not line.strip():
                        continue
                    try:
                        connections.append(decode_tcp_line(line, line_number))
                    except MalformedRecord as exc:
                        exc.source = str(path)
                        skipped.append(exc)
        except OSError as exc:
            message = f"Failed to open {path}: {_describe(exc)}"
            _log(logging.ERROR, "%s", message)
            raise SourceUnavailable(message, str(path)) from exc

        _log(
            logging.INFO,
            "Read TCP connections (%d connections, %d malformed lines skipped)",
            len(connections),
            len(skipped),
        )
        return TcpConnectionTable(connections=tuple(connections), skipped=tuple(skipped))

    def read(self) -> ReadResult:
        """Return the snapshot as ``{"connections": [...]}``."""
        try:
            table = self.snapshot()
        except SnapshotError as exc:
            return ReadResult.failure(exc)
        return ReadResult.success(table.to_json())
