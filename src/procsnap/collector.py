"""Facade over the procsnap readers."""

import os

from procsnap.config import ReaderConfig
from procsnap.models import ReadResult
from procsnap.readers import (
    CpuSnapshotReader,
    MemorySnapshotReader,
    NetworkInterfaceStatsReader,
    ProcessInfoReader,
    TcpConnectionTableReader,
)


class SnapshotCollector:
    """
    Builds every reader from one configuration and exposes one call per source.

    Each call performs a fresh, independent read; nothing is cached and no
    state is carried between calls.
    """

    def __init__(self, config: ReaderConfig | None = None) -> None:
        """
        Initialize the SnapshotCollector.

        Args:
            config: Reader configuration. Defaults to ``ReaderConfig()``.
        """
        self._config = config if config is not None else ReaderConfig()
        root = self._config.proc_root
        self.cpu_reader = CpuSnapshotReader(root)
        self.memory_reader = MemorySnapshotReader(root, self._config.memory_line_limit)
        self.process_reader = ProcessInfoReader(root)
        self.network_reader = NetworkInterfaceStatsReader(root)
        self.tcp_reader = TcpConnectionTableReader(root)
        self.tcp6_reader = TcpConnectionTableReader(root, ipv6=True)

    @property
    def config(self) -> ReaderConfig:
        """Get the reader configuration."""
        return self._config

    def cpu(self) -> ReadResult:
        return self.cpu_reader.read()

    def memory(self) -> ReadResult:
        return self.memory_reader.read()

    def process(self, pid: int | None = None) -> ReadResult:
        """Read a process's status record; defaults to the calling process."""
        return self.process_reader.read(os.getpid() if pid is None else pid)

    def network(self) -> ReadResult:
        return self.network_reader.read()

    def tcp(self, ipv6: bool = False) -> ReadResult:
        return (self.tcp6_reader if ipv6 else self.tcp_reader).read()
