"""procsnap - Textual snapshot viewer."""

import os
from enum import Enum

from rich.markup import escape
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.css.query import NoMatches
from textual.widgets import DataTable, Footer, Static

from procsnap.collector import SnapshotCollector
from procsnap.errors import SnapshotError
from procsnap.formatting import (
    ConnectionSummary,
    format_address,
    format_bytes,
    summarize_connections,
)
from procsnap.models import (
    CpuSnapshot,
    InterfaceCounters,
    MemorySnapshot,
    NetworkInterfaceStats,
    ProcessStatus,
    ReadResult,
    TcpConnection,
    TcpConnectionTable,
)

# CPU modes drawn as bars in the header, as shares of all time since boot.
CPU_BAR_MODES = ("user", "system", "iowait", "idle")


class SortKey(Enum):
    """Sort keys for the connection table."""

    STATUS = "status"
    LOCAL = "local"
    REMOTE = "remote"
    UID = "uid"


def render_bar(share: float, colour: str) -> str:
    """Render a 20-cell bar for a share between 0.0 and 1.0."""
    bar_len = min(max(int(share * 20), 0), 20)
    return f"[{colour}]█[/{colour}]" * bar_len + "[dim]░[/dim]" * (20 - bar_len)


class HeaderStats(Static):
    """Header widget showing CPU counters and the leading memory lines."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 6;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._cpu: CpuSnapshot | None = None
        self._memory: MemorySnapshot | None = None
        self._cpu_error: str = ""
        self._memory_error: str = ""

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static(self._get_cpu_info(), id="cpu-info"),
            Static(self._get_mem_info(), id="mem-info"),
        )

    def update_stats(self, cpu: ReadResult, memory: ReadResult) -> None:
        """Update the statistics from one CPU and one memory read."""
        self._cpu, self._cpu_error = None, ""
        if cpu.ok:
            try:
                self._cpu = CpuSnapshot.parse(cpu.unwrap())
            except SnapshotError as exc:
                self._cpu_error = exc.message
        else:
            self._cpu_error = cpu.text

        self._memory, self._memory_error = None, ""
        if memory.ok:
            self._memory = MemorySnapshot.parse(memory.unwrap())
        else:
            self._memory_error = memory.text

        self._refresh_display()

    def _refresh_display(self) -> None:
        """Refresh the display with current data."""
        try:
            cpu_info = self.query_one("#cpu-info", Static)
            mem_info = self.query_one("#mem-info", Static)
        except NoMatches:
            return  # Widget not mounted yet
        cpu_info.update(self._get_cpu_info())
        mem_info.update(self._get_mem_info())

    def _get_cpu_info(self) -> str:
        if self._cpu_error:
            return f"[red]{escape(self._cpu_error)}[/red]"
        if self._cpu is None:
            return "Loading CPU info..."

        counters = self._cpu.as_dict()
        total = sum(counters.values()) or 1
        lines = [f"{escape(self._cpu.label)}: {total} jiffies since boot"]
        for mode in CPU_BAR_MODES:
            if mode not in counters:
                continue
            share = counters[mode] / total
            colour = "dim" if mode == "idle" else "green"
            lines.append(f"{mode:<7} \\[{render_bar(share, colour)}] {share * 100:5.1f}%")
        return "\n".join(lines)

    def _get_mem_info(self) -> str:
        if self._memory_error:
            return f"[red]{escape(self._memory_error)}[/red]"
        if self._memory is None:
            return "Loading memory info..."

        lines = []
        total = self._memory.kib("MemTotal")
        available = self._memory.kib("MemAvailable")
        if available is None:
            available = self._memory.kib("MemFree")
        if total and available is not None:
            used_share = (total - available) / total
            lines.append(
                f"Mem\\[{render_bar(used_share, 'cyan')}] "
                f"{format_bytes((total - available) * 1024).strip()}/"
                f"{format_bytes(total * 1024).strip()}"
            )
        for key, value in self._memory.entries:
            lines.append(f"{escape(key)}: {escape(value)}")
        return "\n".join(lines)


class ProcessPanel(VerticalScroll):
    """Scrollable status record of one process."""

    DEFAULT_CSS = """
    ProcessPanel {
        width: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessPanel."""
        super().__init__(*args, **kwargs)
        self._status: ProcessStatus | None = None
        self._error: str = ""

    def compose(self) -> ComposeResult:
        yield Static("Loading process info...", id="process-info")

    def update_status(self, pid: int, result: ReadResult) -> None:
        """Show the status record read for ``pid``."""
        if result.ok:
            self._status, self._error = ProcessStatus.parse(result.unwrap()), ""
            body = "\n".join(
                f"[b]{escape(key)}[/b]: {escape(value)}" for key, value in self._status.entries
            )
        else:
            self._status, self._error = None, result.text
            body = f"[red]{escape(self._error)}[/red]"

        self.border_title = f"PID {pid}"
        self.query_one("#process-info", Static).update(body)


class InterfaceTable(Container):
    """Container for the network interface table."""

    DEFAULT_CSS = """
    InterfaceTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize InterfaceTable."""
        super().__init__(*args, **kwargs)
        self._current_names: set[str] = set()
        self._error: str = ""

    def compose(self) -> ComposeResult:
        yield DataTable(id="interface-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#interface-table", DataTable)
        table.cursor_type = "row"

        self.border_title = "Interfaces"
        table.add_column("Interface", key="name", width=12)
        table.add_column("RX", key="rx_bytes", width=8)
        table.add_column("RX pkts", key="rx_packets", width=10)
        table.add_column("RX err/drop", key="rx_faults", width=12)
        table.add_column("TX", key="tx_bytes", width=8)
        table.add_column("TX pkts", key="tx_packets", width=10)
        table.add_column("TX err/drop", key="tx_faults", width=12)

    def update_interfaces(self, stats: NetworkInterfaceStats) -> None:
        """
        Update the interface table with a new snapshot.

        Uses update_cell for interfaces already shown and only adds or
        removes rows for interfaces that appeared or vanished.
        """
        table = self.query_one("#interface-table", DataTable)
        self._error = ""
        self.border_title = "Interfaces"
        new_names = set(stats.interfaces)

        for name in self._current_names - new_names:
            table.remove_row(name)

        for name, counters in stats.interfaces.items():
            cells = self._cells(name, counters)
            if name in self._current_names:
                for column, value in cells.items():
                    table.update_cell(name, column, value)
            else:
                table.add_row(*cells.values(), key=name)

        self._current_names = new_names

    def show_error(self, message: str) -> None:
        table = self.query_one("#interface-table", DataTable)
        table.clear()
        self._current_names = set()
        self._error = message
        self.border_title = escape(message)

    @staticmethod
    def _cells(name: str, counters: InterfaceCounters) -> dict[str, str | Text]:
        return {
            "name": Text(name),
            "rx_bytes": format_bytes(counters.rx_bytes),
            "rx_packets": str(counters.rx_packets),
            "rx_faults": f"{counters.rx_errors}/{counters.rx_dropped}",
            "tx_bytes": format_bytes(counters.tx_bytes),
            "tx_packets": str(counters.tx_packets),
            "tx_faults": f"{counters.tx_errors}/{counters.tx_dropped}",
        }


class ConnectionTable(Container):
    """Container for the TCP connection table and its state summary."""

    DEFAULT_CSS = """
    ConnectionTable {
        height: 2fr;
        border: solid $primary;
    }

    #connection-summary {
        height: 1;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ConnectionTable."""
        super().__init__(*args, **kwargs)
        self._connections: list[TcpConnection] = []
        self._summary: ConnectionSummary | None = None
        self._error: str = ""
        self._sort_key: SortKey = SortKey.STATUS

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    @property
    def summary(self) -> ConnectionSummary | None:
        return self._summary

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key, re-sort the rows and return the key."""
        keys = list(SortKey)
        current_index = keys.index(self._sort_key)
        self._sort_key = keys[(current_index + 1) % len(keys)]
        self._fill_table()
        return self._sort_key

    def compose(self) -> ComposeResult:
        yield Static("", id="connection-summary")
        yield DataTable(id="connection-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        self.border_title = "TCP connections"
        table = self.query_one("#connection-table", DataTable)
        table.cursor_type = "row"

        table.add_column("State", key="status", width=12)
        table.add_column("Local", key="local", width=24)
        table.add_column("Remote", key="remote", width=24)
        table.add_column("UID", key="uid", width=7)
        table.add_column("Inode", key="inode")

    def update_connections(self, table: TcpConnectionTable) -> None:
        """Replace the shown connections with a new snapshot."""
        self._connections = list(table.connections)
        self._summary = summarize_connections(self._connections)
        self._error = ""
        summary = self._summary
        self.query_one("#connection-summary", Static).update(
            f"Established {summary.established}  Listening {summary.listening}  "
            f"Waiting {summary.waiting}  Total {summary.total}"
        )
        self._fill_table()

    def show_error(self, message: str) -> None:
        self._connections = []
        self._summary = None
        self._error = message
        self.query_one("#connection-summary", Static).update(f"[red]{escape(message)}[/red]")
        self._fill_table()

    def _sorted_connections(self) -> list[TcpConnection]:
        key_func = {
            SortKey.STATUS: lambda c: c.status.value,
            SortKey.LOCAL: lambda c: format_address(c.local_address),
            SortKey.REMOTE: lambda c: format_address(c.remote_address),
            SortKey.UID: lambda c: c.uid,
        }
        return sorted(self._connections, key=key_func[self._sort_key])

    def _fill_table(self) -> None:
        # Rows have no stable key (TIME_WAIT sockets share inode 0), so redraw.
        table = self.query_one("#connection-table", DataTable)
        table.clear()
        for connection in self._sorted_connections():
            table.add_row(
                connection.status.label,
                Text(format_address(connection.local_address)),
                Text(format_address(connection.remote_address)),
                str(connection.uid),
                Text(connection.inode),
            )


class ProcsnapApp(App):
    """Main procsnap viewer; every refresh is one fresh read of each source."""

    TITLE = "procsnap"
    SUB_TITLE = "/proc snapshot viewer"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
        height: auto;
        min-height: 6;
    }

    Horizontal {
        height: auto;
    }

    #body {
        height: 1fr;
    }

    #cpu-info {
        width: 1fr;
        padding-right: 2;
    }

    #mem-info {
        width: 1fr;
        padding-left: 2;
    }

    #network {
        width: 2fr;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "snapshot", "Refresh"),
        ("f6", "sort", "Sort"),
    ]

    def __init__(self, collector: SnapshotCollector | None = None, pid: int | None = None) -> None:
        """
        Initialize the ProcsnapApp.

        Args:
            collector: Source of snapshots. Defaults to one reading /proc.
            pid: Process whose status is shown. Defaults to the viewer itself.
        """
        super().__init__()
        self._collector = collector if collector is not None else SnapshotCollector()
        self._pid = pid
        self._refresh_count = 0

    @property
    def refresh_count(self) -> int:
        """Number of snapshots taken so far."""
        return self._refresh_count

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        with Horizontal(id="body"):
            yield ProcessPanel(id="process-panel")
            with Vertical(id="network"):
                yield InterfaceTable(id="interfaces")
                yield ConnectionTable(id="connections")
        yield Footer()

    def on_mount(self) -> None:
        """Take the first snapshot once the widgets exist."""
        self.action_snapshot()

    def action_snapshot(self) -> None:
        """Read every source once and update the widgets."""
        collector = self._collector
        self.query_one("#header-stats", HeaderStats).update_stats(
            collector.cpu(), collector.memory()
        )

        pid = self._pid if self._pid is not None else os.getpid()
        self.query_one(ProcessPanel).update_status(pid, collector.process(pid))

        interfaces = self.query_one(InterfaceTable)
        try:
            interfaces.update_interfaces(collector.network_reader.snapshot())
        except SnapshotError as exc:
            interfaces.show_error(exc.message)

        connections = self.query_one(ConnectionTable)
        try:
            connections.update_connections(collector.tcp_reader.snapshot())
        except SnapshotError as exc:
            connections.show_error(exc.message)

        self._refresh_count += 1

    def action_sort(self) -> None:
        """Handle sort action - cycle through connection sort keys."""
        new_sort_key = self.query_one(ConnectionTable).cycle_sort()
        self.notify(f"Sort: {new_sort_key.value.upper()}")
