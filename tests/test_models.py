"""Tests for procsnap data models."""

import json

import pytest

from procsnap.errors import MalformedRecord, SourceUnavailable
from procsnap.models import (
    ConnectionStatus,
    CpuSnapshot,
    InterfaceCounters,
    MemorySnapshot,
    NetworkInterfaceStats,
    ProcessStatus,
    ReadResult,
    TcpConnection,
    TcpConnectionTable,
)

EXPECTED_LABELS = {
    1: "ESTABLISHED",
    2: "SYN_SENT",
    3: "SYN_RECV",
    4: "FIN_WAIT1",
    5: "FIN_WAIT2",
    6: "TIME_WAIT",
    7: "CLOSE",
    8: "CLOSE_WAIT",
    9: "LAST_ACK",
    10: "LISTEN",
    11: "CLOSING",
}


class TestConnectionStatus:
    """Tests for the ConnectionStatus mapping."""

    @pytest.mark.parametrize("code,label", sorted(EXPECTED_LABELS.items()))
    def test_known_codes(self, code, label):
        """Test every kernel state code decodes to its fixed label."""
        assert ConnectionStatus.from_hex(f"{code:02X}").label == label

    @pytest.mark.parametrize("token", ["00", "63", "0C", "FF", "zz", "", "-"])
    def test_other_values_are_unknown(self, token):
        """Test out-of-range and unparseable codes map to UNKNOWN."""
        assert ConnectionStatus.from_hex(token) is ConnectionStatus.UNKNOWN

    def test_lowercase_hex(self):
        """Test lowercase hex digits are accepted."""
        assert ConnectionStatus.from_hex("0a") is ConnectionStatus.LISTEN

    def test_twelve_labels(self):
        """Test the enum has exactly the eleven states plus UNKNOWN."""
        assert len(ConnectionStatus) == 12


class TestCpuSnapshot:
    """Tests for CpuSnapshot parsing."""

    def test_parse_named_counters(self):
        """Test counters are named in source order."""
        snapshot = CpuSnapshot.parse("cpu  4705 150 1120 16250 520 0 35 0 0 0")

        assert snapshot.label == "cpu"
        assert [name for name, _ in snapshot.counters] == [
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
        ]
        assert snapshot.as_dict()["idle"] == 16250

    def test_short_line(self):
        """Test older kernels with fewer columns parse what is present."""
        snapshot = CpuSnapshot.parse("cpu 1 2 3 4")
        assert snapshot.as_dict() == {"user": 1, "nice": 2, "system": 3, "idle": 4}

    def test_extra_columns_keep_position(self):
        """Test columns beyond the known names are kept under positional names."""
        snapshot = CpuSnapshot.parse("cpu 1 2 3 4 5 6 7 8 9 10 11")
        assert snapshot.counters[-1] == ("field11", 11)

    def test_empty_line(self):
        """Test an empty line is a malformed record."""
        with pytest.raises(MalformedRecord):
            CpuSnapshot.parse("")

    def test_non_numeric_counter(self):
        """Test a non-numeric counter is a malformed record."""
        with pytest.raises(MalformedRecord):
            CpuSnapshot.parse("cpu 1 two 3")

    def test_is_frozen(self):
        """Test that CpuSnapshot is immutable (frozen)."""
        snapshot = CpuSnapshot.parse("cpu 1 2 3 4")
        with pytest.raises(AttributeError):
            snapshot.label = "cpu0"


class TestMemorySnapshot:
    """Tests for MemorySnapshot parsing."""

    def test_parse_preserves_order(self):
        """Test entries keep source order and units."""
        snapshot = MemorySnapshot.parse("MemTotal:  16318420 kB\nMemFree:   1290624 kB\n")
        assert snapshot.entries == (("MemTotal", "16318420 kB"), ("MemFree", "1290624 kB"))

    def test_kib(self):
        """Test numeric lookups."""
        snapshot = MemorySnapshot.parse("MemTotal:  16318420 kB\nHugePages_Total: 0\n")
        assert snapshot.kib("MemTotal") == 16318420
        assert snapshot.kib("HugePages_Total") == 0
        assert snapshot.kib("MemFree") is None

    def test_blank_lines_ignored(self):
        """Test blank lines do not produce entries."""
        assert MemorySnapshot.parse("\n\nBuffers: 1 kB\n").entries == (("Buffers", "1 kB"),)


class TestProcessStatus:
    """Tests for ProcessStatus parsing."""

    def test_parse_and_get(self):
        """Test tab-separated status lines become key/value pairs."""
        status = ProcessStatus.parse("Name:\tbash\nState:\tS (sleeping)\nUid:\t0\t0\t0\t0\n")

        assert status.get("Name") == "bash"
        assert status.get("State") == "S (sleeping)"
        assert status.get("Uid") == "0\t0\t0\t0"
        assert status.get("Missing", "n/a") == "n/a"

    def test_line_without_colon(self):
        """Test lines without a separator are kept with an empty value."""
        status = ProcessStatus.parse("odd line\n")
        assert status.entries == (("odd line", ""),)


class TestSerialization:
    """Tests for the JSON shapes."""

    def test_interface_stats_json(self):
        """Test the interface object is keyed by name with eight counters."""
        stats = NetworkInterfaceStats(
            interfaces={"eth0": InterfaceCounters(100, 1, 0, 0, 200, 2, 0, 0)}
        )
        assert stats.to_json() == (
            '{"eth0":{"rx_bytes":100,"rx_packets":1,"rx_errors":0,"rx_dropped":0,'
            '"tx_bytes":200,"tx_packets":2,"tx_errors":0,"tx_dropped":0}}'
        )

    def test_empty_interface_stats_json(self):
        """Test no interfaces serialize to an empty object."""
        assert NetworkInterfaceStats(interfaces={}).to_json() == "{}"

    def test_interface_names_are_escaped(self):
        """Test unusual interface names still produce valid JSON."""
        stats = NetworkInterfaceStats(
            interfaces={'we"ird': InterfaceCounters(0, 0, 0, 0, 0, 0, 0, 0)}
        )
        assert list(json.loads(stats.to_json())) == ['we"ird']

    def test_connection_table_json(self):
        """Test connections are wrapped in a "connections" array."""
        table = TcpConnectionTable(
            connections=(
                TcpConnection(
                    local_address="0100007F:0277",
                    remote_address="00000000:0000",
                    status=ConnectionStatus.LISTEN,
                    uid=0,
                    inode="21345",
                ),
            )
        )
        assert table.to_json() == (
            '{"connections":[{"local_address":"0100007F:0277",'
            '"remote_address":"00000000:0000","status":"LISTEN","uid":0,"inode":"21345"}]}'
        )

    def test_empty_connection_table_json(self):
        """Test an empty table keeps the wrapper."""
        assert TcpConnectionTable(connections=()).to_json() == '{"connections":[]}'

    def test_counters_use_slots(self):
        """Test that InterfaceCounters uses __slots__ for memory efficiency."""
        counters = InterfaceCounters(0, 0, 0, 0, 0, 0, 0, 0)
        assert not hasattr(counters, "__dict__")


class TestReadResult:
    """Tests for the ReadResult boundary value."""

    def test_success(self):
        """Test a successful result exposes its value."""
        result = ReadResult.success("cpu 1 2 3")
        assert result.ok
        assert result.unwrap() == "cpu 1 2 3"
        assert result.text == "cpu 1 2 3"

    def test_empty_success(self):
        """Test an empty value is still a success."""
        result = ReadResult.success("")
        assert result.ok
        assert result.unwrap() == ""

    def test_failure(self):
        """Test a failed result carries its error."""
        error = SourceUnavailable("Failed to read CPU information", "/proc/stat")
        result = ReadResult.failure(error)

        assert not result.ok
        assert result.error is error
        assert result.text == "Error: Failed to read CPU information"
        with pytest.raises(SourceUnavailable):
            result.unwrap()
