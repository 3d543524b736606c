"""Shared fixtures: a fake /proc tree under tmp_path."""

from pathlib import Path

import pytest

from procsnap.config import ReaderConfig

STAT = (
    "cpu  4705 150 1120 16250 520 0 35 0 0 0\n"
    "cpu0 2350 75 560 8125 260 0 17 0 0 0\n"
    "intr 1462898\n"
)

MEMINFO = (
    "MemTotal:       16318420 kB\n"
    "MemFree:         1290624 kB\n"
    "MemAvailable:    8912344 kB\n"
    "Buffers:          512000 kB\n"
    "Cached:          6823456 kB\n"
    "SwapCached:            0 kB\n"
    "Active:          7345120 kB\n"
)

PID = 4242

STATUS = (
    "Name:\tpython3\n"
    "Umask:\t0022\n"
    "State:\tS (sleeping)\n"
    "Tgid:\t4242\n"
    "Pid:\t4242\n"
    "PPid:\t1\n"
    "Uid:\t1000\t1000\t1000\t1000\n"
    "VmRSS:\t   20480 kB\n"
    "Threads:\t1\n"
)

NET_DEV = (
    "Inter-|   Receive                                                |  Transmit\n"
    " face |bytes    packets errs drop fifo frame compressed multicast|bytes    packets errs drop fifo colls carrier compressed\n"
    "    lo: 5 5 0 0 0 0 0 0 5 5 0 0 0 0 0 0\n"
    "  eth0: 100 1 0 0 0 0 0 0 200 2 0 0 0 0 0 0\n"
    " wlan0: 987654 1200 3 4 0 0 0 7 123456 800 1 2 0 0 0 0\n"
)

TCP = (
    "  sl  local_address rem_address   st tx_queue rx_queue tr tm->when retrnsmt   uid  timeout inode\n"
    "   0: 0100007F:0277 00000000:0000 0A 00000000:00000000 00:00000000 00000000     0        0 21345 1 0000000000000000 100 0 0 10 0\n"
    "   1: 0F02000A:D2B6 5DB8D822:01BB 01 00000000:00000000 02:000A3B2E 00000000  1000        0 48213 2 0000000000000000 20 4 30 10 -1\n"
    "   2: 0F02000A:C350 5DB8D822:0050 06 00000000:00000000 03:00001717 00000000     0        0 0 3 0000000000000000\n"
)

TCP6 = (
    "  sl  local_address                         remote_address                        st tx_queue rx_queue tr tm->when retrnsmt   uid  timeout inode\n"
    "   0: 00000000000000000000000001000000:0016 00000000000000000000000000000000:0000 0A 00000000:00000000 00:00000000 00000000     0        0 19002 1 0000000000000000 100 0 0 10 0\n"
)


def write_proc_tree(root: Path) -> Path:
    """Populate ``root`` with the files the readers consume."""
    (root / "net").mkdir(parents=True, exist_ok=True)
    (root / str(PID)).mkdir(exist_ok=True)
    (root / "stat").write_text(STAT)
    (root / "meminfo").write_text(MEMINFO)
    (root / str(PID) / "status").write_text(STATUS)
    (root / "net" / "dev").write_text(NET_DEV)
    (root / "net" / "tcp").write_text(TCP)
    (root / "net" / "tcp6").write_text(TCP6)
    return root


@pytest.fixture
def proc_root(tmp_path: Path) -> Path:
    """A populated fake /proc directory."""
    return write_proc_tree(tmp_path / "proc")


@pytest.fixture
def empty_root(tmp_path: Path) -> Path:
    """A directory with none of the sources present."""
    root = tmp_path / "empty"
    root.mkdir()
    return root


@pytest.fixture
def config(proc_root: Path) -> ReaderConfig:
    return ReaderConfig(proc_root=proc_root)
