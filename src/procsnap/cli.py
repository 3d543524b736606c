"""procsnap - command-line front end."""

import argparse
import sys
from pathlib import Path

from procsnap.collector import SnapshotCollector
from procsnap.config import ReaderConfig
from procsnap.errors import SnapshotError
from procsnap.formatting import format_address
from procsnap.log import setup_logging
from procsnap.models import CpuSnapshot, MemorySnapshot, ProcessStatus, to_compact_json


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="procsnap",
        description="Print one snapshot of a /proc system-information source.",
    )
    parser.add_argument("--proc-root", type=Path, help="read sources below this directory")
    parser.add_argument("--log-level", default="WARNING", help="log level (default: WARNING)")
    parser.add_argument("--log-file", help="also write log records to this file")

    commands = parser.add_subparsers(dest="command", required=True)

    cpu = commands.add_parser("cpu", help="aggregate CPU counters")
    cpu.add_argument("--json", action="store_true", help="print named counters as JSON")

    mem = commands.add_parser("mem", help="leading memory counters")
    mem.add_argument("--lines", type=int, help="number of lines to read (default: 5)")
    mem.add_argument("--json", action="store_true", help="print key/value pairs as JSON")

    proc = commands.add_parser("proc", help="status record of one process")
    proc.add_argument("pid", type=int, nargs="?", help="process id (default: this process)")
    proc.add_argument("--json", action="store_true", help="print key/value pairs as JSON")

    commands.add_parser("net", help="per-interface counters as JSON")

    tcp = commands.add_parser("tcp", help="TCP connection table as JSON")
    tcp.add_argument("--ipv6", action="store_true", help="read the IPv6 table")
    tcp.add_argument("--decode", action="store_true", help="decode addresses to IP:port")

    tui = commands.add_parser("tui", help="interactive snapshot viewer")
    tui.add_argument("--pid", type=int, help="process to show (default: the viewer itself)")

    return parser


def _config_from_args(args: argparse.Namespace) -> ReaderConfig:
    config = ReaderConfig.from_env()
    if args.proc_root is not None:
        config.proc_root = args.proc_root
    if getattr(args, "lines", None) is not None:
        config.memory_line_limit = max(0, args.lines)
    return config


def _emit(text: str) -> None:
    sys.stdout.write(text if text.endswith("\n") else text + "\n")


def _render(args: argparse.Namespace, collector: SnapshotCollector) -> str:
    """Run the requested reader and render its output; raises SnapshotError."""
    if args.command == "cpu":
        line = collector.cpu().unwrap()
        if args.json:
            snapshot = CpuSnapshot.parse(line)
            return to_compact_json({"label": snapshot.label, "counters": snapshot.as_dict()})
        return line

    if args.command == "mem":
        text = collector.memory().unwrap()
        if args.json:
            return to_compact_json(MemorySnapshot.parse(text).as_dict())
        return text

    if args.command == "proc":
        text = collector.process(args.pid).unwrap()
        if args.json:
            return to_compact_json(ProcessStatus.parse(text).as_dict())
        return text

    if args.command == "net":
        return collector.network().unwrap()

    if args.command == "tcp":
        if not args.decode:
            return collector.tcp(ipv6=args.ipv6).unwrap()
        reader = collector.tcp6_reader if args.ipv6 else collector.tcp_reader
        rows = []
        for connection in reader.snapshot().connections:
            row = connection.as_dict()
            row["local_address"] = format_address(connection.local_address)
            row["remote_address"] = format_address(connection.remote_address)
            rows.append(row)
        return to_compact_json({"connections": rows})

    raise ValueError(f"Unknown command {args.command!r}")


def main(argv: list[str] | None = None) -> int:
    """Entry point for the procsnap command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    collector = SnapshotCollector(_config_from_args(args))

    if args.command == "tui":
        from procsnap.app import ProcsnapApp

        ProcsnapApp(collector, pid=args.pid).run()
        return 0

    try:
        output = _render(args, collector)
    except SnapshotError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    _emit(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
