# logpipe/cli.py
"""
cli.py

Rich console CLI:
- Default: show a banner with the version.
- demo:    configure a file pipeline, emit sample records at every severity,
           shut down and print sink statistics.
- inspect: describe a rotated log file (header, record counts, problems).
- version: show the package version.
"""
from __future__ import annotations

import argparse
import os
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel

from logpipe import __version__
from logpipe.analysis.inspector import inspect_log_file
from logpipe.config import build_backends, load_config
from logpipe.core.record import Sensitive
from logpipe.dispatcher import Dispatcher
from logpipe.errors import ConfigurationError, FatalStorageError
from logpipe.io.rotating_file import RotatingFileSink
from logpipe.logger import Logger
from logpipe.logging import configure_logging
from logpipe.reporting import console as console_reporter
from logpipe.reporting.json_reporter import write_json

console = Console()


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="logpipe",
        description="logpipe — leveled logging pipeline with buffered rotating file output.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    sub = p.add_subparsers(dest="cmd", title="Available Commands", metavar="<command>")

    # Subcommand "demo"
    sp_demo = sub.add_parser("demo", help="Write sample records through a file pipeline")
    sp_demo.add_argument("--log-dir", type=str, default=None, help="Directory for rotated log files")
    sp_demo.add_argument("--max-size", type=int, default=None, help="Rotate files at this many bytes")
    sp_demo.add_argument("--flush-interval", type=float, default=None, help="Seconds between background flushes")
    sp_demo.add_argument("--format", dest="template", type=str, default=None, help="Record format template")
    sp_demo.add_argument("--level", type=str, default=None, help="Minimum severity (DEBUG..CRITICAL)")
    sp_demo.add_argument("--count", type=int, default=10, help="Rounds of one record per severity")
    sp_demo.add_argument("--stderr", action="store_true", default=None, help="Mirror records to stderr")
    sp_demo.add_argument(
        "--no-redact", dest="redact", action="store_false", default=None, help="Render sensitive values verbatim"
    )
    sp_demo.add_argument("--debug", action="store_true", help="Enable logpipe's own debug logging")

    # Subcommand "inspect"
    sp_inspect = sub.add_parser("inspect", help="Describe a rotated log file")
    sp_inspect.add_argument("path", help="Path to a log file")
    sp_inspect.add_argument("--json-out", type=str, default=None, help="Write JSON report to this path")
    sp_inspect.add_argument("--debug", action="store_true", help="Enable debug logging")

    # Subcommand "version"
    sub.add_parser("version", help="Show the version of logpipe")

    return p


def _run_demo(args: argparse.Namespace) -> int:
    config = load_config(
        log_dirs=args.log_dir,
        max_size=args.max_size,
        flush_interval=args.flush_interval,
        template=args.template,
        level=args.level,
        redact=args.redact,
        stderr=args.stderr,
        program="logpipe-demo",
    )
    dispatcher = Dispatcher()
    backends = build_backends(config)
    dispatcher.set_backends(*backends)
    sinks = _file_sinks(backends)

    log = Logger("demo", dispatcher=dispatcher)
    try:
        for _ in range(args.count):
            log.debug("debug {}", Sensitive("secret"))
            log.info("info")
            log.notice("notice")
            log.warning("warning")
            log.error("err")
            log.critical("crit")
    finally:
        dispatcher.shutdown()

    console_reporter.render_sink_stats(s.stats() for s in sinks)
    for sink in sinks:
        console.print(f"[dim]Logs written to {os.path.dirname(sink.path)}[/dim]")
    return 0


def _file_sinks(backends) -> List[RotatingFileSink]:
    sinks = []
    for backend in backends:
        # LeveledBackend -> FormattingBackend -> sink
        sink = getattr(getattr(backend, "backend", None), "sink", None)
        if isinstance(sink, RotatingFileSink):
            sinks.append(sink)
    return sinks


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    # No subcommand → banner
    if not args.cmd:
        console.print(Panel(f"[bold]logpipe[/bold] {__version__}", style="bold cyan"))
        return 0

    # Subcommand "version"
    if args.cmd == "version":
        console.print(f"logpipe version {__version__}")
        return 0

    # Subcommand "demo"
    if args.cmd == "demo":
        if args.debug:
            configure_logging(debug=True)
        try:
            return _run_demo(args)
        except ConfigurationError as e:
            console.print(f"[red]Configuration error:[/red] {e}")
            return 2
        except FatalStorageError as e:
            # The pipeline cannot persist logs; stop here.
            console.print(f"[red]Fatal storage error:[/red] {e}")
            return 2

    # Subcommand "inspect"
    if args.cmd == "inspect":
        if args.debug:
            configure_logging(debug=True)
        path = args.path
        if not os.path.exists(path):
            console.print(f"[red]File not found:[/red] {path}")
            return 2

        rep = inspect_log_file(path)
        console.print(
            Panel(
                f"[bold]Result:[/bold] {'[green]OK[/green]' if rep.ok else '[red]PROBLEMS[/red]'}",
                style="bold cyan",
            )
        )
        console_reporter.render_report(rep)

        if args.json_out:
            write_json(rep, args.json_out)
            console.print(f"[dim]Wrote JSON report → {args.json_out}[/dim]")

        return 0

    parser.print_help()
    return 1
