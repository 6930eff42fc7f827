# logpipe/reporting/console.py
"""
Console reporting for log file inspection and sink statistics.
"""
from __future__ import annotations

from typing import Iterable

from rich import box
from rich.console import Console
from rich.table import Table

from logpipe.analysis.inspector import HEADER_FIELDS, LogFileReport
from logpipe.core.severity import Severity
from logpipe.io.rotating_file import SinkStats

console = Console()


def render_summary(rep: LogFileReport) -> None:
    """Render a high-level summary table."""
    t = Table(title="Log File Summary", box=box.SIMPLE_HEAVY)
    t.add_column("Field", style="bold")
    t.add_column("Value")
    t.add_row("Path", rep.path)
    t.add_row("Size (bytes)", str(rep.file_size))
    t.add_row("Header (bytes)", str(rep.header_bytes))
    t.add_row("Records", str(rep.record_lines))
    t.add_row("Record bytes", str(rep.record_bytes))
    for key, prefix in HEADER_FIELDS:
        t.add_row(prefix.rstrip(": "), rep.header.get(key, "[red]missing[/red]"))
    console.print(t)


def render_severity_counts(rep: LogFileReport) -> None:
    """Render per-severity line counts, in severity order."""
    if not rep.severity_counts:
        return
    table = Table(title="Records by Severity", box=box.ROUNDED, title_style="bold magenta")
    table.add_column("Severity", style="cyan")
    table.add_column("Lines", justify="right")
    for sev in Severity:
        if sev.name in rep.severity_counts:
            table.add_row(sev.name, str(rep.severity_counts[sev.name]))
    console.print(table)


def render_problems(rep: LogFileReport) -> None:
    table = Table(title="Checks", box=box.HEAVY_HEAD, show_header=False, title_style="bold green")
    table.add_column("Status", justify="center", width=8)
    table.add_column("Details")
    if rep.ok:
        table.add_row("[green]PASS[/green]", "Header and records are well-formed")
    for problem in rep.problems:
        table.add_row("[bold red]FAIL[/bold red]", problem)
    console.print(table)


def render_report(rep: LogFileReport) -> None:
    """Renders the full inspection report."""
    render_summary(rep)
    render_severity_counts(rep)
    render_problems(rep)


def render_sink_stats(stats: Iterable[SinkStats]) -> None:
    """One row per file sink."""
    table = Table(title="Sink Statistics", box=box.ROUNDED, title_style="bold magenta")
    table.add_column("Current File", style="cyan")
    table.add_column("State")
    table.add_column("Files", justify="right")
    table.add_column("Records", justify="right")
    table.add_column("Bytes", justify="right")
    table.add_column("Flushes", justify="right")
    table.add_column("Flush Errors", justify="right")
    for s in stats:
        errors = f"[red]{s.flush_errors}[/red]" if s.flush_errors else "0"
        table.add_row(
            s.path or "N/A",
            s.state,
            str(s.files_opened),
            str(s.records_written),
            str(s.bytes_written),
            str(s.flushes),
            errors,
        )
    console.print(table)
