from __future__ import annotations

import importlib.util
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import EdfError
from .types import DecodeOptions, EdfHeader

if TYPE_CHECKING:  # pragma: no cover
    from rich.console import Console
    from rich.table import Table


def rich_available() -> bool:
    return importlib.util.find_spec("rich") is not None


def header_table(header: EdfHeader, *, title: str = "EDF header") -> Table:
    from rich.table import Table

    summary = Table(title=title, show_header=False, box=None)
    summary.add_column("Field", style="bold")
    summary.add_column("Value")
    summary.add_row("Patient", header.patient_id or "—")
    summary.add_row("Recording", header.recording_id or "—")
    summary.add_row("Start", f"{header.start_date} {header.start_time}")
    summary.add_row("Records", f"{header.record_count} × {header.record_duration:g}s")
    summary.add_row("Signals", str(header.signal_count))

    signals = Table(header_style="bold blue")
    signals.add_column("#", justify="right")
    signals.add_column("Label")
    signals.add_column("Unit")
    signals.add_column("Samples/record", justify="right")
    signals.add_column("Rate (Hz)", justify="right")
    for index, (label, unit, samples, rate) in enumerate(
        zip(header.labels, header.physical_dimensions, header.samples_per_record, header.sampling_rates())
    ):
        signals.add_row(str(index), label, unit, str(samples), f"{rate:g}")

    outer = Table.grid(padding=(1, 0))
    outer.add_row(summary)
    outer.add_row(signals)
    return outer


def render_header(header: EdfHeader, console: Console | None = None) -> None:
    from rich.console import Console

    console = console or Console()
    console.print(header_table(header))


def run_tui(
    *,
    inputs: list[Path],
    options: DecodeOptions,
    decode_one: Callable[..., tuple[EdfHeader, list[Path]]],  # (source_path, status_cb) -> (header, written paths)
    title: str = "edf-decode",
) -> int:
    from rich.console import Console, Group
    from rich.live import Live
    from rich.panel import Panel
    from rich.progress import (
        BarColumn,
        Progress,
        SpinnerColumn,
        TaskProgressColumn,
        TextColumn,
        TimeElapsedColumn,
    )
    from rich.table import Table
    from rich.text import Text

    console = Console()
    file_progress = Progress(
        SpinnerColumn(style="magenta"),
        TextColumn("[bold]{task.description}[/bold]"),
        BarColumn(bar_width=None),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    overall_task = file_progress.add_task("Overall", total=len(inputs))
    state: dict[str, str | None] = {"file": None, "stage": None, "error": None}

    def status_cb(stage: str) -> None:
        state["stage"] = stage

    subtitle_parts = ["labels" if options.include_labels else "no labels"]
    if options.header_only:
        subtitle_parts.append("header only")
    elif options.data_only:
        subtitle_parts.append("data only")
    if options.strict:
        subtitle_parts.append("strict")
    if options.physical:
        subtitle_parts.append("physical units")
    subtitle = " · ".join(subtitle_parts)

    def render() -> Panel:
        details = Text.assemble(
            ("Input: ", "bold"),
            (state["file"] or "—", "yellow"),
            ("\nStage: ", "bold"),
            (state["stage"] or "—", "cyan"),
        )
        if state["error"]:
            details.append("\n")
            details.append(Text(f"Last error: {state['error']}", style="bold red"))
        return Panel(Group(details, "", file_progress), border_style="blue", title=title, subtitle=subtitle)

    results = Table(title="Decoded files", header_style="bold blue")
    results.add_column("Input")
    results.add_column("Signals", justify="right")
    results.add_column("Records", justify="right")
    results.add_column("Outputs")

    failures = 0
    headers: list[EdfHeader] = []
    with Live(render(), console=console, refresh_per_second=10) as live:
        for source_path in inputs:
            state["file"] = str(source_path)
            state["stage"] = "starting"
            state["error"] = None
            live.update(render())
            try:
                header, written = decode_one(source_path=source_path, status_cb=status_cb)
            except (EdfError, OSError) as exc:
                failures += 1
                state["error"] = str(exc)
                results.add_row(source_path.name, "—", "—", Text(str(exc), style="red"))
            else:
                headers.append(header)
                results.add_row(
                    source_path.name,
                    str(header.signal_count),
                    str(header.record_count),
                    ", ".join(path.name for path in written),
                )
            finally:
                file_progress.advance(overall_task, 1)
                live.update(render())

    console.print(results)
    if len(headers) == 1:
        render_header(headers[0], console)
    if failures:
        console.print(
            Panel(
                f"{failures}/{len(inputs)} files failed. Re-run with `--verbose` for details.",
                border_style="red",
                title="Done (with errors)",
            )
        )
        return 1
    console.print(Panel(f"Decoded {len(inputs)} file(s).", border_style="green", title="Done"))
    return 0
