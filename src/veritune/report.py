# Copyright (c) Syntropy Systems
"""Console reporting and JSON snapshots for optimization histories."""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from veritune.models.history import OptimizationHistory
from veritune.models.iteration import IterationStatus

if TYPE_CHECKING:
    from veritune.models.iteration import IterationRecord

STATUS_STYLES = {
    IterationStatus.SUCCESS: "green",
    IterationStatus.EXECUTION_FAILED: "red",
    IterationStatus.SCORING_FAILED: "red",
}


def format_seconds(seconds: float) -> str:
    """Format a duration in seconds to human readable."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    total = int(seconds)
    if total < 60:
        return f"{seconds:.1f}s"
    m, s = divmod(total, 60)
    return f"{m}m {s}s"


def _format_value(value: object, limit: int = 40) -> str:
    text = value if isinstance(value, str) else repr(value)
    if len(text) > limit:
        text = text[: limit - 3] + "..."
    return escape(text)


class ConsoleProgressReporter:
    """Progress observer that prints one line per finished iteration."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def __call__(self, record: IterationRecord) -> None:
        stats = record.aggregate.statistics
        style = STATUS_STYLES[record.status]
        if record.is_successful:
            detail = (
                f"score={record.score:.4f} "
                f"success={stats.success_count}/{stats.sample_count} "
                f"tokens={stats.total_tokens}"
            )
        else:
            detail = escape(record.failure_reason or "")
        self.console.print(
            f"[dim]#{record.iteration_number}[/dim] "
            f"{_format_value(record.treatment_factor_value)} "
            f"[{style}]{record.status.value}[/{style}] {detail}"
        )


def render_history(history: OptimizationHistory, console: Console | None = None) -> None:
    """Print an iteration table followed by the best result and stop reason."""
    console = console or Console()

    console.print(
        f"\n[bold]{history.use_case_id}[/bold] "
        f"[dim]optimizing[/dim] {history.treatment_factor_name} "
        f"[dim]({history.objective.value})[/dim]"
    )
    if history.experiment_id:
        console.print(f"  [dim]experiment:[/dim] {history.experiment_id}")
    if history.fixed_factors.values:
        console.print(f"  [dim]fixed:[/dim] {escape(str(history.fixed_factors))}")
    if history.scorer_description:
        console.print(f"  [dim]scorer:[/dim] {history.scorer_description}")
    if history.mutator_description:
        console.print(f"  [dim]mutator:[/dim] {history.mutator_description}")
    if history.termination_policy_description:
        console.print(f"  [dim]termination:[/dim] {history.termination_policy_description}")

    if not history.iterations:
        console.print("[dim]No iterations recorded[/dim]")
    else:
        best = history.best_iteration
        table = Table(show_header=True, header_style="bold")
        table.add_column("#", style="dim", justify="right")
        table.add_column(history.treatment_factor_name)
        table.add_column("Status")
        table.add_column("Score", justify="right")
        table.add_column("Success", justify="right")
        table.add_column("Tokens", justify="right")
        table.add_column("Latency", justify="right")

        for record in history.iterations:
            stats = record.aggregate.statistics
            style = STATUS_STYLES[record.status]
            marker = " *" if best is not None and record is best else ""
            table.add_row(
                str(record.iteration_number),
                _format_value(record.treatment_factor_value) + marker,
                f"[{style}]{record.status.value}[/{style}]",
                f"{record.score:.4f}" if record.is_successful else "-",
                f"{stats.success_count}/{stats.sample_count}",
                str(stats.total_tokens),
                f"{stats.avg_latency_ms}ms",
            )
        console.print(table)

    best = history.best_iteration
    if best is not None:
        console.print(
            f"[bold]Best:[/bold] {_format_value(best.treatment_factor_value)} "
            f"[dim](iteration {best.iteration_number})[/dim] "
            f"score={best.score:.4f}"
        )
        console.print(
            f"  [dim]improvement:[/dim] {history.score_improvement:+.4f} "
            f"({history.score_improvement_percent:+.1f}%)"
        )
    console.print(f"  [dim]total tokens:[/dim] {history.total_tokens}")
    console.print(
        f"  [dim]duration:[/dim] {format_seconds(history.elapsed().total_seconds())}"
    )

    reason = history.termination_reason
    if reason is not None:
        style = "red" if reason.cause.is_failure else "green"
        console.print(f"  [dim]stopped:[/dim] [{style}]{escape(reason.message)}[/{style}]")


def save_history(history: OptimizationHistory, path: Path) -> Path:
    """Write ``history`` as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    _ = path.write_text(history.model_dump_json(indent=2))
    return path


def load_history(path: Path) -> OptimizationHistory:
    """Read a history previously written by ``save_history``."""
    return OptimizationHistory.model_validate_json(path.read_text())
