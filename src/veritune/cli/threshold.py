# Copyright (c) Syntropy Systems
"""veritune threshold command."""

import typer
from rich.console import Console
from rich.table import Table

from veritune.stats import derived_min_pass_rate, wald_interval

console = Console()


def threshold(
    samples: int = typer.Option(
        ...,
        "--samples", "-n",
        help="Number of samples observed",
    ),
    successes: int = typer.Option(
        ...,
        "--successes", "-k",
        help="Number of samples that passed",
    ),
) -> None:
    """Derive a minimum pass rate from an observed success count.

    Uses the 95% Wald interval; its lower bound is the derived threshold.
    """
    try:
        min_rate = derived_min_pass_rate(successes, samples)
        interval = wald_interval(successes / samples, samples)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    table = Table(show_header=False)
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")
    table.add_row("observed rate", f"{interval.observed:.4f}")
    table.add_row("standard error", f"{interval.standard_error:.4f}")
    table.add_row("95% interval", f"[{interval.lower:.4f}, {interval.upper:.4f}]")
    console.print(table)
    console.print(f"[bold]Minimum pass rate:[/bold] {min_rate:.4f}")
