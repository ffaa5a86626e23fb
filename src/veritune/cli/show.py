# Copyright (c) Syntropy Systems
"""veritune show command."""

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from veritune.report import load_history, render_history

console = Console()


def show(
    path: Path = typer.Argument(
        ...,
        help="History JSON file written by save_history",
    ),
) -> None:
    """Show a saved optimization history."""
    if not path.exists():
        console.print(f"[red]Error:[/red] File '{path}' not found")
        raise typer.Exit(1)

    try:
        history = load_history(path)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] Invalid history file: {e.error_count()} errors")
        raise typer.Exit(1) from e

    render_history(history, console)
