# Copyright (c) Syntropy Systems
"""Main CLI entry point for veritune."""

import logging

import typer
from rich.logging import RichHandler

from veritune.cli.init_cmd import init
from veritune.cli.show import show
from veritune.cli.threshold import threshold
from veritune.config import load_config

app = typer.Typer(
    name="veritune",
    help=(
        "Sample, score and tune non-deterministic use cases "
        "against declarative contracts."
    ),
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Show debug logging",
    ),
) -> None:
    """Configure logging for every command."""
    level = "DEBUG" if verbose else load_config().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


# Register commands
_ = app.command()(init)
_ = app.command()(threshold)
_ = app.command()(show)


if __name__ == "__main__":
    app()
