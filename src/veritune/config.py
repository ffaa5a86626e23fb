# Copyright (c) Syntropy Systems
"""Project configuration for veritune."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, cast

import yaml

from veritune.optimize.policies import (
    CompositeTerminationPolicy,
    MaxIterationsPolicy,
    NoImprovementPolicy,
    TerminationPolicy,
    TimeBudgetPolicy,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from veritune.optimize.config import OptimizationConfigBuilder

CONFIG_DIR_NAME = ".veritune"
CONFIG_FILE_NAME = "config.yaml"


@dataclass
class VerituneConfig:
    """Defaults applied to optimization runs."""

    # Samples executed per iteration
    samples_per_iteration: int = 20

    # Hard cap on iterations per run
    max_iterations: int = 10

    # Stop after this many iterations without a new best (0 disables)
    no_improvement_window: int = 3

    # Wall time budget per run in seconds (None disables)
    time_budget_seconds: float | None = None

    # Log level used by the CLI
    log_level: str = "WARNING"

    def termination_policy(self) -> TerminationPolicy:
        """Build the default policy: max iterations OR no improvement OR time budget."""
        policies: list[TerminationPolicy] = [MaxIterationsPolicy(self.max_iterations)]
        if self.no_improvement_window > 0:
            policies.append(NoImprovementPolicy(self.no_improvement_window))
        if self.time_budget_seconds is not None:
            policies.append(TimeBudgetPolicy(timedelta(seconds=self.time_budget_seconds)))
        if len(policies) == 1:
            return policies[0]
        return CompositeTerminationPolicy(*policies)

    def configure(self, builder: OptimizationConfigBuilder) -> OptimizationConfigBuilder:
        """Apply sample count and termination defaults to ``builder``."""
        return builder.samples_per_iteration(self.samples_per_iteration).termination_policy(
            self.termination_policy()
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "samples_per_iteration": self.samples_per_iteration,
            "max_iterations": self.max_iterations,
            "no_improvement_window": self.no_improvement_window,
            "time_budget_seconds": self.time_budget_seconds,
            "log_level": self.log_level,
        }


def _as_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def _as_float(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _as_level(value: object) -> str | None:
    return value.upper() if isinstance(value, str) else None


# config.yaml key -> parser; a parser returns None for values it rejects
_FIELD_PARSERS: dict[str, Callable[[object], object | None]] = {
    "samples_per_iteration": _as_int,
    "max_iterations": _as_int,
    "no_improvement_window": _as_int,
    "time_budget_seconds": _as_float,
    "log_level": _as_level,
}


def find_config_dir(start_path: Path | None = None) -> Path | None:
    """Find the nearest .veritune directory at or above start_path (default: cwd)."""
    start = (start_path or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_DIR_NAME
        if candidate.is_dir():
            return candidate
    return None


def get_global_config_dir() -> Path:
    """Get the global veritune config directory (~/.veritune)."""
    return Path.home() / CONFIG_DIR_NAME


def _config_path(config_dir: Path | None) -> Path | None:
    if config_dir is not None:
        return config_dir / CONFIG_FILE_NAME
    found_dir = find_config_dir()
    if found_dir is not None:
        return found_dir / CONFIG_FILE_NAME
    global_config = get_global_config_dir() / CONFIG_FILE_NAME
    return global_config if global_config.exists() else None


def load_config(config_dir: Path | None = None) -> VerituneConfig:
    """Load configuration from .veritune/config.yaml or defaults.

    Looks for config in:
    1. Provided config_dir
    2. Nearest .veritune directory walking up
    3. ~/.veritune/config.yaml
    4. Defaults

    Unknown keys and values of the wrong type are ignored.
    """
    config = VerituneConfig()
    config_path = _config_path(config_dir)
    if config_path is None or not config_path.exists():
        return config

    with config_path.open() as f:
        data = cast("object", yaml.safe_load(f))
    if not isinstance(data, dict):
        return config

    for key, parse in _FIELD_PARSERS.items():
        value = parse(data.get(key))
        if value is not None:
            setattr(config, key, value)
    return config
