# Copyright (c) Syntropy Systems
"""Pytest fixtures for veritune tests."""

import os
import tempfile
from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from veritune.contract import SampleOutcome, ServiceContract
from veritune.models import (
    AggregateStatistics,
    FactorSuit,
    IterationAggregate,
    IterationRecord,
    Objective,
    OptimizationHistory,
)

# Store original cwd at module load time
_original_cwd = Path.cwd()

START = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def veritune_project(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a temporary veritune project directory."""
    config_dir = temp_dir / ".veritune"
    config_dir.mkdir()

    # Change to temp directory
    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)


@pytest.fixture
def ok_contract() -> ServiceContract[str, str]:
    """Contract that passes when the result is exactly 'ok'."""
    return ServiceContract.define().ensure("Result is ok", lambda r: r == "ok").build()


@pytest.fixture
def make_outcomes(
    ok_contract: ServiceContract[str, str],
) -> Callable[..., list[SampleOutcome[str]]]:
    """Build a batch with ``successes`` passing samples out of ``total``."""

    def _make(
        successes: int,
        total: int,
        tokens: int = 100,
        latency_ms: float = 10.0,
    ) -> list[SampleOutcome[str]]:
        return [
            SampleOutcome(
                result="ok" if i < successes else "bad",
                execution_time=timedelta(milliseconds=latency_ms),
                contract=ok_contract,
                tokens=tokens,
                metadata={"input": f"input-{i}"},
            )
            for i in range(total)
        ]

    return _make


@pytest.fixture
def make_aggregate() -> Callable[..., IterationAggregate]:
    """Build an IterationAggregate for a treatment factor named 'temperature'."""

    def _make(
        iteration: int = 0,
        value: object = 0.5,
        successes: int = 8,
        samples: int = 10,
        tokens: int = 1000,
        latency_ms: float = 50.0,
    ) -> IterationAggregate:
        started = START + timedelta(seconds=iteration)
        return IterationAggregate(
            iteration_number=iteration,
            factor_suit=FactorSuit.of(model="gpt", temperature=value),
            treatment_factor_name="temperature",
            statistics=AggregateStatistics.from_counts(samples, successes, tokens, latency_ms),
            start_time=started,
            end_time=started + timedelta(milliseconds=500),
        )

    return _make


@pytest.fixture
def make_history(
    make_aggregate: Callable[..., IterationAggregate],
) -> Callable[..., OptimizationHistory]:
    """Build a history with one successful record per score.

    The treatment value of iteration ``i`` is ``float(i)`` unless ``values``
    is given.
    """

    def _make(
        scores: list[float],
        objective: Objective = Objective.MAXIMIZE,
        values: list[object] | None = None,
        tokens: int = 1000,
        start_time: datetime = START,
    ) -> OptimizationHistory:
        history = OptimizationHistory(
            use_case_id="summarize",
            treatment_factor_name="temperature",
            treatment_factor_type="float",
            fixed_factors=FactorSuit.of(model="gpt"),
            objective=objective,
            start_time=start_time,
        )
        for i, score in enumerate(scores):
            value = values[i] if values is not None else float(i)
            aggregate = make_aggregate(iteration=i, value=value, tokens=tokens)
            history = history.append(IterationRecord.success(aggregate, score))
        return history

    return _make
