# Copyright (c) Syntropy Systems
"""Optimization history: the append-only ledger of one optimization run."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from pydantic import Field

from .base import FrozenModel
from .factors import FactorSuit
from .iteration import IterationRecord


class Objective(str, Enum):
    """Direction of optimization."""

    MAXIMIZE = "maximize"
    MINIMIZE = "minimize"

    def is_better(self, candidate: float, incumbent: float) -> bool:
        """Return True when ``candidate`` is strictly better than ``incumbent``."""
        if self is Objective.MAXIMIZE:
            return candidate > incumbent
        return candidate < incumbent


class TerminationCause(str, Enum):
    """Why an optimization run stopped."""

    MAX_ITERATIONS = "max_iterations"
    NO_IMPROVEMENT = "no_improvement"
    SCORE_THRESHOLD_REACHED = "score_threshold_reached"
    TIME_BUDGET_EXHAUSTED = "time_budget_exhausted"
    TOKEN_BUDGET_EXHAUSTED = "token_budget_exhausted"
    EXECUTION_FAILURE = "execution_failure"
    SCORING_FAILURE = "scoring_failure"
    MUTATION_FAILURE = "mutation_failure"

    @property
    def is_failure(self) -> bool:
        return self in _FAILURE_CAUSES


_FAILURE_CAUSES = frozenset(
    {
        TerminationCause.EXECUTION_FAILURE,
        TerminationCause.SCORING_FAILURE,
        TerminationCause.MUTATION_FAILURE,
    }
)


class TerminationReason(FrozenModel):
    """Cause of termination plus a human-readable message."""

    cause: TerminationCause
    message: str = Field(min_length=1)

    @classmethod
    def max_iterations(cls, max_iterations: int) -> TerminationReason:
        return cls(
            cause=TerminationCause.MAX_ITERATIONS,
            message=f"Reached maximum iterations: {max_iterations}",
        )

    @classmethod
    def no_improvement(cls, window: int) -> TerminationReason:
        return cls(
            cause=TerminationCause.NO_IMPROVEMENT,
            message=f"No improvement in last {window} iterations",
        )

    @classmethod
    def score_threshold_reached(cls, threshold: float, achieved: float) -> TerminationReason:
        return cls(
            cause=TerminationCause.SCORE_THRESHOLD_REACHED,
            message=f"Score threshold {threshold:.4f} reached with score {achieved:.4f}",
        )

    @classmethod
    def time_budget_exhausted(cls, budget: timedelta) -> TerminationReason:
        millis = int(budget / timedelta(milliseconds=1))
        return cls(
            cause=TerminationCause.TIME_BUDGET_EXHAUSTED,
            message=f"Time budget exhausted: {millis}ms",
        )

    @classmethod
    def token_budget_exhausted(cls, budget: int, used: int) -> TerminationReason:
        return cls(
            cause=TerminationCause.TOKEN_BUDGET_EXHAUSTED,
            message=f"Token budget exhausted: {used} of {budget} tokens used",
        )

    @classmethod
    def execution_failure(cls, error: str) -> TerminationReason:
        return cls(cause=TerminationCause.EXECUTION_FAILURE, message=f"Execution failed: {error}")

    @classmethod
    def scoring_failure(cls, error: str) -> TerminationReason:
        return cls(cause=TerminationCause.SCORING_FAILURE, message=f"Scoring failed: {error}")

    @classmethod
    def mutation_failure(cls, error: str) -> TerminationReason:
        return cls(cause=TerminationCause.MUTATION_FAILURE, message=f"Mutation failed: {error}")


class OptimizationHistory(FrozenModel):
    """Everything recorded about one optimization run.

    Instances are snapshots: ``append`` and ``finalize`` return new
    histories. Scorers, mutators and termination policies only ever see a
    snapshot, so they cannot alter what the orchestrator has recorded.
    The best iteration is always derived from ``iterations``, never stored.
    """

    use_case_id: str
    experiment_id: str = ""
    treatment_factor_name: str
    treatment_factor_type: str = "object"
    fixed_factors: FactorSuit = Field(default_factory=FactorSuit)
    objective: Objective = Objective.MAXIMIZE
    scorer_description: str = ""
    mutator_description: str = ""
    termination_policy_description: str = ""
    start_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    end_time: datetime | None = None
    iterations: tuple[IterationRecord, ...] = ()
    termination_reason: TerminationReason | None = None

    def append(self, record: IterationRecord) -> OptimizationHistory:
        """Return a new snapshot with ``record`` added at the end."""
        return self.model_copy(update={"iterations": (*self.iterations, record)})

    def finalize(
        self, end_time: datetime, termination_reason: TerminationReason
    ) -> OptimizationHistory:
        """Return a completed snapshot."""
        return self.model_copy(
            update={"end_time": end_time, "termination_reason": termination_reason}
        )

    @property
    def iteration_count(self) -> int:
        return len(self.iterations)

    @property
    def is_complete(self) -> bool:
        return self.termination_reason is not None

    def elapsed(self, now: datetime | None = None) -> timedelta:
        """Time since start: up to ``end_time`` when finished, else up to ``now``."""
        end = self.end_time
        if end is None:
            end = now or datetime.now(timezone.utc)
        return end - self.start_time

    @property
    def total_duration(self) -> timedelta:
        if self.end_time is None:
            return timedelta(0)
        return self.end_time - self.start_time

    @property
    def last_iteration(self) -> IterationRecord | None:
        return self.iterations[-1] if self.iterations else None

    def last_n_iterations(self, n: int) -> tuple[IterationRecord, ...]:
        if n <= 0:
            return ()
        return self.iterations[-n:]

    @property
    def successful_iterations(self) -> tuple[IterationRecord, ...]:
        return tuple(r for r in self.iterations if r.is_successful)

    @property
    def best_iteration(self) -> IterationRecord | None:
        """Best successful iteration under the objective; the earliest wins ties."""
        best: IterationRecord | None = None
        for record in self.iterations:
            if not record.is_successful:
                continue
            if best is None or self.objective.is_better(record.score, best.score):
                best = record
        return best

    @property
    def best_score(self) -> float | None:
        best = self.best_iteration
        return best.score if best is not None else None

    @property
    def best_factor_value(self) -> Any:
        best = self.best_iteration
        return best.treatment_factor_value if best is not None else None

    @property
    def initial_score(self) -> float | None:
        successful = self.successful_iterations
        return successful[0].score if successful else None

    @property
    def score_improvement(self) -> float:
        initial = self.initial_score
        best = self.best_score
        if initial is None or best is None:
            return 0.0
        return best - initial

    @property
    def score_improvement_percent(self) -> float:
        initial = self.initial_score
        if not initial:
            return 0.0
        return self.score_improvement / abs(initial) * 100.0

    @property
    def total_tokens(self) -> int:
        return sum(r.aggregate.statistics.total_tokens for r in self.iterations)
