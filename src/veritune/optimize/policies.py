# Copyright (c) Syntropy Systems
"""Termination policies decide when an optimization run stops."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from typing_extensions import override

from veritune.models.history import TerminationReason

if TYPE_CHECKING:
    from veritune.models.history import OptimizationHistory


class TerminationPolicy(ABC):
    """Strategy for ending a run.

    ``should_terminate`` returns a reason to stop, or None to continue.
    Implementations must not raise.
    """

    @abstractmethod
    def should_terminate(self, history: OptimizationHistory) -> TerminationReason | None: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @override
    def __str__(self) -> str:
        return self.description


class MaxIterationsPolicy(TerminationPolicy):
    """Stop once ``max_iterations`` iterations have been recorded."""

    def __init__(self, max_iterations: int) -> None:
        if max_iterations <= 0:
            msg = f"max_iterations must be positive, got {max_iterations}"
            raise ValueError(msg)
        self.max_iterations = max_iterations

    @override
    def should_terminate(self, history: OptimizationHistory) -> TerminationReason | None:
        if history.iteration_count >= self.max_iterations:
            return TerminationReason.max_iterations(self.max_iterations)
        return None

    @property
    @override
    def description(self) -> str:
        return f"Max {self.max_iterations} iterations"


class NoImprovementPolicy(TerminationPolicy):
    """Stop when the best score is ``window`` or more iterations old."""

    def __init__(self, window: int) -> None:
        if window <= 0:
            msg = f"window must be positive, got {window}"
            raise ValueError(msg)
        self.window = window

    @override
    def should_terminate(self, history: OptimizationHistory) -> TerminationReason | None:
        if history.iteration_count <= self.window:
            return None
        best = history.best_iteration
        last = history.last_iteration
        if best is None or last is None:
            return None
        if last.iteration_number - best.iteration_number >= self.window:
            return TerminationReason.no_improvement(self.window)
        return None

    @property
    @override
    def description(self) -> str:
        return f"No improvement in {self.window} iterations"


def _format_budget(budget: timedelta) -> str:
    millis = int(budget / timedelta(milliseconds=1))
    if millis % 60_000 == 0:
        return f"{millis // 60_000}m"
    if millis % 1000 == 0:
        return f"{millis // 1000}s"
    return f"{millis}ms"


class TimeBudgetPolicy(TerminationPolicy):
    """Stop once wall time since the run started exceeds ``budget``.

    Checked between iterations only, so a long iteration can overshoot.
    """

    def __init__(self, budget: timedelta) -> None:
        if budget is None:
            msg = "budget must not be None"
            raise ValueError(msg)
        if budget <= timedelta(0):
            msg = f"budget must be positive, got {budget}"
            raise ValueError(msg)
        self.budget = budget

    @classmethod
    def of_millis(cls, millis: int) -> TimeBudgetPolicy:
        return cls(timedelta(milliseconds=millis))

    @classmethod
    def of_seconds(cls, seconds: float) -> TimeBudgetPolicy:
        return cls(timedelta(seconds=seconds))

    @override
    def should_terminate(self, history: OptimizationHistory) -> TerminationReason | None:
        if history.elapsed(datetime.now(timezone.utc)) > self.budget:
            return TerminationReason.time_budget_exhausted(self.budget)
        return None

    @property
    @override
    def description(self) -> str:
        return f"Time budget {_format_budget(self.budget)}"


class TokenBudgetPolicy(TerminationPolicy):
    """Stop once the run has consumed ``max_tokens`` tokens."""

    def __init__(self, max_tokens: int) -> None:
        if max_tokens <= 0:
            msg = f"max_tokens must be positive, got {max_tokens}"
            raise ValueError(msg)
        self.max_tokens = max_tokens

    @override
    def should_terminate(self, history: OptimizationHistory) -> TerminationReason | None:
        used = history.total_tokens
        if used >= self.max_tokens:
            return TerminationReason.token_budget_exhausted(self.max_tokens, used)
        return None

    @property
    @override
    def description(self) -> str:
        return f"Token budget {self.max_tokens}"


class ScoreThresholdPolicy(TerminationPolicy):
    """Stop once the best score reaches ``threshold`` under the run's objective."""

    def __init__(self, threshold: float) -> None:
        self.threshold = threshold

    @override
    def should_terminate(self, history: OptimizationHistory) -> TerminationReason | None:
        best = history.best_score
        if best is None:
            return None
        reached = best == self.threshold or history.objective.is_better(best, self.threshold)
        if reached:
            return TerminationReason.score_threshold_reached(self.threshold, best)
        return None

    @property
    @override
    def description(self) -> str:
        return f"Score threshold {self.threshold:g}"


class CompositeTerminationPolicy(TerminationPolicy):
    """Stops when any sub-policy does; the first reason in order wins."""

    def __init__(self, *policies: TerminationPolicy) -> None:
        if not policies:
            msg = "at least one policy is required"
            raise ValueError(msg)
        self.policies = policies

    @override
    def should_terminate(self, history: OptimizationHistory) -> TerminationReason | None:
        for policy in self.policies:
            reason = policy.should_terminate(history)
            if reason is not None:
                return reason
        return None

    @property
    @override
    def description(self) -> str:
        return " OR ".join(p.description for p in self.policies)
