# Copyright (c) Syntropy Systems
"""Scorers turn an iteration aggregate into a single comparable number."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from typing_extensions import override

if TYPE_CHECKING:
    from collections.abc import Callable

    from veritune.models.iteration import IterationAggregate

DEFAULT_TOKEN_NORMALIZER = 1000.0


class Scorer(ABC):
    """Strategy for scoring an iteration.

    ``score`` may raise ``ScoringError``, which ends the run.
    """

    @abstractmethod
    def score(self, aggregate: IterationAggregate) -> float: ...

    @property
    def description(self) -> str:
        return type(self).__name__

    @override
    def __str__(self) -> str:
        return self.description


class SuccessRateScorer(Scorer):
    """Score is the fraction of samples that satisfied the contract."""

    @override
    def score(self, aggregate: IterationAggregate) -> float:
        return aggregate.statistics.success_rate

    @property
    @override
    def description(self) -> str:
        return "Success rate"


class CostEfficiencyScorer(Scorer):
    """Success per token: ``success_rate * normalizer / total_tokens``.

    Scores 0.0 when no tokens were recorded.
    """

    def __init__(self, normalizer: float = DEFAULT_TOKEN_NORMALIZER) -> None:
        if normalizer <= 0:
            msg = "normalizer must be positive"
            raise ValueError(msg)
        self.normalizer = normalizer

    @override
    def score(self, aggregate: IterationAggregate) -> float:
        stats = aggregate.statistics
        if stats.total_tokens == 0:
            return 0.0
        return stats.success_rate * self.normalizer / stats.total_tokens

    @property
    @override
    def description(self) -> str:
        return f"Cost efficiency (success rate per {self.normalizer:g} tokens)"


class MeanLatencyScorer(Scorer):
    """Mean sample latency in milliseconds; pair with ``Objective.MINIMIZE``."""

    @override
    def score(self, aggregate: IterationAggregate) -> float:
        return aggregate.statistics.mean_latency_ms

    @property
    @override
    def description(self) -> str:
        return "Mean latency (ms)"


class FunctionScorer(Scorer):
    """Adapts a plain callable to the ``Scorer`` interface."""

    def __init__(
        self, function: Callable[[IterationAggregate], float], description: str = "Custom scorer"
    ) -> None:
        if function is None:
            msg = "function must not be None"
            raise ValueError(msg)
        self._function = function
        self._description = description

    @override
    def score(self, aggregate: IterationAggregate) -> float:
        return float(self._function(aggregate))

    @property
    @override
    def description(self) -> str:
        return self._description


@dataclass(frozen=True)
class WeightedComponent:
    """A scorer paired with its non-negative weight."""

    scorer: Scorer
    weight: float

    def __post_init__(self) -> None:
        if self.scorer is None:
            msg = "scorer must not be None"
            raise ValueError(msg)
        if self.weight < 0:
            msg = f"weight must be non-negative, got {self.weight}"
            raise ValueError(msg)


class WeightedScorer(Scorer):
    """Weighted mean of several scorers.

    Example:
        scorer = WeightedScorer(
            WeightedComponent(SuccessRateScorer(), 0.7),
            WeightedComponent(CostEfficiencyScorer(), 0.3),
        )

    """

    def __init__(self, *components: WeightedComponent | tuple[Scorer, float]) -> None:
        if not components:
            msg = "at least one weighted component is required"
            raise ValueError(msg)
        self.components: tuple[WeightedComponent, ...] = tuple(
            c if isinstance(c, WeightedComponent) else WeightedComponent(*c)
            for c in components
        )
        self.total_weight = sum(c.weight for c in self.components)

    @override
    def score(self, aggregate: IterationAggregate) -> float:
        if self.total_weight == 0:
            return 0.0
        weighted = sum(c.scorer.score(aggregate) * c.weight for c in self.components)
        return weighted / self.total_weight

    @property
    @override
    def description(self) -> str:
        parts = []
        for c in self.components:
            share = c.weight / self.total_weight * 100 if self.total_weight else 0.0
            parts.append(f"{share:.0f}% {c.scorer.description}")
        return " + ".join(parts)
