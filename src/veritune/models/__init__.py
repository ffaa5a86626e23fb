# Copyright (c) Syntropy Systems
"""Pydantic models shared across veritune."""

from veritune.models.factors import FactorSuit
from veritune.models.history import (
    Objective,
    OptimizationHistory,
    TerminationCause,
    TerminationReason,
)
from veritune.models.iteration import IterationAggregate, IterationRecord, IterationStatus
from veritune.models.statistics import (
    AggregateStatistics,
    FeedbackCollector,
    IterationFeedback,
    PostconditionFailure,
)

__all__ = [
    "AggregateStatistics",
    "FactorSuit",
    "FeedbackCollector",
    "IterationAggregate",
    "IterationFeedback",
    "IterationRecord",
    "IterationStatus",
    "Objective",
    "OptimizationHistory",
    "PostconditionFailure",
    "TerminationCause",
    "TerminationReason",
]
