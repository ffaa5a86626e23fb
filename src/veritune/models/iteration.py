# Copyright (c) Syntropy Systems
"""Pydantic models for optimization iterations."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import model_validator

from .base import FrozenModel
from .factors import FactorSuit
from .statistics import AggregateStatistics


class IterationStatus(str, Enum):
    """How an iteration ended."""

    SUCCESS = "success"
    EXECUTION_FAILED = "execution_failed"
    SCORING_FAILED = "scoring_failed"


class IterationAggregate(FrozenModel):
    """Statistics for one iteration, tied to the configuration that produced them."""

    iteration_number: int
    factor_suit: FactorSuit
    treatment_factor_name: str
    statistics: AggregateStatistics
    start_time: datetime
    end_time: datetime

    @model_validator(mode="after")
    def _check_invariants(self) -> IterationAggregate:
        if self.iteration_number < 0:
            msg = "iteration_number must be non-negative"
            raise ValueError(msg)
        if not self.treatment_factor_name or not self.treatment_factor_name.strip():
            msg = "treatment_factor_name must not be blank"
            raise ValueError(msg)
        if not self.factor_suit.contains(self.treatment_factor_name):
            msg = f"treatment_factor_name '{self.treatment_factor_name}' not found in factor_suit"
            raise ValueError(msg)
        if self.end_time < self.start_time:
            msg = "end_time must not be before start_time"
            raise ValueError(msg)
        return self

    @property
    def treatment_factor_value(self) -> Any:
        return self.factor_suit[self.treatment_factor_name]

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time


class IterationRecord(FrozenModel):
    """A scored iteration as stored in the optimization history.

    Failed iterations carry a reason and a score of 0.0 that never takes
    part in best-iteration selection.
    """

    aggregate: IterationAggregate
    score: float
    status: IterationStatus = IterationStatus.SUCCESS
    failure_reason: str | None = None

    @model_validator(mode="after")
    def _check_status(self) -> IterationRecord:
        if self.status is IterationStatus.SUCCESS and self.failure_reason is not None:
            msg = "SUCCESS status must not have a failure reason"
            raise ValueError(msg)
        if self.status is not IterationStatus.SUCCESS and not self.failure_reason:
            msg = f"{self.status.name} status must have a failure reason"
            raise ValueError(msg)
        if self.status is not IterationStatus.SUCCESS and self.score != 0.0:
            msg = f"{self.status.name} status must have a score of 0.0, got {self.score}"
            raise ValueError(msg)
        return self

    @classmethod
    def success(cls, aggregate: IterationAggregate, score: float) -> IterationRecord:
        return cls(aggregate=aggregate, score=score)

    @classmethod
    def execution_failed(cls, aggregate: IterationAggregate, reason: str) -> IterationRecord:
        return cls(
            aggregate=aggregate,
            score=0.0,
            status=IterationStatus.EXECUTION_FAILED,
            failure_reason=reason,
        )

    @classmethod
    def scoring_failed(cls, aggregate: IterationAggregate, reason: str) -> IterationRecord:
        return cls(
            aggregate=aggregate,
            score=0.0,
            status=IterationStatus.SCORING_FAILED,
            failure_reason=reason,
        )

    @property
    def iteration_number(self) -> int:
        return self.aggregate.iteration_number

    @property
    def is_successful(self) -> bool:
        return self.status is IterationStatus.SUCCESS

    @property
    def treatment_factor_value(self) -> Any:
        return self.aggregate.treatment_factor_value
