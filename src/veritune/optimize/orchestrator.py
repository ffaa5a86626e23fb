# Copyright (c) Syntropy Systems
"""The optimization control loop."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from typing_extensions import TypeAlias

from veritune.contract import SampleOutcome
from veritune.models.factors import FactorSuit
from veritune.models.history import OptimizationHistory, TerminationReason
from veritune.models.iteration import IterationAggregate, IterationRecord
from veritune.models.statistics import AggregateStatistics

from .aggregator import aggregate_outcomes
from .errors import ExecutionError, MutationError, ScoringError

if TYPE_CHECKING:
    from .config import OptimizationConfig

logger = logging.getLogger(__name__)

SampleExecutor: TypeAlias = Callable[[FactorSuit, int], Sequence[SampleOutcome[Any]]]
ProgressObserver: TypeAlias = Callable[[IterationRecord], None]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _error_message(error: Exception) -> str:
    return str(error) or type(error).__name__


class OptimizationOrchestrator:
    """Runs sample, aggregate, score, record and mutate until told to stop.

    Iterations are numbered from 0 and run strictly one after another. The
    run ends when the termination policy returns a reason, or on the first
    ``ExecutionError``, ``ScoringError`` or ``MutationError``. Nothing is
    retried. Iterations recorded before a failure are kept.

    Example:
        history = OptimizationOrchestrator(config, executor).run()
        print(history.best_factor_value)

    """

    def __init__(
        self,
        config: OptimizationConfig,
        executor: SampleExecutor,
        observer: ProgressObserver | None = None,
    ) -> None:
        self.config = config
        self.executor = executor
        self.observer = observer

    def run(self) -> OptimizationHistory:
        """Run the optimization and return the finalized history."""
        config = self.config
        history = OptimizationHistory(
            use_case_id=config.use_case_id,
            experiment_id=config.experiment_id,
            treatment_factor_name=config.control_factor_name,
            treatment_factor_type=config.control_factor_type,
            fixed_factors=config.fixed_factors,
            objective=config.objective,
            scorer_description=config.scorer.description,
            mutator_description=config.mutator.description,
            termination_policy_description=config.termination_policy.description,
            start_time=_now(),
        )
        logger.info(
            "Optimizing %s.%s (%s) from %r",
            config.use_case_id,
            config.control_factor_name,
            config.objective.value,
            config.initial_factor_value,
        )

        current = config.initial_factor_value
        iteration = 0
        while True:
            suit = config.fixed_factors.with_factor(config.control_factor_name, current)
            started_at = _now()

            try:
                outcomes = self.executor(suit, config.samples_per_iteration)
            except ExecutionError as e:
                reason = _error_message(e)
                aggregate = self._aggregate(
                    iteration, suit, AggregateStatistics.empty(), started_at
                )
                history = self._record(history, IterationRecord.execution_failed(aggregate, reason))
                return self._finish(history, TerminationReason.execution_failure(reason))

            aggregate = self._aggregate(
                iteration, suit, aggregate_outcomes(outcomes), started_at
            )

            try:
                score = config.scorer.score(aggregate)
            except ScoringError as e:
                reason = _error_message(e)
                history = self._record(history, IterationRecord.scoring_failed(aggregate, reason))
                return self._finish(history, TerminationReason.scoring_failure(reason))

            history = self._record(history, IterationRecord.success(aggregate, score))

            termination = config.termination_policy.should_terminate(history)
            if termination is not None:
                return self._finish(history, termination)

            try:
                proposed = config.mutator.mutate(current, history)
                config.mutator.validate(proposed)
            except MutationError as e:
                return self._finish(
                    history, TerminationReason.mutation_failure(_error_message(e))
                )

            logger.debug(
                "Iteration %d: next %s = %r", iteration, config.control_factor_name, proposed
            )
            current = proposed
            iteration += 1

    def _aggregate(
        self,
        iteration: int,
        suit: FactorSuit,
        statistics: AggregateStatistics,
        started_at: datetime,
    ) -> IterationAggregate:
        return IterationAggregate(
            iteration_number=iteration,
            factor_suit=suit,
            treatment_factor_name=self.config.control_factor_name,
            statistics=statistics,
            start_time=started_at,
            end_time=max(_now(), started_at),
        )

    def _record(
        self, history: OptimizationHistory, record: IterationRecord
    ) -> OptimizationHistory:
        history = history.append(record)
        stats = record.aggregate.statistics
        logger.debug(
            "Iteration %d %s: score=%.4f success_rate=%.4f tokens=%d",
            record.iteration_number,
            record.status.value,
            record.score,
            stats.success_rate,
            stats.total_tokens,
        )
        if self.observer is not None:
            try:
                self.observer(record)
            except Exception:
                logger.exception(
                    "Progress observer failed on iteration %d", record.iteration_number
                )
        return history

    def _finish(
        self, history: OptimizationHistory, reason: TerminationReason
    ) -> OptimizationHistory:
        history = history.finalize(max(_now(), history.start_time), reason)
        if reason.cause.is_failure:
            logger.warning(
                "Optimization stopped after %d iterations: %s",
                history.iteration_count,
                reason.message,
            )
        else:
            logger.info(
                "Optimization finished after %d iterations: %s (best score %s)",
                history.iteration_count,
                reason.message,
                history.best_score,
            )
        return history
