# Copyright (c) Syntropy Systems
"""Fold a batch of sample outcomes into aggregate statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from veritune.contract import Failed, all_passed, describe_input
from veritune.models.statistics import AggregateStatistics, FeedbackCollector

if TYPE_CHECKING:
    from collections.abc import Iterable

    from veritune.contract import SampleOutcome


def aggregate_outcomes(outcomes: Iterable[SampleOutcome[Any]]) -> AggregateStatistics:
    """Summarize one iteration's samples.

    A sample counts as a success only when its contract says so. Each
    outcome's postconditions are evaluated exactly once.
    """
    collector = FeedbackCollector()
    sample_count = 0
    success_count = 0
    total_tokens = 0
    total_latency_ms = 0.0

    for outcome in outcomes:
        sample_count += 1
        total_tokens += outcome.tokens
        total_latency_ms += outcome.latency_ms

        results = outcome.evaluate_postconditions()
        if all_passed(results):
            success_count += 1
            continue

        for result in results:
            if isinstance(result, Failed):
                collector.record_failure(result.description, result.reason)
        if "input" in outcome.metadata:
            collector.record_failed_input(describe_input(outcome.metadata["input"]))

    mean_latency_ms = total_latency_ms / sample_count if sample_count else 0.0
    return AggregateStatistics.from_counts(
        sample_count,
        success_count,
        total_tokens,
        mean_latency_ms,
        feedback=collector.build(),
    )
