# Copyright (c) Syntropy Systems
"""Pydantic models for per-iteration sample statistics."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from pydantic import Field, model_validator

from veritune.stats import wald_interval

from .base import FrozenModel

if TYPE_CHECKING:
    from veritune.stats import ConfidenceInterval

MAX_MESSAGES_PER_POSTCONDITION = 5
MAX_FAILED_INPUTS = 5
MESSAGE_PREVIEW_CHARS = 200


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class PostconditionFailure(FrozenModel):
    """How often one postcondition failed in a batch, with sample messages."""

    description: str
    count: int = Field(ge=0)
    sample_messages: tuple[str, ...] = ()


class IterationFeedback(FrozenModel):
    """Failure digest for one iteration, for mutators that learn from errors."""

    postcondition_failures: dict[str, PostconditionFailure] = Field(default_factory=dict)
    failed_inputs: tuple[str, ...] = ()

    @property
    def has_failures(self) -> bool:
        return bool(self.postcondition_failures)

    @property
    def total_postcondition_failures(self) -> int:
        return sum(f.count for f in self.postcondition_failures.values())

    def format_for_mutator(self) -> str:
        """Render the digest as plain text."""
        if not self.has_failures:
            return "No failures recorded."

        lines = ["POSTCONDITION FAILURES:"]
        for description, failure in self.postcondition_failures.items():
            lines.append(f"  * {description} ({failure.count} failures)")
            lines.extend(
                f"    - {_truncate(message, MESSAGE_PREVIEW_CHARS)}"
                for message in failure.sample_messages
            )
        if self.failed_inputs:
            lines.append("")
            lines.append("FAILED INPUTS:")
            lines.extend(f"  - {value}" for value in self.failed_inputs)
        return "\n".join(lines) + "\n"


class FeedbackCollector:
    """Mutable accumulator that produces an ``IterationFeedback``."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._messages: dict[str, list[str]] = {}
        self._inputs: list[str] = []

    def record_failure(self, description: str, message: str | None) -> None:
        self._counts[description] = self._counts.get(description, 0) + 1
        messages = self._messages.setdefault(description, [])
        if message and len(messages) < MAX_MESSAGES_PER_POSTCONDITION:
            messages.append(message)

    def record_failed_input(self, value: str | None) -> None:
        if value is None or value in self._inputs:
            return
        if len(self._inputs) < MAX_FAILED_INPUTS:
            self._inputs.append(value)

    def build(self) -> IterationFeedback:
        failures = {
            description: PostconditionFailure(
                description=description,
                count=count,
                sample_messages=tuple(self._messages.get(description, [])),
            )
            for description, count in self._counts.items()
        }
        return IterationFeedback(
            postcondition_failures=failures, failed_inputs=tuple(self._inputs)
        )


class AggregateStatistics(FrozenModel):
    """Summary of one finished sample batch.

    Build with ``from_counts`` so the failure count and success rate are
    derived consistently.
    """

    sample_count: int
    success_count: int
    failure_count: int
    success_rate: float
    total_tokens: int
    mean_latency_ms: float
    feedback: IterationFeedback = Field(default_factory=IterationFeedback)

    @model_validator(mode="after")
    def _check_invariants(self) -> AggregateStatistics:
        if self.sample_count < 0:
            msg = "sample_count must be non-negative"
            raise ValueError(msg)
        if self.success_count < 0:
            msg = "success_count must be non-negative"
            raise ValueError(msg)
        if self.failure_count < 0:
            msg = "failure_count must be non-negative"
            raise ValueError(msg)
        if self.success_count + self.failure_count != self.sample_count:
            msg = (
                "success_count + failure_count must equal sample_count: "
                f"{self.success_count} + {self.failure_count} != {self.sample_count}"
            )
            raise ValueError(msg)
        if not 0.0 <= self.success_rate <= 1.0:
            msg = "success_rate must be between 0.0 and 1.0"
            raise ValueError(msg)
        if self.total_tokens < 0:
            msg = "total_tokens must be non-negative"
            raise ValueError(msg)
        if self.mean_latency_ms < 0.0:
            msg = "mean_latency_ms must be non-negative"
            raise ValueError(msg)
        return self

    @classmethod
    def from_counts(
        cls,
        sample_count: int,
        success_count: int,
        total_tokens: int,
        mean_latency_ms: float,
        feedback: IterationFeedback | None = None,
    ) -> AggregateStatistics:
        """Derive failure count and success rate from raw counts."""
        success_rate = success_count / sample_count if sample_count > 0 else 0.0
        return cls(
            sample_count=sample_count,
            success_count=success_count,
            failure_count=sample_count - success_count,
            success_rate=success_rate,
            total_tokens=total_tokens,
            mean_latency_ms=mean_latency_ms,
            feedback=feedback or IterationFeedback(),
        )

    @classmethod
    def empty(cls) -> AggregateStatistics:
        return cls.from_counts(0, 0, 0, 0.0)

    @property
    def avg_tokens_per_sample(self) -> int:
        if self.sample_count == 0:
            return 0
        return self.total_tokens // self.sample_count

    @property
    def avg_latency_ms(self) -> int:
        """Mean latency rounded half-up to whole milliseconds."""
        return math.floor(self.mean_latency_ms + 0.5)

    def confidence_interval(self) -> ConfidenceInterval:
        """95% Wald interval on the success rate (needs at least one sample)."""
        return wald_interval(self.success_rate, self.sample_count)
