# Copyright (c) Syntropy Systems
"""Sample outcomes: one execution of the use case, bound to its contract."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .results import Failed, PostconditionResult, all_passed

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .conditions import DurationResult
    from .service import ServiceContract

I = TypeVar("I")  # noqa: E741
R = TypeVar("R")


@dataclass(frozen=True)
class SampleOutcome(Generic[R]):
    """Result of a single sample plus what is needed to judge and cost it.

    Success is decided only by the contract's postconditions, see
    ``passed``. The duration constraint, if any, is reported separately by
    ``duration_result``.
    """

    result: R
    execution_time: timedelta
    contract: ServiceContract[Any, R]
    tokens: int = 0
    metadata: Mapping[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.contract is None:
            msg = "contract must not be None"
            raise ValueError(msg)
        if self.execution_time < timedelta(0):
            msg = "execution_time must be non-negative"
            raise ValueError(msg)
        if self.tokens < 0:
            msg = "tokens must be non-negative"
            raise ValueError(msg)
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @classmethod
    def capture(
        cls,
        contract: ServiceContract[I, R],
        input_value: I,
        function: Callable[[I], R],
        *,
        tokens: int | Callable[[R], int] = 0,
        metadata: Mapping[str, Any] | None = None,
    ) -> SampleOutcome[R]:
        """Check preconditions, run ``function`` once and time it.

        ``tokens`` may be a fixed count or a callable that reads the count
        from the result. The input is recorded under the ``input`` metadata
        key unless the caller already supplied one.

        Raises:
            PreconditionError: if ``input_value`` violates the contract.

        """
        contract.check_preconditions(input_value)

        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        result = function(input_value)
        elapsed = timedelta(seconds=time.perf_counter() - start)

        token_count = tokens(result) if callable(tokens) else tokens
        meta: dict[str, Any] = {"input": input_value}
        if metadata:
            meta.update(metadata)

        return cls(
            result=result,
            execution_time=elapsed,
            contract=contract,
            tokens=int(token_count),
            metadata=meta,
            timestamp=started_at,
        )

    @property
    def latency_ms(self) -> float:
        return self.execution_time / timedelta(milliseconds=1)

    @property
    def postcondition_count(self) -> int:
        return self.contract.postcondition_count

    @property
    def passed(self) -> bool:
        """True when every postcondition passed."""
        return all_passed(self.evaluate_postconditions())

    def evaluate_postconditions(self) -> list[PostconditionResult]:
        return self.contract.evaluate(self.result)

    def duration_result(self) -> DurationResult | None:
        """Judge the execution time, or None when the contract sets no ceiling."""
        constraint = self.contract.duration_constraint
        if constraint is None:
            return None
        return constraint.evaluate(self.execution_time)

    def assert_all(self, context: str | None = None) -> None:
        """Raise ``AssertionError`` listing every postcondition that did not pass."""
        failures = [
            r.failure_message for r in self.evaluate_postconditions() if not r.passed
        ]
        if not failures:
            return
        header = "Postconditions failed"
        if context:
            header = f"{context} - {header}"
        raise AssertionError(header + ":\n  - " + "\n  - ".join(failures))

    def failures(self) -> list[Failed]:
        """Return only the ``Failed`` results for this sample."""
        return [r for r in self.evaluate_postconditions() if isinstance(r, Failed)]
