# Copyright (c) Syntropy Systems
"""Mutators propose the next treatment factor value."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from typing_extensions import override

from .errors import MutationError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from veritune.models.history import OptimizationHistory


class FactorMutator(ABC):
    """Strategy for moving the treatment factor between iterations.

    Mutators may read the whole history but must not depend on any other
    state that changes between calls. ``mutate`` and ``validate`` signal
    failure by raising ``MutationError``, which ends the run.
    """

    @abstractmethod
    def mutate(self, current: Any, history: OptimizationHistory) -> Any: ...

    def validate(self, value: Any) -> None:
        """Reject a proposed value by raising ``MutationError``."""
        return

    @property
    def description(self) -> str:
        return type(self).__name__

    @override
    def __str__(self) -> str:
        return self.description


class NoOpMutator(FactorMutator):
    """Always returns the current value."""

    @override
    def mutate(self, current: Any, history: OptimizationHistory) -> Any:
        return current

    @property
    @override
    def description(self) -> str:
        return "No-op (value unchanged)"


class FunctionMutator(FactorMutator):
    """Adapts a plain callable, with an optional validator."""

    def __init__(
        self,
        function: Callable[[Any, OptimizationHistory], Any],
        description: str = "Custom mutator",
        validator: Callable[[Any], bool] | None = None,
    ) -> None:
        if function is None:
            msg = "function must not be None"
            raise ValueError(msg)
        self._function = function
        self._description = description
        self._validator = validator

    @override
    def mutate(self, current: Any, history: OptimizationHistory) -> Any:
        return self._function(current, history)

    @override
    def validate(self, value: Any) -> None:
        if self._validator is not None and not self._validator(value):
            msg = f"Invalid factor value: {value!r}"
            raise MutationError(msg)

    @property
    @override
    def description(self) -> str:
        return self._description


class CandidateListMutator(FactorMutator):
    """Walks a fixed list of candidates, skipping values already tried."""

    def __init__(self, candidates: Iterable[Any]) -> None:
        self.candidates = list(candidates)
        if not self.candidates:
            msg = "candidates must not be empty"
            raise ValueError(msg)

    @override
    def mutate(self, current: Any, history: OptimizationHistory) -> Any:
        tried = [record.treatment_factor_value for record in history.iterations]
        tried.append(current)
        for candidate in self.candidates:
            if candidate not in tried:
                return candidate
        msg = f"All {len(self.candidates)} candidates have been tried"
        raise MutationError(msg)

    @override
    def validate(self, value: Any) -> None:
        if value not in self.candidates:
            msg = f"{value!r} is not one of the candidates"
            raise MutationError(msg)

    @property
    @override
    def description(self) -> str:
        return f"Candidate list ({len(self.candidates)} candidates)"


class NumericStepMutator(FactorMutator):
    """Hill-climbs a numeric factor one step at a time.

    Direction and step size are replayed from the successful iterations in
    history: an improvement keeps the direction, anything else reverses it
    and multiplies the step by ``shrink``. Each proposal steps away from
    the best value seen so far. Values already tried are never proposed
    again, and integer steps stay integers.
    """

    def __init__(
        self,
        step: float,
        minimum: float | None = None,
        maximum: float | None = None,
        shrink: float = 0.5,
    ) -> None:
        if step <= 0:
            msg = "step must be positive"
            raise ValueError(msg)
        if not 0 < shrink <= 1:
            msg = "shrink must be in (0, 1]"
            raise ValueError(msg)
        if minimum is not None and maximum is not None and minimum > maximum:
            msg = "minimum must not exceed maximum"
            raise ValueError(msg)
        self.step = step
        self.minimum = minimum
        self.maximum = maximum
        self.shrink = shrink

    def _shrunk(self, step: float) -> float:
        if isinstance(self.step, int):
            return max(1, int(step * self.shrink))
        return step * self.shrink

    def _in_range(self, value: float) -> bool:
        if self.minimum is not None and value < self.minimum:
            return False
        return not (self.maximum is not None and value > self.maximum)

    def _replay(self, history: OptimizationHistory) -> tuple[int, float]:
        direction, step = 1, self.step
        best: float | None = None
        for record in history.successful_iterations:
            if best is None or history.objective.is_better(record.score, best):
                best = record.score
            else:
                direction = -direction
                step = self._shrunk(step)
        return direction, step

    @override
    def mutate(self, current: Any, history: OptimizationHistory) -> Any:
        if isinstance(current, bool) or not isinstance(current, (int, float)):
            msg = f"NumericStepMutator needs a numeric value, got {type(current).__name__}"
            raise MutationError(msg)

        anchor = history.best_factor_value
        if anchor is None:
            anchor = current
        direction, step = self._replay(history)
        tried = [record.treatment_factor_value for record in history.iterations]

        for d in (direction, -direction):
            candidate = anchor + d * step
            if self._in_range(candidate) and candidate not in tried:
                return candidate
        msg = f"No untried in-range step of {step} from {anchor}"
        raise MutationError(msg)

    @override
    def validate(self, value: Any) -> None:
        if not self._in_range(value):
            msg = f"{value} is outside [{self.minimum}, {self.maximum}]"
            raise MutationError(msg)

    @property
    @override
    def description(self) -> str:
        bounds = ""
        if self.minimum is not None or self.maximum is not None:
            bounds = f" within [{self.minimum}, {self.maximum}]"
        return f"Numeric step {self.step}{bounds}"
