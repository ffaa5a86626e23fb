# Copyright (c) Syntropy Systems
"""Postconditions, preconditions, derivations and duration constraints."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .results import Fail, Failed, Ok, Passed, PostconditionResult, Skipped

if TYPE_CHECKING:
    from collections.abc import Callable

    from .results import Outcome

T = TypeVar("T")
R = TypeVar("R")
D = TypeVar("D")

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60_000


def _require_description(description: str | None) -> None:
    if description is None:
        msg = "description must not be None"
        raise ValueError(msg)
    if not description.strip():
        msg = "description must not be blank"
        raise ValueError(msg)


class PreconditionError(Exception):
    """Raised when an input violates a contract precondition."""

    description: str
    input: object

    def __init__(self, description: str, input_value: object, detail: str | None = None) -> None:
        self.description = description
        self.input = input_value
        message = f"Precondition failed: {description} (input: {input_value!r})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


@dataclass(frozen=True)
class Precondition(Generic[T]):
    """A named check on the use case input, evaluated before execution."""

    description: str
    predicate: Callable[[T], bool]

    def __post_init__(self) -> None:
        _require_description(self.description)
        if self.predicate is None:
            msg = "predicate must not be None"
            raise ValueError(msg)

    def check(self, value: T) -> None:
        """Raise ``PreconditionError`` unless ``value`` satisfies the predicate."""
        try:
            satisfied = self.predicate(value)
        except Exception as e:
            raise PreconditionError(
                self.description, value, f"evaluation failed: {e}"
            ) from e
        if not satisfied:
            raise PreconditionError(self.description, value)


@dataclass(frozen=True)
class Postcondition(Generic[T]):
    """A named check on a sample result (or a derived value)."""

    description: str
    predicate: Callable[[T], bool]

    def __post_init__(self) -> None:
        _require_description(self.description)
        if self.predicate is None:
            msg = "predicate must not be None"
            raise ValueError(msg)

    def evaluate(self, value: T) -> PostconditionResult:
        """Evaluate against ``value``; a raising predicate counts as failed."""
        try:
            satisfied = self.predicate(value)
        except Exception as e:  # noqa: BLE001
            return Failed(self.description, str(e) or type(e).__name__)
        if satisfied:
            return Passed(self.description)
        return Failed(self.description)

    def skip(self, reason: str) -> Skipped:
        return Skipped(self.description, reason)


@dataclass(frozen=True)
class Derivation(Generic[R, D]):
    """A named, fallible transformation whose postconditions apply to its output.

    The derivation itself counts as one postcondition: it passes when the
    function returns ``Ok``. When it fails, its nested postconditions are
    reported as skipped rather than evaluated.
    """

    description: str
    function: Callable[[R], Outcome[D]]
    postconditions: tuple[Postcondition[D], ...] = ()

    def __post_init__(self) -> None:
        _require_description(self.description)
        if self.function is None:
            msg = "function must not be None"
            raise ValueError(msg)
        object.__setattr__(self, "postconditions", tuple(self.postconditions))

    @property
    def postcondition_count(self) -> int:
        return 1 + len(self.postconditions)

    def evaluate(self, result: R) -> list[PostconditionResult]:
        """Run the derivation and its nested postconditions against ``result``."""
        try:
            outcome = self.function(result)
        except Exception as e:  # noqa: BLE001
            return self._failed(str(e) or type(e).__name__)

        if isinstance(outcome, Ok):
            results: list[PostconditionResult] = [Passed(self.description)]
            derived = outcome.value
            results.extend(p.evaluate(derived) for p in self.postconditions)
            return results
        if isinstance(outcome, Fail):
            return self._failed(outcome.reason)

        msg = f"derivation returned {type(outcome).__name__}, expected Ok or Fail"
        return self._failed(msg)

    def _failed(self, reason: str) -> list[PostconditionResult]:
        skip_reason = f"Derivation '{self.description}' failed"
        results: list[PostconditionResult] = [Failed(self.description, reason)]
        results.extend(p.skip(skip_reason) for p in self.postconditions)
        return results


def format_duration(duration: timedelta) -> str:
    """Render a duration compactly: ``250ms``, ``1.5s`` or ``2.0m``."""
    millis = int(duration / timedelta(milliseconds=1))
    if millis < MS_PER_SECOND:
        return f"{millis}ms"
    if millis < MS_PER_MINUTE:
        return f"{millis / MS_PER_SECOND:.1f}s"
    return f"{millis / MS_PER_MINUTE:.1f}m"


@dataclass(frozen=True)
class DurationResult:
    """Outcome of checking a measured wall time against its ceiling."""

    description: str
    max_duration: timedelta
    actual: timedelta
    passed: bool

    @property
    def failed(self) -> bool:
        return not self.passed

    @property
    def message(self) -> str:
        verdict = "within" if self.passed else "exceeded"
        return (
            f"{self.description}: {format_duration(self.actual)} {verdict} "
            f"limit of {format_duration(self.max_duration)}"
        )


@dataclass(frozen=True)
class DurationConstraint:
    """Ceiling on a sample's wall time, judged separately from postconditions."""

    max_duration: timedelta
    description: str = field(default="")

    def __post_init__(self) -> None:
        if self.max_duration is None:
            msg = "max_duration must not be None"
            raise ValueError(msg)
        if self.max_duration <= timedelta(0):
            msg = "max_duration must be positive"
            raise ValueError(msg)
        if not self.description:
            object.__setattr__(
                self, "description", f"Duration below {format_duration(self.max_duration)}"
            )

    def evaluate(self, actual: timedelta) -> DurationResult:
        """Pass iff ``actual`` does not exceed the ceiling."""
        return DurationResult(
            description=self.description,
            max_duration=self.max_duration,
            actual=actual,
            passed=actual <= self.max_duration,
        )


def describe_input(value: Any, limit: int = 100) -> str:
    """Short printable form of a use case input."""
    text = value if isinstance(value, str) else repr(value)
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."
