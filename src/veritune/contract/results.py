# Copyright (c) Syntropy Systems
"""Verdicts produced by contract evaluation.

A postcondition result is one of three closed variants: ``Passed``,
``Failed`` or ``Skipped``. A derivation step produces an ``Outcome``,
either ``Ok`` (carrying the derived value) or ``Fail`` (carrying a reason).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar, Union

from typing_extensions import TypeAlias

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")
A = TypeVar("A")
B = TypeVar("B")

DEFAULT_FAILURE_REASON = "Postcondition not satisfied"


@dataclass(frozen=True)
class Passed:
    """The check held."""

    description: str

    @property
    def passed(self) -> bool:
        return True

    @property
    def failed(self) -> bool:
        return False

    @property
    def skipped(self) -> bool:
        return False

    @property
    def reason(self) -> str | None:
        return None

    @property
    def failure_message(self) -> str:
        return self.description


@dataclass(frozen=True)
class Failed:
    """The check did not hold, or could not be evaluated."""

    description: str
    reason: str = DEFAULT_FAILURE_REASON

    @property
    def passed(self) -> bool:
        return False

    @property
    def failed(self) -> bool:
        return True

    @property
    def skipped(self) -> bool:
        return False

    @property
    def failure_message(self) -> str:
        return f"{self.description}: {self.reason}"


@dataclass(frozen=True)
class Skipped:
    """The check was never evaluated because an upstream derivation failed."""

    description: str
    reason: str

    @property
    def passed(self) -> bool:
        return False

    @property
    def failed(self) -> bool:
        return False

    @property
    def skipped(self) -> bool:
        return True

    @property
    def failure_message(self) -> str:
        return f"{self.description}: skipped ({self.reason})"


PostconditionResult: TypeAlias = Union[Passed, Failed, Skipped]


def all_passed(results: list[PostconditionResult]) -> bool:
    """Return True when every result is ``Passed``.

    Skipped results count as not passed.
    """
    return all(isinstance(result, Passed) for result in results)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful derivation carrying the derived value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Fail:
    """Failed derivation carrying a human-readable reason."""

    reason: str

    @property
    def is_ok(self) -> bool:
        return False


Outcome: TypeAlias = Union[Ok[T], Fail]


def ok(value: T) -> Ok[T]:
    """Wrap a derived value."""
    return Ok(value)


def fail(reason: str) -> Fail:
    """Build a failed derivation outcome."""
    if not reason or not reason.strip():
        msg = "reason must not be blank"
        raise ValueError(msg)
    return Fail(reason)


def lift(fn: Callable[[A], B]) -> Callable[[A], Ok[B]]:
    """Turn a plain transformation into one returning ``Ok``.

    Exceptions raised by ``fn`` propagate, which a derivation reports as a
    failure.
    """

    def lifted(value: A) -> Ok[B]:
        return Ok(fn(value))

    return lifted
