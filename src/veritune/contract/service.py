# Copyright (c) Syntropy Systems
"""Service contracts: the declarative definition of a successful sample."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from .conditions import (
    Derivation,
    DurationConstraint,
    Postcondition,
    Precondition,
)
from .results import PostconditionResult, all_passed

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import timedelta

    from .results import Outcome

I = TypeVar("I")  # noqa: E741
R = TypeVar("R")
D = TypeVar("D")


@dataclass(frozen=True)
class ServiceContract(Generic[I, R]):
    """Ordered preconditions, postconditions and derivations for a use case.

    A contract holds no per-evaluation state and can be shared across any
    number of samples.

    Example:
        contract = (
            ServiceContract.define()
            .require("Prompt is not empty", lambda p: bool(p.strip()))
            .ensure("Response is not empty", lambda r: bool(r))
            .derive("Valid JSON", parse_json)
            .ensure("Has items", lambda doc: "items" in doc)
            .build()
        )

    """

    preconditions: tuple[Precondition[I], ...] = ()
    postconditions: tuple[Postcondition[R], ...] = ()
    derivations: tuple[Derivation[R, object], ...] = ()
    duration_constraint: DurationConstraint | None = None

    @staticmethod
    def define() -> ContractBuilder[I, R]:
        """Start building a contract."""
        return ContractBuilder()

    @property
    def postcondition_count(self) -> int:
        """Direct postconditions plus each derivation and its nested checks."""
        return len(self.postconditions) + sum(
            d.postcondition_count for d in self.derivations
        )

    def check_preconditions(self, value: I) -> None:
        """Raise ``PreconditionError`` on the first violated precondition."""
        for precondition in self.preconditions:
            precondition.check(value)

    def evaluate(self, result: R) -> list[PostconditionResult]:
        """Judge one sample result.

        Direct postconditions come first in declaration order, then each
        derivation followed by its nested postconditions.
        """
        results: list[PostconditionResult] = [
            p.evaluate(result) for p in self.postconditions
        ]
        for derivation in self.derivations:
            results.extend(derivation.evaluate(result))
        return results

    def is_satisfied_by(self, result: R) -> bool:
        """Return True when every postcondition passes for ``result``."""
        return all_passed(self.evaluate(result))

    def __str__(self) -> str:
        return (
            f"ServiceContract[derivations={len(self.derivations)}, "
            f"postconditions={self.postcondition_count}]"
        )


class ContractBuilder(Generic[I, R]):
    """Fluent builder for ``ServiceContract``."""

    def __init__(self) -> None:
        self._preconditions: list[Precondition[I]] = []
        self._postconditions: list[Postcondition[R]] = []
        self._derivations: list[Derivation[R, object]] = []
        self._duration_constraint: DurationConstraint | None = None

    def require(self, description: str, predicate: Callable[[I], bool]) -> ContractBuilder[I, R]:
        """Add a precondition on the input."""
        self._preconditions.append(Precondition(description, predicate))
        return self

    def ensure(self, description: str, predicate: Callable[[R], bool]) -> ContractBuilder[I, R]:
        """Add a direct postcondition on the result."""
        self._postconditions.append(Postcondition(description, predicate))
        return self

    def derive(
        self, description: str, function: Callable[[R], Outcome[D]]
    ) -> DerivingBuilder[I, R, D]:
        """Start a derivation; following ``ensure`` calls apply to its output."""
        if not description or not description.strip():
            msg = "description must not be blank"
            raise ValueError(msg)
        if function is None:
            msg = "function must not be None"
            raise ValueError(msg)
        return DerivingBuilder(self, description, function)

    def ensure_duration_below(
        self, max_duration: timedelta, description: str = ""
    ) -> ContractBuilder[I, R]:
        """Set the wall-time ceiling."""
        self._duration_constraint = DurationConstraint(max_duration, description)
        return self

    def build(self) -> ServiceContract[I, R]:
        return ServiceContract(
            preconditions=tuple(self._preconditions),
            postconditions=tuple(self._postconditions),
            derivations=tuple(self._derivations),
            duration_constraint=self._duration_constraint,
        )

    def _add_derivation(self, derivation: Derivation[R, object]) -> None:
        self._derivations.append(derivation)


class DerivingBuilder(Generic[I, R, D]):
    """Builder state while nested postconditions are being attached."""

    def __init__(
        self,
        parent: ContractBuilder[I, R],
        description: str,
        function: Callable[[R], Outcome[D]],
    ) -> None:
        self._parent = parent
        self._description = description
        self._function = function
        self._postconditions: list[Postcondition[D]] = []
        self._finalized = False

    def ensure(self, description: str, predicate: Callable[[D], bool]) -> DerivingBuilder[I, R, D]:
        """Add a postcondition on the derived value."""
        self._postconditions.append(Postcondition(description, predicate))
        return self

    def derive(
        self, description: str, function: Callable[[R], Outcome[object]]
    ) -> DerivingBuilder[I, R, object]:
        """Close this derivation and start another one on the original result."""
        self._finalize()
        return self._parent.derive(description, function)

    def ensure_duration_below(
        self, max_duration: timedelta, description: str = ""
    ) -> ContractBuilder[I, R]:
        self._finalize()
        return self._parent.ensure_duration_below(max_duration, description)

    def build(self) -> ServiceContract[I, R]:
        self._finalize()
        return self._parent.build()

    def _finalize(self) -> None:
        if self._finalized:
            return
        self._finalized = True
        self._parent._add_derivation(  # noqa: SLF001
            Derivation(self._description, self._function, tuple(self._postconditions))
        )
