# Copyright (c) Syntropy Systems
"""Factor suits: immutable name -> value configurations."""

from __future__ import annotations

from collections.abc import Mapping, Set
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import Field, field_serializer, field_validator
from typing_extensions import override

from .base import FrozenModel

if TYPE_CHECKING:
    from collections.abc import ItemsView, KeysView


def _freeze(value: object) -> object:
    """Hashable form of a factor value that is equal for equal values."""
    if isinstance(value, Mapping):
        return tuple(
            sorted(((repr(k), _freeze(v)) for k, v in value.items()), key=lambda kv: kv[0])
        )
    if isinstance(value, Set):
        return frozenset(_freeze(v) for v in value)
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    try:
        _ = hash(value)
    except TypeError:
        return repr(value)
    return value


class FactorSuit(FrozenModel):
    """One configuration: the fixed factors plus the current treatment value.

    Equality and hashing are by content. ``with_factor`` returns a new suit
    and leaves the original untouched. ``values`` is a read-only view over a
    private copy, so neither the caller's mapping nor holders of the suit
    can change it after construction.
    """

    values: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)

    @field_validator("values", mode="after")
    @classmethod
    def _freeze_values(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @field_serializer("values")
    def _dump_values(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return dict(value)

    @classmethod
    def of(cls, values: Mapping[str, Any] | None = None, **factors: Any) -> FactorSuit:
        """Build a suit from a mapping and/or keyword factors."""
        merged: dict[str, Any] = dict(values or {})
        merged.update(factors)
        return cls(values=merged)

    @classmethod
    def empty(cls) -> FactorSuit:
        """Return a suit with no factors."""
        return cls()

    def with_factor(self, name: str, value: Any) -> FactorSuit:
        """Return a copy of this suit with ``name`` set to ``value``."""
        if not name:
            msg = "factor name must not be empty"
            raise ValueError(msg)
        updated = dict(self.values)
        updated[name] = value
        return FactorSuit(values=updated)

    def get(self, name: str, default: Any = None) -> Any:
        """Return a factor value by name or the provided default."""
        return self.values.get(name, default)

    def contains(self, name: str) -> bool:
        return name in self.values

    def keys(self) -> KeysView[str]:
        """Return the factor names."""
        return self.values.keys()

    def items(self) -> ItemsView[str, Any]:
        """Return the (name, value) pairs."""
        return self.values.items()

    def as_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the underlying mapping."""
        return dict(self.values)

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def __len__(self) -> int:
        return len(self.values)

    @override
    def __hash__(self) -> int:
        return hash(
            tuple(
                sorted(
                    ((key, _freeze(value)) for key, value in self.values.items()),
                    key=lambda kv: kv[0],
                )
            )
        )

    @override
    def __str__(self) -> str:
        return f"FactorSuit{dict(self.values)}"
