# Copyright (c) Syntropy Systems
"""Errors that end an optimization run."""

from __future__ import annotations


class OptimizationError(Exception):
    """Base class for fatal optimization failures."""


class ExecutionError(OptimizationError):
    """The sample batch for an iteration could not be produced."""


class ScoringError(OptimizationError):
    """An iteration aggregate could not be scored."""


class MutationError(OptimizationError):
    """No next treatment factor value could be proposed."""
