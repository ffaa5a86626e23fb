# Copyright (c) Syntropy Systems
"""Declarative service contracts and per-sample verdicts."""

from veritune.contract.conditions import (
    Derivation,
    DurationConstraint,
    DurationResult,
    Postcondition,
    Precondition,
    PreconditionError,
    describe_input,
    format_duration,
)
from veritune.contract.outcome import SampleOutcome
from veritune.contract.results import (
    Fail,
    Failed,
    Ok,
    Outcome,
    Passed,
    PostconditionResult,
    Skipped,
    all_passed,
    fail,
    lift,
    ok,
)
from veritune.contract.service import ContractBuilder, DerivingBuilder, ServiceContract

__all__ = [
    "ContractBuilder",
    "Derivation",
    "DerivingBuilder",
    "DurationConstraint",
    "DurationResult",
    "Fail",
    "Failed",
    "Ok",
    "Outcome",
    "Passed",
    "Postcondition",
    "PostconditionResult",
    "Precondition",
    "PreconditionError",
    "SampleOutcome",
    "ServiceContract",
    "Skipped",
    "all_passed",
    "describe_input",
    "fail",
    "format_duration",
    "lift",
    "ok",
]
