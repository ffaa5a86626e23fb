# Copyright (c) Syntropy Systems
"""Optimization run configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from veritune.models.factors import FactorSuit
from veritune.models.history import Objective

if TYPE_CHECKING:
    from .mutators import FactorMutator
    from .policies import TerminationPolicy
    from .scorers import Scorer

DEFAULT_SAMPLES_PER_ITERATION = 20

_UNSET: Any = object()


@dataclass(frozen=True)
class OptimizationConfig:
    """Everything an orchestrator needs to run one optimization.

    Build through ``OptimizationConfig.builder()``, which validates.
    """

    use_case_id: str
    control_factor_name: str
    control_factor_type: str
    initial_factor_value: Any
    scorer: Scorer
    mutator: FactorMutator
    termination_policy: TerminationPolicy
    experiment_id: str = ""
    fixed_factors: FactorSuit = field(default_factory=FactorSuit.empty)
    objective: Objective = Objective.MAXIMIZE
    samples_per_iteration: int = DEFAULT_SAMPLES_PER_ITERATION

    @staticmethod
    def builder() -> OptimizationConfigBuilder:
        return OptimizationConfigBuilder()


class OptimizationConfigBuilder:
    """Collects options for ``OptimizationConfig`` and checks them at ``build``."""

    def __init__(self) -> None:
        self._use_case_id: str | None = None
        self._experiment_id = ""
        self._control_factor_name: str | None = None
        self._control_factor_type: str | None = None
        self._initial_factor_value: Any = _UNSET
        self._fixed_factors = FactorSuit.empty()
        self._objective = Objective.MAXIMIZE
        self._scorer: Scorer | None = None
        self._mutator: FactorMutator | None = None
        self._termination_policy: TerminationPolicy | None = None
        self._samples_per_iteration = DEFAULT_SAMPLES_PER_ITERATION

    def use_case_id(self, value: str) -> OptimizationConfigBuilder:
        self._use_case_id = value
        return self

    def experiment_id(self, value: str) -> OptimizationConfigBuilder:
        self._experiment_id = value
        return self

    def control_factor_name(self, value: str) -> OptimizationConfigBuilder:
        self._control_factor_name = value
        return self

    def control_factor_type(self, value: str | type) -> OptimizationConfigBuilder:
        self._control_factor_type = value if isinstance(value, str) else value.__name__
        return self

    def initial_factor_value(self, value: Any) -> OptimizationConfigBuilder:
        self._initial_factor_value = value
        return self

    def fixed_factors(self, value: FactorSuit) -> OptimizationConfigBuilder:
        self._fixed_factors = value
        return self

    def objective(self, value: Objective) -> OptimizationConfigBuilder:
        self._objective = value
        return self

    def scorer(self, value: Scorer) -> OptimizationConfigBuilder:
        self._scorer = value
        return self

    def mutator(self, value: FactorMutator) -> OptimizationConfigBuilder:
        self._mutator = value
        return self

    def termination_policy(self, value: TerminationPolicy) -> OptimizationConfigBuilder:
        self._termination_policy = value
        return self

    def samples_per_iteration(self, value: int) -> OptimizationConfigBuilder:
        self._samples_per_iteration = value
        return self

    def build(self) -> OptimizationConfig:
        """Validate and freeze the collected options.

        Raises:
            ValueError: if a required option is missing or invalid.

        """
        if not self._use_case_id or not self._use_case_id.strip():
            msg = "use_case_id is required"
            raise ValueError(msg)
        if not self._control_factor_name or not self._control_factor_name.strip():
            msg = "control_factor_name is required"
            raise ValueError(msg)
        if self._initial_factor_value is _UNSET:
            msg = "initial_factor_value is required"
            raise ValueError(msg)
        if self._scorer is None:
            msg = "scorer is required"
            raise ValueError(msg)
        if self._mutator is None:
            msg = "mutator is required"
            raise ValueError(msg)
        if self._termination_policy is None:
            msg = "termination_policy is required"
            raise ValueError(msg)
        if self._samples_per_iteration <= 0:
            msg = f"samples_per_iteration must be positive, got {self._samples_per_iteration}"
            raise ValueError(msg)
        if self._fixed_factors is None:
            msg = "fixed_factors must not be None"
            raise ValueError(msg)
        if self._fixed_factors.contains(self._control_factor_name):
            msg = (
                f"control factor '{self._control_factor_name}' "
                "must not also be a fixed factor"
            )
            raise ValueError(msg)

        factor_type = self._control_factor_type or type(self._initial_factor_value).__name__
        return OptimizationConfig(
            use_case_id=self._use_case_id,
            experiment_id=self._experiment_id,
            control_factor_name=self._control_factor_name,
            control_factor_type=factor_type,
            initial_factor_value=self._initial_factor_value,
            fixed_factors=self._fixed_factors,
            objective=self._objective,
            scorer=self._scorer,
            mutator=self._mutator,
            termination_policy=self._termination_policy,
            samples_per_iteration=self._samples_per_iteration,
        )
