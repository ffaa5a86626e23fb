# Copyright (c) Syntropy Systems
"""Iterative optimization of a single treatment factor."""

from veritune.optimize.aggregator import aggregate_outcomes
from veritune.optimize.config import OptimizationConfig, OptimizationConfigBuilder
from veritune.optimize.errors import (
    ExecutionError,
    MutationError,
    OptimizationError,
    ScoringError,
)
from veritune.optimize.executor import ContractSampleExecutor
from veritune.optimize.mutators import (
    CandidateListMutator,
    FactorMutator,
    FunctionMutator,
    NoOpMutator,
    NumericStepMutator,
)
from veritune.optimize.orchestrator import (
    OptimizationOrchestrator,
    ProgressObserver,
    SampleExecutor,
)
from veritune.optimize.policies import (
    CompositeTerminationPolicy,
    MaxIterationsPolicy,
    NoImprovementPolicy,
    ScoreThresholdPolicy,
    TerminationPolicy,
    TimeBudgetPolicy,
    TokenBudgetPolicy,
)
from veritune.optimize.scorers import (
    CostEfficiencyScorer,
    FunctionScorer,
    MeanLatencyScorer,
    Scorer,
    SuccessRateScorer,
    WeightedComponent,
    WeightedScorer,
)

__all__ = [
    "CandidateListMutator",
    "CompositeTerminationPolicy",
    "ContractSampleExecutor",
    "CostEfficiencyScorer",
    "ExecutionError",
    "FactorMutator",
    "FunctionMutator",
    "FunctionScorer",
    "MaxIterationsPolicy",
    "MeanLatencyScorer",
    "MutationError",
    "NoImprovementPolicy",
    "NoOpMutator",
    "NumericStepMutator",
    "OptimizationConfig",
    "OptimizationConfigBuilder",
    "OptimizationError",
    "OptimizationOrchestrator",
    "ProgressObserver",
    "SampleExecutor",
    "ScoreThresholdPolicy",
    "Scorer",
    "ScoringError",
    "SuccessRateScorer",
    "TerminationPolicy",
    "TimeBudgetPolicy",
    "TokenBudgetPolicy",
    "WeightedComponent",
    "WeightedScorer",
    "aggregate_outcomes",
]
