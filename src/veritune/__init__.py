"""
veritune - Contract-driven tuning for non-deterministic use cases.

Sample a use case, judge each sample against a contract, and search for
a better treatment factor value.
"""

from veritune.contract import SampleOutcome, ServiceContract
from veritune.models import FactorSuit, Objective, OptimizationHistory
from veritune.optimize import OptimizationConfig, OptimizationOrchestrator

__version__ = "0.1.0"
__all__ = [
    "FactorSuit",
    "Objective",
    "OptimizationConfig",
    "OptimizationHistory",
    "OptimizationOrchestrator",
    "SampleOutcome",
    "ServiceContract",
    "__version__",
]
