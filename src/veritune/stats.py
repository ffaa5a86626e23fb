# Copyright (c) Syntropy Systems
"""Interval estimates for observed success rates.

Uses the Wald (normal approximation) interval. It is cheap and adequate
for reporting, but it under-covers for rates near 0 or 1 and for small
samples, so treat the derived threshold as a conservative guide rather
than a guarantee.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

Z_95 = 1.96
THRESHOLD_DECIMALS = 4


@dataclass(frozen=True)
class ConfidenceInterval:
    """Two-sided interval around an observed proportion."""

    observed: float
    standard_error: float
    lower: float
    upper: float
    confidence: float = 0.95


def _validate(rate: float, samples: int) -> None:
    if samples <= 0:
        msg = f"samples must be positive, got {samples}"
        raise ValueError(msg)
    if not 0.0 <= rate <= 1.0:
        msg = f"rate must be between 0.0 and 1.0, got {rate}"
        raise ValueError(msg)


def standard_error(rate: float, samples: int) -> float:
    """Return sqrt(p(1-p)/n)."""
    _validate(rate, samples)
    return math.sqrt(rate * (1.0 - rate) / samples)


def wald_interval(rate: float, samples: int, z: float = Z_95) -> ConfidenceInterval:
    """Return the Wald interval for ``rate`` over ``samples``, clamped to [0, 1]."""
    se = standard_error(rate, samples)
    return ConfidenceInterval(
        observed=rate,
        standard_error=se,
        lower=max(0.0, rate - z * se),
        upper=min(1.0, rate + z * se),
    )


def derived_min_pass_rate(successes: int, samples: int) -> float:
    """Lower bound of the 95% interval, rounded to 4 places.

    Serves as the minimum acceptable pass rate when deriving a threshold
    from a measured baseline.
    """
    if successes < 0 or successes > samples:
        msg = f"successes must be between 0 and {samples}, got {successes}"
        raise ValueError(msg)
    interval = wald_interval(successes / samples if samples > 0 else 0.0, samples)
    return round(interval.lower, THRESHOLD_DECIMALS)
