"""Tests for termination policies."""

from datetime import datetime, timedelta, timezone

import pytest

from veritune.models import Objective, TerminationCause, TerminationReason
from veritune.optimize import (
    CompositeTerminationPolicy,
    MaxIterationsPolicy,
    NoImprovementPolicy,
    ScoreThresholdPolicy,
    TerminationPolicy,
    TimeBudgetPolicy,
    TokenBudgetPolicy,
)


class FixedPolicy(TerminationPolicy):
    """Returns the same answer every time and counts calls."""

    def __init__(self, reason):
        self.reason = reason
        self.calls = 0

    def should_terminate(self, history):
        self.calls += 1
        return self.reason

    @property
    def description(self):
        return "Fixed"


class TestMaxIterationsPolicy:
    """Tests for MaxIterationsPolicy."""

    def test_terminates_at_max(self, make_history):
        """Test the boundary."""
        policy = MaxIterationsPolicy(10)

        assert policy.should_terminate(make_history([0.5] * 9)) is None
        reason = policy.should_terminate(make_history([0.5] * 10))
        assert reason.cause is TerminationCause.MAX_ITERATIONS

    def test_invalid_max_rejected(self):
        """Test that zero and negative are rejected."""
        with pytest.raises(ValueError):
            MaxIterationsPolicy(0)
        with pytest.raises(ValueError):
            MaxIterationsPolicy(-1)

    def test_description(self):
        """Test description mentions the limit."""
        assert "20" in MaxIterationsPolicy(20).description


class TestNoImprovementPolicy:
    """Tests for NoImprovementPolicy."""

    def test_terminates_after_window(self, make_history):
        """Test termination when the best is window iterations old."""
        reason = NoImprovementPolicy(3).should_terminate(make_history([0.9, 0.5, 0.5, 0.5]))
        assert reason.cause is TerminationCause.NO_IMPROVEMENT

    def test_needs_enough_iterations(self, make_history):
        """Test that the window must be observable after the best."""
        assert NoImprovementPolicy(3).should_terminate(make_history([0.9, 0.5, 0.5])) is None

    def test_recent_improvement_continues(self, make_history):
        """Test that a recent best keeps the run going."""
        history = make_history([0.5, 0.5, 0.9, 0.5, 0.5])
        assert NoImprovementPolicy(3).should_terminate(history) is None

    def test_ties_do_not_count_as_improvement(self, make_history):
        """Test that equal scores keep the earliest best."""
        reason = NoImprovementPolicy(3).should_terminate(make_history([0.5, 0.5, 0.5, 0.5]))
        assert reason is not None

    def test_minimize(self, make_history):
        """Test with a minimizing objective."""
        history = make_history([100.0, 150.0, 120.0, 130.0], objective=Objective.MINIMIZE)
        assert NoImprovementPolicy(3).should_terminate(history) is not None

    def test_invalid_window_rejected(self):
        """Test that zero is rejected."""
        with pytest.raises(ValueError):
            NoImprovementPolicy(0)


class TestTimeBudgetPolicy:
    """Tests for TimeBudgetPolicy."""

    def test_terminates_when_exceeded(self, make_history):
        """Test a live history started long ago."""
        started = datetime.now(timezone.utc) - timedelta(minutes=10)
        reason = TimeBudgetPolicy.of_seconds(60).should_terminate(
            make_history([0.5], start_time=started)
        )
        assert reason.cause is TerminationCause.TIME_BUDGET_EXHAUSTED

    def test_within_budget(self, make_history):
        """Test a history that just started."""
        history = make_history([0.5], start_time=datetime.now(timezone.utc))
        assert TimeBudgetPolicy.of_seconds(3600).should_terminate(history) is None

    def test_invalid_budget_rejected(self):
        """Test that None, zero and negative budgets are rejected."""
        with pytest.raises(ValueError):
            TimeBudgetPolicy(None)
        with pytest.raises(ValueError):
            TimeBudgetPolicy(timedelta(0))
        with pytest.raises(ValueError):
            TimeBudgetPolicy.of_millis(-5)

    def test_description(self):
        """Test budget formatting."""
        assert "5m" in TimeBudgetPolicy.of_millis(300_000).description
        assert "30s" in TimeBudgetPolicy.of_seconds(30).description


class TestTokenBudgetPolicy:
    """Tests for TokenBudgetPolicy."""

    def test_terminates_at_budget(self, make_history):
        """Test cumulative token accounting."""
        policy = TokenBudgetPolicy(2000)

        assert policy.should_terminate(make_history([0.5], tokens=1000)) is None
        reason = policy.should_terminate(make_history([0.5, 0.6], tokens=1000))
        assert reason.cause is TerminationCause.TOKEN_BUDGET_EXHAUSTED


class TestScoreThresholdPolicy:
    """Tests for ScoreThresholdPolicy."""

    def test_reached(self, make_history):
        """Test the threshold is inclusive."""
        policy = ScoreThresholdPolicy(0.9)

        assert policy.should_terminate(make_history([0.5])) is None
        reason = policy.should_terminate(make_history([0.5, 0.9]))
        assert reason.cause is TerminationCause.SCORE_THRESHOLD_REACHED

    def test_minimize(self, make_history):
        """Test a minimizing threshold."""
        history = make_history([150.0, 90.0], objective=Objective.MINIMIZE)
        assert ScoreThresholdPolicy(100.0).should_terminate(history) is not None


class TestCompositeTerminationPolicy:
    """Tests for CompositeTerminationPolicy."""

    def test_first_reason_wins(self, make_history):
        """Test declaration order decides which reason is returned."""
        first = TerminationReason.max_iterations(1)
        second = TerminationReason.no_improvement(1)
        policy = CompositeTerminationPolicy(
            FixedPolicy(None), FixedPolicy(first), FixedPolicy(second)
        )

        assert policy.should_terminate(make_history([0.5])) == first

    def test_empty_iff_all_empty(self, make_history):
        """Test that no sub-policy firing means no termination."""
        a, b = FixedPolicy(None), FixedPolicy(None)
        policy = CompositeTerminationPolicy(a, b)

        assert policy.should_terminate(make_history([0.5])) is None
        assert a.calls == 1
        assert b.calls == 1

    def test_short_circuits(self, make_history):
        """Test later policies are not consulted once one fires."""
        later = FixedPolicy(None)
        policy = CompositeTerminationPolicy(FixedPolicy(TerminationReason.max_iterations(1)), later)

        policy.should_terminate(make_history([0.5]))
        assert later.calls == 0

    def test_empty_rejected(self):
        """Test that at least one policy is required."""
        with pytest.raises(ValueError):
            CompositeTerminationPolicy()

    def test_description(self):
        """Test descriptions are joined with OR."""
        policy = CompositeTerminationPolicy(MaxIterationsPolicy(20), NoImprovementPolicy(5))
        description = policy.description

        assert " OR " in description
        assert "20" in description
        assert "5" in description
