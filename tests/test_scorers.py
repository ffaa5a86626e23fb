"""Tests for scorers."""

import pytest

from veritune.optimize import (
    CostEfficiencyScorer,
    FunctionScorer,
    MeanLatencyScorer,
    SuccessRateScorer,
    WeightedComponent,
    WeightedScorer,
)


def constant(value):
    return FunctionScorer(lambda _: value, f"Constant {value}")


class TestBasicScorers:
    """Tests for the single-metric scorers."""

    def test_success_rate(self, make_aggregate):
        """Test that the score is the success rate."""
        scorer = SuccessRateScorer()

        assert scorer.score(make_aggregate(successes=17, samples=20)) == pytest.approx(0.85)
        assert scorer.description == "Success rate"

    def test_cost_efficiency(self, make_aggregate):
        """Test success per thousand tokens."""
        scorer = CostEfficiencyScorer()

        assert scorer.score(make_aggregate(successes=8, samples=10, tokens=2000)) == pytest.approx(0.4)
        assert "efficiency" in scorer.description.lower()

    def test_cost_efficiency_without_tokens(self, make_aggregate):
        """Test that zero tokens scores zero."""
        assert CostEfficiencyScorer().score(make_aggregate(tokens=0)) == 0.0

    def test_cost_efficiency_rewards_fewer_tokens(self, make_aggregate):
        """Test that the same success with fewer tokens scores higher."""
        scorer = CostEfficiencyScorer()
        cheap = scorer.score(make_aggregate(tokens=500))
        expensive = scorer.score(make_aggregate(tokens=5000))

        assert cheap > expensive

    def test_mean_latency(self, make_aggregate):
        """Test the latency scorer."""
        assert MeanLatencyScorer().score(make_aggregate(latency_ms=42.5)) == 42.5

    def test_function_scorer(self, make_aggregate):
        """Test adapting a callable."""
        scorer = FunctionScorer(lambda a: a.statistics.sample_count, "Sample count")

        assert scorer.score(make_aggregate(samples=10)) == 10.0
        assert str(scorer) == "Sample count"


class TestWeightedScorer:
    """Tests for WeightedScorer."""

    def test_weighted_mean(self, make_aggregate):
        """Test sum(score * weight) / sum(weight)."""
        scorer = WeightedScorer(
            WeightedComponent(constant(1.0), 3.0),
            WeightedComponent(constant(0.0), 1.0),
        )
        assert scorer.score(make_aggregate()) == pytest.approx(0.75)

    def test_accepts_tuples(self, make_aggregate):
        """Test (scorer, weight) pairs."""
        scorer = WeightedScorer((constant(0.2), 1.0), (constant(0.4), 1.0))
        assert scorer.score(make_aggregate()) == pytest.approx(0.3)

    def test_all_zero_weights(self, make_aggregate):
        """Test that zero total weight scores zero."""
        scorer = WeightedScorer((constant(1.0), 0.0))
        assert scorer.score(make_aggregate()) == 0.0

    def test_description(self):
        """Test percentage description."""
        scorer = WeightedScorer(
            (SuccessRateScorer(), 0.7),
            (CostEfficiencyScorer(), 0.3),
        )
        assert scorer.description.startswith("70% Success rate + 30% ")

    def test_invalid_components_rejected(self):
        """Test empty, None and negative components are rejected."""
        with pytest.raises(ValueError):
            WeightedScorer()
        with pytest.raises(ValueError):
            WeightedComponent(None, 1.0)
        with pytest.raises(ValueError):
            WeightedComponent(SuccessRateScorer(), -0.1)
