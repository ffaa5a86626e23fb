"""Tests for factor mutators."""

import pytest

from veritune.optimize import (
    CandidateListMutator,
    FunctionMutator,
    MutationError,
    NoOpMutator,
    NumericStepMutator,
)


class TestNoOpMutator:
    """Tests for NoOpMutator."""

    def test_returns_current(self, make_history):
        """Test that the value is unchanged."""
        mutator = NoOpMutator()

        assert mutator.mutate("prompt v1", make_history([0.5])) == "prompt v1"
        assert mutator.description.startswith("No-op")


class TestFunctionMutator:
    """Tests for FunctionMutator."""

    def test_delegates(self, make_history):
        """Test that the callable receives value and history."""
        mutator = FunctionMutator(lambda v, h: v + h.iteration_count)
        assert mutator.mutate(10, make_history([0.1, 0.2])) == 12

    def test_validator(self):
        """Test that a failing validator raises MutationError."""
        mutator = FunctionMutator(lambda v, h: v, validator=lambda v: v > 0)

        mutator.validate(1)
        with pytest.raises(MutationError):
            mutator.validate(-1)


class TestCandidateListMutator:
    """Tests for CandidateListMutator."""

    def test_next_untried(self, make_history):
        """Test that tried candidates are skipped."""
        mutator = CandidateListMutator(["a", "b", "c"])
        history = make_history([0.5], values=["a"])

        assert mutator.mutate("a", history) == "b"

    def test_exhausted(self, make_history):
        """Test that running out of candidates raises MutationError."""
        mutator = CandidateListMutator(["a", "b"])
        history = make_history([0.5, 0.6], values=["a", "b"])

        with pytest.raises(MutationError):
            mutator.mutate("b", history)

    def test_empty_rejected(self):
        """Test that an empty candidate list is rejected."""
        with pytest.raises(ValueError):
            CandidateListMutator([])


class TestNumericStepMutator:
    """Tests for NumericStepMutator."""

    def test_first_step_goes_up(self, make_history):
        """Test the initial direction."""
        mutator = NumericStepMutator(0.1, minimum=0.0, maximum=1.0)
        history = make_history([0.5], values=[0.5])

        assert mutator.mutate(0.5, history) == pytest.approx(0.6)

    def test_keeps_direction_after_improvement(self, make_history):
        """Test climbing on from the new best."""
        mutator = NumericStepMutator(0.1, minimum=0.0, maximum=1.0)
        history = make_history([0.5, 0.6], values=[0.5, 0.6])

        assert mutator.mutate(0.6, history) == pytest.approx(0.7)

    def test_reverses_and_shrinks(self, make_history):
        """Test reversing with half the step after a worse score."""
        mutator = NumericStepMutator(0.1, minimum=0.0, maximum=1.0)
        history = make_history([0.5, 0.4], values=[0.5, 0.6])

        assert mutator.mutate(0.6, history) == pytest.approx(0.45)

    def test_bounces_off_range(self, make_history):
        """Test stepping the other way at the boundary."""
        mutator = NumericStepMutator(0.1, minimum=0.0, maximum=1.0)
        history = make_history([0.5], values=[1.0])

        assert mutator.mutate(1.0, history) == pytest.approx(0.9)

    def test_integer_steps(self, make_history):
        """Test that integer steps stay integers."""
        mutator = NumericStepMutator(4, minimum=1, maximum=64)
        history = make_history([0.5, 0.4], values=[8, 12])

        proposed = mutator.mutate(12, history)
        assert proposed == 6
        assert isinstance(proposed, int)

    def test_unit_step_exhausted(self, make_history):
        """Test that a unit step never returns to a tried value."""
        mutator = NumericStepMutator(1, minimum=0, maximum=10)
        history = make_history([0.5, 0.4, 0.4], values=[5, 6, 4])

        with pytest.raises(MutationError):
            mutator.mutate(4, history)

    def test_skips_tried_value(self, make_history):
        """Test stepping the other way when the next value was already tried."""
        mutator = NumericStepMutator(1, minimum=0, maximum=10)
        history = make_history([0.5, 0.4], values=[5, 4])

        assert mutator.mutate(4, history) == 6

    def test_validate_range(self):
        """Test range validation."""
        mutator = NumericStepMutator(0.1, minimum=0.0, maximum=1.0)

        mutator.validate(0.5)
        with pytest.raises(MutationError):
            mutator.validate(2.0)

    def test_non_numeric_rejected(self, make_history):
        """Test that a non-numeric value raises MutationError."""
        with pytest.raises(MutationError):
            NumericStepMutator(1).mutate("text", make_history([0.5], values=["text"]))

    def test_invalid_construction(self):
        """Test argument validation."""
        with pytest.raises(ValueError):
            NumericStepMutator(0)
        with pytest.raises(ValueError):
            NumericStepMutator(1, minimum=5, maximum=1)
