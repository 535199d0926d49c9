"""Unit tests for bamwindow.core.subsample module."""

import numpy as np
import pytest

from bamwindow.constants import DEFAULT_SUBSAMPLE_SEED
from bamwindow.core.subsample import SubsampleCandidates


class TestSubsampleCandidates:
    """Tests for depth-bounded Bernoulli thinning."""

    @pytest.mark.unit
    def test_not_needed_at_or_below_max_depth(self):
        for depth in (0, 1, 199, 200):
            subsample = SubsampleCandidates(max_depth=200, depth=depth)
            assert not subsample.necessary
            assert subsample.prob == 1.0
            assert all(subsample.keep() for _ in range(1000))

    @pytest.mark.unit
    def test_necessary_above_max_depth(self):
        subsample = SubsampleCandidates(max_depth=50, depth=500)
        assert subsample.necessary
        assert subsample.prob == pytest.approx(0.1)
        assert subsample.seed == DEFAULT_SUBSAMPLE_SEED

    @pytest.mark.unit
    def test_keep_fraction_matches_probability(self):
        subsample = SubsampleCandidates(max_depth=50, depth=500)

        kept = sum(subsample.keep() for _ in range(100_000))

        assert 0.09 <= kept / 100_000 <= 0.11

    @pytest.mark.unit
    def test_deterministic_for_same_seed(self):
        first = SubsampleCandidates(max_depth=10, depth=40)
        second = SubsampleCandidates(max_depth=10, depth=40)

        assert [first.keep() for _ in range(1000)] == [second.keep() for _ in range(1000)]

    @pytest.mark.unit
    def test_different_seed_changes_sequence(self):
        first = SubsampleCandidates(max_depth=10, depth=40, seed=1)
        second = SubsampleCandidates(max_depth=10, depth=40, seed=2)

        assert [first.keep() for _ in range(1000)] != [second.keep() for _ in range(1000)]

    @pytest.mark.unit
    def test_keep_matches_seeded_generator(self):
        """Each keep() consumes exactly one uniform draw."""
        subsample = SubsampleCandidates(max_depth=30, depth=100, seed=123)
        rng = np.random.default_rng(123)

        expected = [bool(rng.random() <= 0.3) for _ in range(200)]

        assert [subsample.keep() for _ in range(200)] == expected

    @pytest.mark.unit
    def test_keep_returns_bool(self):
        subsample = SubsampleCandidates(max_depth=1, depth=2)
        assert isinstance(subsample.keep(), bool)

    @pytest.mark.unit
    def test_repr(self):
        assert "not needed" in repr(SubsampleCandidates(10, 5))
        assert "prob=0.5000" in repr(SubsampleCandidates(10, 20, seed=3))
