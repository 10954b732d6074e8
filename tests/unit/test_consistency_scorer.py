"""
Unit Tests for the consistency scorer.
"""

import random

import pytest

from socratix_tutor.consistency_scorer import ConsistencyScorer
from socratix_tutor.session_state import SessionState


class TestConsistencyScorer:

    @pytest.fixture
    def scorer(self):
        return ConsistencyScorer()

    @pytest.fixture
    def state(self):
        return SessionState(session_id="s1")

    def test_resolved_adds_ten(self, scorer, state):
        assert scorer.update(state, resolved=True) == 10
        assert state.consistency_score == 10

    def test_contradiction_subtracts_five(self, scorer, state):
        state.consistency_score = 30
        assert scorer.update(state, resolved=False) == 25

    def test_capped_at_100(self, scorer, state):
        state.consistency_score = 95
        assert scorer.update(state, resolved=True) == 100
        assert scorer.update(state, resolved=True) == 100

    def test_floored_at_zero(self, scorer, state):
        state.consistency_score = 3
        assert scorer.update(state, resolved=False) == 0
        assert scorer.update(state, resolved=False) == 0

    def test_always_within_bounds(self, scorer, state):
        rng = random.Random(7)
        for _ in range(500):
            scorer.update(state, resolved=rng.random() < 0.5)
            assert 0 <= state.consistency_score <= 100
