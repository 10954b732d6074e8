"""
Unit Tests for the assertion ledger.
"""

import pytest

from socratix_tutor.assertion_ledger import AssertionLedger
from socratix_tutor.session_state import SessionState


class TestAssertionLedger:

    @pytest.fixture
    def ledger(self):
        return AssertionLedger()

    @pytest.fixture
    def state(self):
        return SessionState(session_id="s1", topic="Entropy")

    def test_threshold_is_strict(self, ledger, state):
        assert ledger.record(state, "Entropy increases", "node-1", 70) is None
        assert state.assertion_count == 0

        assertion = ledger.record(state, "Entropy increases", "node-1", 71)
        assert assertion is not None
        assert state.assertion_count == 1

    def test_assertion_fields(self, ledger, state):
        assertion = ledger.record(state, "Heat flows from hot to cold", "node-3", 90)

        assert assertion.id.startswith("assertion-")
        assert assertion.statement == "Heat flows from hot to cold"
        assert assertion.source_answer_id == "node-3"
        assert assertion.confidence == 90

    def test_foundational_depends_on_step(self, ledger, state):
        state.current_step = 1
        assert ledger.record(state, "a", "node-1", 80).foundational is True
        state.current_step = 2
        assert ledger.record(state, "b", "node-2", 80).foundational is False

    def test_append_only_ids_unique(self, ledger, state):
        for i in range(5):
            ledger.record(state, f"statement {i}", f"node-{i + 1}", 99)
        ids = [a.id for a in state.assertions]
        assert len(set(ids)) == 5
        assert [a.statement for a in state.assertions] == [f"statement {i}" for i in range(5)]

    def test_summary(self, ledger, state):
        ledger.record(state, "a", "node-1", 80)
        ledger.record(state, "b", "node-2", 86)
        state.current_step = 4
        ledger.record(state, "c", "node-3", 95)

        summary = ledger.summary(state)
        assert summary == {"total": 3, "high_confidence": 2, "foundational": 2}
