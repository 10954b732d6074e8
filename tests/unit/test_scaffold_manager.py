"""
Unit Tests for scaffold escalation.
"""

import pytest

from socratix_tutor.scaffold_manager import ScaffoldManager
from socratix_tutor.session_state import SessionState


class TestScaffoldManager:

    @pytest.fixture
    def manager(self):
        return ScaffoldManager()

    @pytest.fixture
    def state(self):
        return SessionState(session_id="s1", topic="Gravity")

    def test_escalation_order(self, manager, state):
        """First request is a nudge, then hint, then partial explanation."""
        names = [manager.request(state).level_name for _ in range(3)]
        assert names == ["nudge", "hint", "partial_explanation"]
        assert state.scaffold_level == 3

    def test_levels_are_numbered_from_one(self, manager, state):
        assert manager.request(state).level == 1
        assert manager.request(state).level == 2
        assert manager.request(state).level == 3

    def test_ceiling(self, manager, state):
        for _ in range(3):
            manager.request(state)

        response = manager.request(state)

        assert response.max_reached is True
        assert response.level == 3
        assert response.level_name == "partial_explanation"
        assert "Maximum scaffolding reached" in response.message
        assert state.scaffold_level == 3

    def test_message_includes_current_question(self, manager, state):
        response = manager.request(state, "Why do apples fall?")
        assert "Why do apples fall?" in response.message
        assert response.max_reached is False

    def test_next_level_name(self, manager, state):
        assert manager.next_level_name(state) == "nudge"
        state.scaffold_level = 2
        assert manager.next_level_name(state) == "partial_explanation"
        state.scaffold_level = 3
        assert manager.next_level_name(state) is None
        assert manager.can_escalate(state) is False

    def test_reset(self, manager, state):
        manager.request(state)
        manager.request(state)
        manager.reset(state)
        assert state.scaffold_level == 0
        assert manager.request(state).level_name == "nudge"
