"""
Unit Tests for SessionState and SessionManager.
"""

import pytest

from socratix_tutor.session_manager import SessionManager
from socratix_tutor.session_state import SessionState, SessionPhase


class TestSessionState:

    @pytest.fixture
    def state(self):
        state = SessionManager.new_session("s1")
        state.topic = "Evolution"
        return state

    def test_defaults(self):
        state = SessionState(session_id="s1")
        assert state.has_topic is False
        assert state.phase == SessionPhase.CALIBRATION
        assert state.question_depth == 0
        assert state.consistency_score == 0
        assert state.current_step_info is None

    def test_answer_ids(self, state):
        state.user_answers = ["first", "second"]
        assert SessionState.answer_id(1) == "node-1"
        assert state.answer_for("node-2") == "second"
        assert state.answer_for("node-3") is None
        assert state.answer_for("node-x") is None
        assert state.answer_for("assertion-1") is None

    def test_thought_nodes_are_chained(self, state):
        for text in ["a", "b", "c"]:
            state.user_answers.append(text)
            state.question_depth += 1
            state.add_thought_node(text)

        assert [n.id for n in state.thought_nodes] == ["node-1", "node-2", "node-3"]
        assert [(c.source, c.target) for c in state.thought_connections] == [
            ("node-1", "node-2"),
            ("node-2", "node-3"),
        ]

    def test_phase_moves_forward_only(self, state):
        state.transition_to(SessionPhase.SYNTHESIS)
        assert state.phase == SessionPhase.SYNTHESIS

        with pytest.raises(ValueError):
            state.transition_to(SessionPhase.PROGRESSIVE)

        state.transition_to(SessionPhase.SYNTHESIS)
        state.transition_to(SessionPhase.CONCLUSION)
        assert state.phase == SessionPhase.CONCLUSION

    def test_snapshot_restore(self, state):
        snapshot = state.snapshot()

        state.user_answers.append("changed")
        state.question_depth = 4
        state.consistency_score = 30
        state.add_turn("user", "changed")

        state.restore(snapshot)

        assert state.user_answers == []
        assert state.question_depth == 0
        assert state.consistency_score == 0
        assert state.conversation_history == []
        assert state.topic == "Evolution"

    def test_snapshot_is_independent(self, state):
        snapshot = state.snapshot()
        state.restore(snapshot)
        state.user_answers.append("x")
        assert snapshot.user_answers == []

    def test_to_dict(self, state):
        state.add_turn("assistant", "What is a species?")
        data = state.to_dict()

        assert data["topic"] == "Evolution"
        assert data["phase"] == "calibration"
        assert len(data["curriculum_path"]) == 6
        assert data["conversation_history"][0]["role"] == "assistant"
        assert data["conversation_history"][0]["text"] == "What is a species?"


class TestSessionManager:

    @pytest.fixture
    def manager(self):
        return SessionManager()

    @pytest.mark.asyncio
    async def test_get_or_create_reuses_session(self, manager):
        first = await manager.get_or_create_session("abc")
        second = await manager.get_or_create_session("abc")

        assert first is second
        assert len(first.curriculum_path) == 6
        assert await manager.get_session("abc") is first

    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self, manager):
        a = await manager.get_or_create_session("a")
        b = await manager.get_or_create_session("b")
        a.topic = "Gravity"
        assert b.topic is None

    @pytest.mark.asyncio
    async def test_get_session_missing(self, manager):
        assert await manager.get_session("nope") is None

    @pytest.mark.asyncio
    async def test_delete_session(self, manager):
        await manager.get_or_create_session("abc")
        manager.lock_for("abc")

        assert await manager.delete_session("abc") is True
        assert await manager.delete_session("abc") is False
        assert await manager.get_session("abc") is None

    def test_lock_per_session(self, manager):
        assert manager.lock_for("a") is manager.lock_for("a")
        assert manager.lock_for("a") is not manager.lock_for("b")
