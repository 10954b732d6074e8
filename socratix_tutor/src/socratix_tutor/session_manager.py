"""
Session Manager

Keeps SessionState objects in memory, keyed by session id, each with its
own asyncio.Lock so operations on one session run one at a time.
State lives only as long as the process.
"""

import asyncio
import logging
from typing import Dict, Optional

from socratix_tutor.curriculum import build_curriculum_path
from socratix_tutor.session_state import SessionState

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Registry of live sessions.

    Each session is paired with a lock; callers hold the lock for the
    whole of a state-machine operation, including the LLM call.
    """

    def __init__(self):
        self._sessions: Dict[str, SessionState] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    @staticmethod
    def new_session(session_id: str) -> SessionState:
        """Empty-topic session with the curriculum path in place."""
        return SessionState(session_id=session_id, curriculum_path=build_curriculum_path())

    async def get_session(self, session_id: str) -> Optional[SessionState]:
        return self._sessions.get(session_id)

    async def get_or_create_session(self, session_id: str) -> SessionState:
        """
        Get existing session or create an empty one.

        Args:
            session_id: Session identifier

        Returns:
            SessionState object
        """
        session = self._sessions.get(session_id)
        if session is None:
            session = self.new_session(session_id)
            self._sessions[session_id] = session
            logger.info(f"💾 [SessionManager] Created session {session_id}")
        return session

    async def save_session(self, session: SessionState) -> bool:
        self._sessions[session.session_id] = session
        return True

    async def delete_session(self, session_id: str) -> bool:
        """
        Delete a session.

        Returns:
            True if deleted, False if it did not exist
        """
        self._locks.pop(session_id, None)
        if session_id in self._sessions:
            del self._sessions[session_id]
            return True
        return False

    def lock_for(self, session_id: str) -> asyncio.Lock:
        """Per-session lock, created on first use."""
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock
