"""
Session Store - process-wide mapping from session id to session state
"""

from typing import Dict, Iterator, List, Optional

from ..models import GenerationSession
from ..utils.exceptions import SessionNotFoundError
from ..utils.logging import get_logger


class SessionStore:
    """
    Owns every GenerationSession of one process.

    Core components fetch the live object through ``require`` on every call
    and never keep it around; the presentation layer only ever gets deep
    copies from ``get``. Mutation safety relies on the single asyncio event
    loop: sessions are only touched between suspension points. Sessions are
    never evicted.
    """

    def __init__(self):
        self._sessions: Dict[str, GenerationSession] = {}
        self._active_session_id: Optional[str] = None
        self.logger = get_logger(__name__)

    def create(self, user_request: str) -> GenerationSession:
        session = GenerationSession(user_request=user_request)
        self._sessions[session.id] = session
        self._active_session_id = session.id
        self.logger.debug(f"Session created: {session.id}")
        return session

    def require(self, session_id: str) -> GenerationSession:
        """Live session for core components"""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def get(self, session_id: str) -> Optional[GenerationSession]:
        """Snapshot of a session, or None when unknown"""
        session = self._sessions.get(session_id)
        if session is None:
            return None
        return session.model_copy(deep=True)

    def touch(self, session_id: str) -> GenerationSession:
        session = self.require(session_id)
        session.touch()
        return session

    def mark_active(self, session_id: str):
        self.require(session_id)
        self._active_session_id = session_id

    def active_session(self) -> Optional[GenerationSession]:
        if self._active_session_id is None:
            return None
        return self.get(self._active_session_id)

    def list_sessions(self) -> List[GenerationSession]:
        """Snapshots, newest first"""
        sessions = reversed(list(self._sessions.values()))
        return [session.model_copy(deep=True) for session in sessions]

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._sessions))
