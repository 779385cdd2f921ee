"""Session manager for tracking active editor sessions."""

import logging
import uuid

from stagcompose.editor import CompositionEditor
from stagcompose.exceptions import SessionNotFoundError
from stagcompose.rendering import AsyncioFrameScheduler

from .models import EditorSession

logger = logging.getLogger(__name__)


class SessionManager:
    """Manages all active editor sessions in memory."""

    def __init__(self):
        self._sessions: dict[str, EditorSession] = {}

    def create(self, width: int | None = None, height: int | None = None) -> EditorSession:
        """Create a session with a fresh editor.

        Sessions are created from request handlers, so the repaint loop runs
        on the server's event loop.
        """
        session = EditorSession(
            id=str(uuid.uuid4()),
            editor=CompositionEditor(width, height, scheduler=AsyncioFrameScheduler()),
        )
        self._sessions[session.id] = session
        logger.info(
            "Registered new session: %s (%dx%d), total sessions: %d",
            session.id, session.editor.width, session.editor.height, len(self._sessions),
        )
        return session

    def unregister(self, session_id: str) -> bool:
        """Remove a session. True if it existed."""
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.editor.close()
            logger.info("Removed session: %s", session_id)
            return True
        return False

    def get(self, session_id: str) -> EditorSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def get_most_recent(self) -> EditorSession | None:
        """Get the most recently active session."""
        if not self._sessions:
            return None
        return max(self._sessions.values(), key=lambda s: s.last_activity)

    def resolve(self, session_id: str) -> EditorSession:
        """
        Resolve a session ID, treating 'current' as the most recent session.

        Raises:
            SessionNotFoundError: If no matching session exists
        """
        if session_id == "current":
            session = self.get_most_recent()
            if session is None:
                raise SessionNotFoundError("No active sessions")
        else:
            session = self.get(session_id)
            if session is None:
                raise SessionNotFoundError(f"Session '{session_id}' not found")
        session.update_activity()
        return session

    def get_all(self) -> list[EditorSession]:
        """All sessions."""
        return list(self._sessions.values())

    def clear(self) -> None:
        """Drop every session."""
        for session in self._sessions.values():
            session.editor.close()
        self._sessions.clear()


session_manager = SessionManager()
