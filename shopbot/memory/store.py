"""Session table abstractions and the in-process implementation."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Iterable

from shopbot.core.errors import UnknownSessionError

from .models import ConversationSession


class SessionStore(ABC):
    """Abstract interface for looking up live conversation sessions."""

    @abstractmethod
    def add(self, session: ConversationSession) -> None:
        """Register a freshly created session."""

    @abstractmethod
    def get(self, session_id: str) -> ConversationSession | None:
        """Return the session, or ``None`` when unknown."""

    @abstractmethod
    def iter_session_ids(self) -> Iterable[str]:
        """Iterate over known session identifiers."""

    def require(self, session_id: str) -> ConversationSession:
        session = self.get(session_id)
        if session is None:
            raise UnknownSessionError(session_id)
        return session


class InMemorySessionStore(SessionStore):
    """Process-local session map. Sessions live until the process exits."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, ConversationSession] = {}

    def add(self, session: ConversationSession) -> None:
        with self._lock:
            self._sessions[session.id] = session

    def get(self, session_id: str) -> ConversationSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def iter_session_ids(self) -> Iterable[str]:
        with self._lock:
            return sorted(self._sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
