"""
Designer session registry.

Each open designer gets its own DesignStore; stores never share state.
The registry only maps session ids to stores.

Sessions are kept in least-recently-used order. A session idle for longer
than the TTL is dropped on the next registry call, and opening a session
at the cap evicts the least recently used one.
"""

import logging
import secrets
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from nfcforge.config import settings
from nfcforge.models.design import Design
from nfcforge.models.failure import FailureKind, KnownError
from nfcforge.services.design_store import DesignStore

logger = logging.getLogger(__name__)


class SessionNotFoundError(KnownError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"Design session not found: {session_id}",
            suggestion="Open a new design session.",
            status_code=404,
        )


@dataclass
class _Session:
    store: DesignStore
    last_access: float


class DesignSessionRegistry:
    """
    Thread-safe map of session id to DesignStore.

    Args:
        ttl_seconds: Idle time after which a session expires
        max_sessions: Number of sessions kept before LRU eviction
        clock: Monotonic time source in seconds
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        max_sessions: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds is None:
            ttl_seconds = settings.design_session_ttl_seconds
        if max_sessions is None:
            max_sessions = settings.max_design_sessions
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: OrderedDict[str, _Session] = OrderedDict()
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def open(self, design: Design | None = None, quantity: int = 1) -> tuple[str, DesignStore]:
        """Create a new session and return (session_id, store)."""
        store = DesignStore(design=design, quantity=quantity)
        session_id = secrets.token_urlsafe(16)
        with self._lock:
            now = self._clock()
            self._expire(now)
            while len(self._sessions) >= self.max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info("DESIGN_SESSION_EVICTED", extra={"session_id": evicted})
            self._sessions[session_id] = _Session(store=store, last_access=now)
        logger.info("DESIGN_SESSION_OPENED", extra={"session_id": session_id})
        return session_id, store

    def get(self, session_id: str) -> DesignStore:
        """
        Return a session's store and mark it as used.

        Raises:
            SessionNotFoundError: If the session does not exist or has expired
        """
        with self._lock:
            now = self._clock()
            self._expire(now)
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            session.last_access = now
            self._sessions.move_to_end(session_id)
        return session.store

    def close(self, session_id: str) -> None:
        """
        Raises:
            SessionNotFoundError: If the session does not exist
        """
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)
        logger.info("DESIGN_SESSION_CLOSED", extra={"session_id": session_id})

    def _expire(self, now: float) -> None:
        # Oldest access first, so stop at the first live session
        while self._sessions:
            session_id, session = next(iter(self._sessions.items()))
            if now - session.last_access <= self.ttl_seconds:
                break
            del self._sessions[session_id]
            logger.info("DESIGN_SESSION_EXPIRED", extra={"session_id": session_id})


_registry: DesignSessionRegistry | None = None


def get_session_registry() -> DesignSessionRegistry:
    """Process-wide registry instance."""
    global _registry
    if _registry is None:
        _registry = DesignSessionRegistry()
    return _registry
