# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Server-side session storage.

Sessions are a second, independent way of remembering who is signed in.
They are keyed by an opaque session identifier held in a cookie and do not
consult bearer tokens; the two channels may disagree.
"""

import asyncio
import secrets
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from gateway_logging import create_logger

from .config import CREDENTIAL_TTL_SECONDS
from .models import CanonicalIdentity

logger = create_logger(name="gateway.sessions")


class SessionStore(ABC):
    """Capability to create, read and destroy server-side sessions."""

    @abstractmethod
    async def create(self, identity: CanonicalIdentity) -> str:
        """Start a session for ``identity`` and return its identifier."""
        pass

    @abstractmethod
    async def get(self, session_id: Optional[str]) -> Optional[CanonicalIdentity]:
        """Return the identity for a live session, or None."""
        pass

    @abstractmethod
    async def destroy(self, session_id: Optional[str]) -> None:
        """End a session. Unknown identifiers are ignored."""
        pass


class InMemorySessionStore(SessionStore):
    """Process-local session store with a fixed time-to-live.

    Suitable for a single process; production deployments with several
    workers need a shared backend.
    """

    def __init__(
        self,
        ttl_seconds: int = CREDENTIAL_TTL_SECONDS,
        cleanup_interval_seconds: int = 60,
        clock: Callable[[], float] = time.time,
    ):
        self._sessions: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        self._ttl_seconds = ttl_seconds
        self._cleanup_interval_seconds = cleanup_interval_seconds
        self._clock = clock
        self._last_cleanup_time = clock()

    async def create(self, identity: CanonicalIdentity) -> str:
        session_id = secrets.token_urlsafe(32)
        async with self._lock:
            self._sessions[session_id] = {
                "identity": identity,
                "created_at": self._clock(),
            }
            self._cleanup_expired_sessions()
        return session_id

    async def get(self, session_id: Optional[str]) -> Optional[CanonicalIdentity]:
        if not session_id:
            return None
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if self._clock() - session["created_at"] > self._ttl_seconds:
                del self._sessions[session_id]
                return None
            return session["identity"]

    async def destroy(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        async with self._lock:
            self._sessions.pop(session_id, None)

    def _cleanup_expired_sessions(self) -> None:
        """Drop expired sessions (called with lock held).

        Runs at most once per cleanup interval.
        """
        now = self._clock()
        if now - self._last_cleanup_time < self._cleanup_interval_seconds:
            return
        self._last_cleanup_time = now

        expired = [
            session_id for session_id, session in self._sessions.items()
            if now - session["created_at"] > self._ttl_seconds
        ]
        for session_id in expired:
            del self._sessions[session_id]

        if expired:
            logger.info(f"Cleaned up {len(expired)} expired sessions")

    def __len__(self) -> int:
        return len(self._sessions)
