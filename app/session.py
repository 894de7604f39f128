"""
app/session.py

Super-admin session lifecycle.

Sessions are created on login, destroyed on logout, expire after a TTL
and are all dropped when the application shuts down. Each session owns
the set of feeder point keys hidden from its improvement view.
"""

from __future__ import annotations

import hmac
import logging
import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from app.config import AdminSettings

logger = logging.getLogger(__name__)


class InvalidCredentialsError(Exception):
    """Raised when a login attempt does not match the configured admin."""


@dataclass
class AdminSession:
    token: str
    username: str
    created_at: datetime
    expires_at: datetime
    hidden_keys: set[str] = field(default_factory=set)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AdminSessionManager:
    """
    In-process session registry guarded by a lock.

    FastAPI runs sync endpoints in a thread pool, so every access to the
    registry goes through ``self._lock``.
    """

    def __init__(
        self,
        settings: AdminSettings,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._settings = settings
        self._ttl = timedelta(minutes=settings.session_ttl_minutes)
        self._clock = clock
        self._sessions: dict[str, AdminSession] = {}
        self._lock = threading.Lock()

    def login(self, username: str, password: str) -> AdminSession:
        """
        Create a session when *username*/*password* match the admin settings.

        Raises:
            InvalidCredentialsError: On any mismatch or when no admin is
                configured.
        """

        expected_user = self._settings.username or ""
        expected_password = self._settings.password or ""
        user_ok = hmac.compare_digest(username.encode(), expected_user.encode())
        password_ok = hmac.compare_digest(password.encode(), expected_password.encode())
        if not expected_user or not expected_password or not (user_ok and password_ok):
            logger.warning("Rejected admin login for user %r", username)
            raise InvalidCredentialsError("Invalid username or password.")

        now = self._clock()
        session = AdminSession(
            token=secrets.token_urlsafe(32),
            username=username,
            created_at=now,
            expires_at=now + self._ttl,
        )
        with self._lock:
            self._purge_expired(now)
            self._sessions[session.token] = session
        logger.info("Admin session opened for %s", username)
        return session

    def get(self, token: str) -> AdminSession | None:
        """Return the live session for *token*, or None if unknown or expired."""
        now = self._clock()
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.is_expired(now):
                del self._sessions[token]
                logger.info("Admin session for %s expired", session.username)
                return None
            return session

    def logout(self, token: str) -> bool:
        with self._lock:
            session = self._sessions.pop(token, None)
        if session is not None:
            logger.info("Admin session closed for %s", session.username)
        return session is not None

    def hide_key(self, token: str, key: str) -> set[str]:
        session = self.get(token)
        if session is None:
            return set()
        with self._lock:
            session.hidden_keys.add(key)
            return set(session.hidden_keys)

    def hidden_keys(self, token: str) -> frozenset[str]:
        session = self.get(token)
        if session is None:
            return frozenset()
        with self._lock:
            return frozenset(session.hidden_keys)

    def close_all(self) -> int:
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        return count

    @property
    def active_count(self) -> int:
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._sessions)

    def _purge_expired(self, now: datetime) -> None:
        expired = [token for token, s in self._sessions.items() if s.is_expired(now)]
        for token in expired:
            del self._sessions[token]
