"""
tests/test_session.py

Admin session lifecycle: login, expiry, hidden keys, logout, shutdown.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.config import AdminSettings
from app.session import AdminSessionManager, InvalidCredentialsError


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2025, 1, 10, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock() -> _Clock:
    return _Clock()


@pytest.fixture()
def manager(clock) -> AdminSessionManager:
    settings = AdminSettings(username="admin", password="pw", session_ttl_minutes=30)
    return AdminSessionManager(settings, clock=clock)


class TestLogin:
    def test_success(self, manager, clock) -> None:
        session = manager.login("admin", "pw")
        assert session.username == "admin"
        assert session.expires_at == clock.now + timedelta(minutes=30)
        assert manager.get(session.token) is session

    @pytest.mark.parametrize(("user", "password"), [("admin", "nope"), ("root", "pw"), ("", "")])
    def test_bad_credentials(self, manager, user, password) -> None:
        with pytest.raises(InvalidCredentialsError):
            manager.login(user, password)

    def test_unconfigured_admin_rejects_everything(self) -> None:
        manager = AdminSessionManager(AdminSettings())
        with pytest.raises(InvalidCredentialsError):
            manager.login("", "")

    def test_tokens_are_unique(self, manager) -> None:
        assert manager.login("admin", "pw").token != manager.login("admin", "pw").token


class TestLifecycle:
    def test_expiry(self, manager, clock) -> None:
        token = manager.login("admin", "pw").token
        clock.now += timedelta(minutes=31)
        assert manager.get(token) is None
        assert manager.active_count == 0

    def test_logout(self, manager) -> None:
        token = manager.login("admin", "pw").token
        assert manager.logout(token) is True
        assert manager.get(token) is None
        assert manager.logout(token) is False

    def test_close_all(self, manager) -> None:
        manager.login("admin", "pw")
        manager.login("admin", "pw")
        assert manager.close_all() == 2
        assert manager.active_count == 0


class TestHiddenKeys:
    def test_hide_is_per_session(self, manager) -> None:
        first = manager.login("admin", "pw").token
        second = manager.login("admin", "pw").token
        assert manager.hide_key(first, "FP-1") == {"FP-1"}
        assert manager.hidden_keys(first) == frozenset({"FP-1"})
        assert manager.hidden_keys(second) == frozenset()

    def test_unknown_token(self, manager) -> None:
        assert manager.hide_key("missing", "FP-1") == set()
        assert manager.hidden_keys("missing") == frozenset()
