"""
tests/conftest.py

Shared fixtures. Environment is pinned before any application import so
``app.main`` builds against the in-memory store and the mock adapter.
"""

from __future__ import annotations

import os

os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "s3cret"
os.environ["REPORT_STORE"] = "memory"
os.environ["SUMMARY_PROVIDER"] = "mock"
os.environ["REPORT_TIMEZONE"] = "UTC"

import pytest  # noqa: E402

from app.config import clear_settings_cache  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture()
def unconfigured_firestore(monkeypatch):
    """
    No Firestore project anywhere, so lazy client creation raises.
    """

    for name in (
        "FIRESTORE_PROJECT_ID",
        "GOOGLE_CLOUD_PROJECT",
        "FIREBASE_PROJECT_ID",
        "FIRESTORE_CREDENTIALS_PATH",
        "GOOGLE_APPLICATION_CREDENTIALS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("store.config.load_env_files", lambda: None)
    monkeypatch.setattr("store.client._client", None)
