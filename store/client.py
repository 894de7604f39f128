"""
store/client.py

Lazy Firestore client factory.
"""

from __future__ import annotations

import logging

from google.cloud import firestore

from store.config import resolve_credentials_path, resolve_firestore_project

logger = logging.getLogger(__name__)

_client: firestore.Client | None = None


def create_firestore_client() -> firestore.Client:
    project_id = resolve_firestore_project()
    credentials_path = resolve_credentials_path()
    if credentials_path:
        logger.info("Using Firestore service account from %s", credentials_path)
        return firestore.Client.from_service_account_json(credentials_path, project=project_id)
    return firestore.Client(project=project_id)


def get_firestore_client() -> firestore.Client:
    """Return the shared client, creating it on first call."""
    global _client
    if _client is None:
        _client = create_firestore_client()
    return _client


def close_firestore_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
