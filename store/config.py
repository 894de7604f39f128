"""
store/config.py

Environment-driven configuration helpers for the report store.
"""

from __future__ import annotations

import os
from pathlib import Path

_ENV_FILES = (".env", ".env.local")
_PROJECT_ID_VARS = (
    "FIRESTORE_PROJECT_ID",
    "GOOGLE_CLOUD_PROJECT",
    "FIREBASE_PROJECT_ID",
)


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in _ENV_FILES:
        env_path = project_root / filename
        if not env_path.is_file():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            if key.startswith("export "):
                key = key[len("export "):].strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def resolve_firestore_project() -> str:
    """
    Resolve the Firestore project id from environment variables.

    Priority:
    1) FIRESTORE_PROJECT_ID
    2) GOOGLE_CLOUD_PROJECT
    3) FIREBASE_PROJECT_ID
    """

    load_env_files()

    for name in _PROJECT_ID_VARS:
        value = (os.getenv(name) or "").strip()
        if value:
            return value

    raise RuntimeError(
        "No Firestore project configured. Set FIRESTORE_PROJECT_ID, or "
        "GOOGLE_CLOUD_PROJECT / FIREBASE_PROJECT_ID."
    )


def resolve_credentials_path() -> str | None:
    """
    Return the service-account JSON path when one is configured and exists.

    Falls back to Application Default Credentials when unset.
    """

    load_env_files()

    raw = (
        os.getenv("FIRESTORE_CREDENTIALS_PATH")
        or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        or ""
    ).strip()
    if not raw:
        return None
    path = Path(raw).expanduser()
    if not path.is_file():
        raise RuntimeError(f"Firestore credentials file not found: {path}")
    return str(path)
