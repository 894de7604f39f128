"""
app/config.py

Application-level configuration: admin credentials, report interpretation,
AI summary provider and report store selection.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from llm_synthesis.adapter import PERPLEXITY_BASE_URL
from store.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


_SUMMARY_PROVIDERS = {"openai", "perplexity", "gemini", "mock"}
_REPORT_STORES = {"firestore", "memory"}

_DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "perplexity": "sonar",
    "gemini": "gemini-2.0-flash",
    "mock": "mock",
}
_PROVIDER_KEY_VARS = {
    "openai": "OPENAI_API_KEY",
    "perplexity": "PERPLEXITY_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


@dataclass(frozen=True)
class AdminSettings:
    """
    Super-admin credentials and session lifetime.
    """

    username: str | None = None
    password: str | None = None
    session_ttl_minutes: int = 480


@dataclass(frozen=True)
class ReportSettings:
    """
    How report timestamps and default date windows are interpreted.
    """

    timezone: str = "UTC"
    default_window_days: int = 30


@dataclass(frozen=True)
class SummarySettings:
    """
    AI summary provider selection.

    ``api_key`` is the provider-specific key when set, else the shared
    ``API_KEY``. A missing key is not fatal: summaries use the templated
    fallback.
    """

    enabled: bool = True
    provider: str = "openai"
    api_key: str | None = None
    model: str = "gpt-4o-mini"
    base_url: str | None = None
    max_tokens: int = 2048


@dataclass(frozen=True)
class StoreSettings:
    """
    Report store backend selection.
    """

    backend: str = "firestore"
    project_id: str | None = None
    credentials_path: str | None = None


@lru_cache(maxsize=1)
def get_admin_settings() -> AdminSettings:
    """
    Return admin credential settings from environment variables.
    """

    return AdminSettings(
        username=_get_optional_str_env("ADMIN_USERNAME"),
        password=_get_optional_str_env("ADMIN_PASSWORD"),
        session_ttl_minutes=max(1, _get_int_env("ADMIN_SESSION_TTL_MINUTES", 480)),
    )


@lru_cache(maxsize=1)
def get_report_settings() -> ReportSettings:
    """
    Return report interpretation settings from environment variables.
    """

    return ReportSettings(
        timezone=_get_str_env("REPORT_TIMEZONE", "UTC"),
        default_window_days=max(1, _get_int_env("REPORT_DEFAULT_WINDOW_DAYS", 30)),
    )


@lru_cache(maxsize=1)
def get_summary_settings() -> SummarySettings:
    """
    Return AI summary settings from environment variables.

    Unknown providers are kept as-is so startup validation can report them.
    """

    provider = _get_str_env("SUMMARY_PROVIDER", "openai").lower()
    key_var = _PROVIDER_KEY_VARS.get(provider)
    api_key = (_get_optional_str_env(key_var) if key_var else None) or _get_optional_str_env("API_KEY")
    default_base_url = PERPLEXITY_BASE_URL if provider == "perplexity" else None

    return SummarySettings(
        enabled=_get_bool_env("SUMMARY_ENABLED", True),
        provider=provider,
        api_key=api_key,
        model=_get_str_env("SUMMARY_MODEL", _DEFAULT_MODELS.get(provider, "gpt-4o-mini")),
        base_url=_get_optional_str_env("SUMMARY_BASE_URL") or default_base_url,
        max_tokens=max(64, _get_int_env("SUMMARY_MAX_TOKENS", 2048)),
    )


@lru_cache(maxsize=1)
def get_store_settings() -> StoreSettings:
    """
    Return report store settings from environment variables.
    """

    return StoreSettings(
        backend=_get_str_env("REPORT_STORE", "firestore").lower(),
        project_id=(
            _get_optional_str_env("FIRESTORE_PROJECT_ID")
            or _get_optional_str_env("GOOGLE_CLOUD_PROJECT")
            or _get_optional_str_env("FIREBASE_PROJECT_ID")
        ),
        credentials_path=_get_optional_str_env("FIRESTORE_CREDENTIALS_PATH"),
    )


def validate_settings() -> list[str]:
    """
    Collect configuration problems that must stop startup.
    """

    errors: list[str] = []

    admin = get_admin_settings()
    if not admin.username or not admin.password:
        errors.append("ADMIN_USERNAME and ADMIN_PASSWORD must both be set.")

    summary = get_summary_settings()
    if summary.provider not in _SUMMARY_PROVIDERS:
        errors.append(
            f"SUMMARY_PROVIDER '{summary.provider}' is not valid. "
            f"Allowed values: {sorted(_SUMMARY_PROVIDERS)}."
        )

    store = get_store_settings()
    if store.backend not in _REPORT_STORES:
        errors.append(
            f"REPORT_STORE '{store.backend}' is not valid. "
            f"Allowed values: {sorted(_REPORT_STORES)}."
        )
    elif store.backend == "firestore" and not store.project_id:
        errors.append("FIRESTORE_PROJECT_ID must be set when REPORT_STORE is 'firestore'.")

    return errors


def clear_settings_cache() -> None:
    """
    Drop cached settings so the next getter call re-reads the environment.
    """

    for getter in (
        get_admin_settings,
        get_report_settings,
        get_summary_settings,
        get_store_settings,
    ):
        getter.cache_clear()
