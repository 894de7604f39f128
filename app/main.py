"""
app/main.py

FastAPI application factory for the taskforce improvement dashboard API.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.config import (
    get_admin_settings,
    get_report_settings,
    get_store_settings,
    get_summary_settings,
    validate_settings,
)
from app.domain.timestamps import resolve_timezone
from app.session import AdminSessionManager
from llm_synthesis.summarizer import build_adapter
from store.report_store import BaseReportStore, FirestoreReportStore, InMemoryReportStore


def _validate_env() -> None:
    """
    Validate all required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle. A missing AI
    provider key is only a warning: summaries fall back to templated text.
    """

    errors = validate_settings()
    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    summary = get_summary_settings()
    if summary.enabled and summary.provider != "mock" and not summary.api_key:
        logging.getLogger(__name__).warning(
            "No API key configured for SUMMARY_PROVIDER=%s; AI summaries will use templated fallback text.",
            summary.provider,
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _build_report_store() -> BaseReportStore:
    tz = resolve_timezone(get_report_settings().timezone)
    if get_store_settings().backend == "memory":
        return InMemoryReportStore(tz=tz)
    return FirestoreReportStore(tz=tz)


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Build the report store, session manager and summary adapter on boot; release them on exit."""
    log = logging.getLogger(__name__)

    application.state.report_store = _build_report_store()
    application.state.session_manager = AdminSessionManager(get_admin_settings())
    application.state.summary_adapter = build_adapter()
    log.info(
        "Report store %s ready; summary adapter %s",
        type(application.state.report_store).__name__,
        getattr(application.state.summary_adapter, "name", "fallback-only"),
    )
    try:
        yield
    finally:
        closed = application.state.session_manager.close_all()
        application.state.report_store.close()
        log.info("Closed %d admin session(s) and the report store", closed)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()
    _validate_env()

    application = FastAPI(
        title="Taskforce Improvement API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import (
        auth_router,
        dashboard_router,
        export_router,
        improvement_router,
        summary_router,
    )

    application.include_router(auth_router)
    application.include_router(improvement_router)
    application.include_router(summary_router)
    application.include_router(export_router)
    application.include_router(dashboard_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
