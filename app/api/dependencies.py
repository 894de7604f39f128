"""
app/api/dependencies.py

Shared FastAPI dependencies: collaborators held on ``app.state`` and
admin session enforcement.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.session import AdminSession, AdminSessionManager
from llm_synthesis.adapter import BaseLLMAdapter
from store.report_store import BaseReportStore

_bearer = HTTPBearer(auto_error=False)


def get_report_store(request: Request) -> BaseReportStore:
    return request.app.state.report_store


def get_session_manager(request: Request) -> AdminSessionManager:
    return request.app.state.session_manager


def get_summary_adapter(request: Request) -> BaseLLMAdapter | None:
    """
    Adapter built at startup, or None when no provider is usable.
    """

    return request.app.state.summary_adapter


def require_admin_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    sessions: AdminSessionManager = Depends(get_session_manager),
) -> AdminSession:
    """
    Resolve the bearer token to a live admin session.
    """

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = sessions.get(credentials.credentials)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired or invalid. Please log in again.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session
