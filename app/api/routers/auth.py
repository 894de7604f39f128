"""
app/api/routers/auth.py

Admin login/logout endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_session_manager, require_admin_session
from app.schemas.auth import LoginRequest, LoginResponse, LogoutResponse
from app.session import AdminSession, AdminSessionManager, InvalidCredentialsError

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    sessions: AdminSessionManager = Depends(get_session_manager),
) -> LoginResponse:
    """
    Exchange admin credentials for a bearer token.
    """

    try:
        session = sessions.login(payload.username, payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    return LoginResponse(access_token=session.token, expires_at=session.expires_at)


@router.post("/logout", response_model=LogoutResponse)
def logout(
    session: AdminSession = Depends(require_admin_session),
    sessions: AdminSessionManager = Depends(get_session_manager),
) -> LogoutResponse:
    return LogoutResponse(logged_out=sessions.logout(session.token))
