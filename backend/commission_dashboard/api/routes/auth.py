# backend/commission_dashboard/api/routes/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from commission_dashboard.api.deps.session import get_auth_gate, get_credential_store, get_session_registry
from commission_dashboard.core.config import settings
from commission_dashboard.core.errors import DashboardError
from commission_dashboard.core.security import create_session_token
from commission_dashboard.dashboard.session import AuthGate
from commission_dashboard.dashboard.state import SessionRegistry
from commission_dashboard.schemas.auth import LoginFailure, LoginRequest, LoginResponse, PublicUser, SessionResponse
from commission_dashboard.services.credential_store import CredentialStore

router = APIRouter(prefix="/auth", tags=["auth"])


def set_session_cookie(response: Response, user: PublicUser) -> str:
    token = create_session_token(user)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return token


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME)


def _failure(exc: DashboardError) -> JSONResponse:
    response = JSONResponse(
        status_code=exc.status_code,
        content=LoginFailure(message=exc.message).model_dump(),
    )
    response.headers["X-Error-Code"] = exc.code
    return response


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": LoginFailure}, 401: {"model": LoginFailure}, 500: {"model": LoginFailure}},
)
async def login(
    payload: LoginRequest,
    store: CredentialStore = Depends(get_credential_store),
):
    """
    Body: {"username": "...", "password": "..."}
    Returns the user without its password and sets the session cookie.
    """
    try:
        user = store.authenticate(payload.username, payload.password)
    except DashboardError as exc:
        return _failure(exc)

    body = LoginResponse(user=user)
    response = JSONResponse(content=body.model_dump(mode="json"))
    set_session_cookie(response, user)
    return response


@router.post("/logout")
async def logout(
    response: Response,
    gate: AuthGate = Depends(get_auth_gate),
    registry: SessionRegistry = Depends(get_session_registry),
):
    if gate.is_authenticated:
        registry.discard(gate.session_key)
        gate.logout()
    clear_session_cookie(response)
    return {"success": True, "message": "Logged out"}


@router.get("/session", response_model=SessionResponse)
async def current_session(gate: AuthGate = Depends(get_auth_gate)) -> SessionResponse:
    """
    Persisted-session check used on page load.
    """
    return SessionResponse(authenticated=gate.is_authenticated, user=gate.user)
