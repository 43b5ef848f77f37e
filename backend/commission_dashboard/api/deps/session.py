from __future__ import annotations

from typing import Optional

import httpx
from fastapi import Request

from commission_dashboard.core.config import settings
from commission_dashboard.dashboard.session import AuthGate
from commission_dashboard.dashboard.state import SessionRegistry
from commission_dashboard.services.commission_fetcher import CommissionFetcher
from commission_dashboard.services.commission_proxy import UpstreamCommissionClient
from commission_dashboard.services.credential_store import CredentialStore

INTERNAL_BASE_URL = "http://commission-dashboard.internal"


def get_credential_store() -> CredentialStore:
    # new adapter per request: the file is re-read on every login attempt anyway
    return CredentialStore(settings.USERS_FILE)


def get_upstream_client() -> UpstreamCommissionClient:
    return UpstreamCommissionClient()


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.session_registry


def _fetch_timeout() -> float:
    pages = settings.UPSTREAM_MAX_PAGES if settings.UPSTREAM_FETCH_ALL_PAGES else 1
    return settings.UPSTREAM_TIMEOUT_SECONDS * pages + 5


def get_commission_fetcher(request: Request) -> CommissionFetcher:
    """
    Pages reach the proxy in-process, through the same ASGI app (and therefore
    the same dependency overrides) the browser would hit.
    """
    return CommissionFetcher(
        base_url=INTERNAL_BASE_URL,
        transport=httpx.ASGITransport(app=request.app),
        timeout=_fetch_timeout(),
    )


def _session_token(request: Request) -> Optional[str]:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        return token
    auth = request.headers.get("Authorization")
    if auth and auth.lower().startswith("bearer "):
        return auth
    return None


def get_auth_gate(request: Request) -> AuthGate:
    """
    One gate per request, restored from the session cookie (or a bearer
    header for API callers).
    """
    gate = AuthGate()
    gate.restore(_session_token(request))
    return gate
