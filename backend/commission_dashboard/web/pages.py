# backend/commission_dashboard/web/pages.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from commission_dashboard.api.deps.session import (
    get_auth_gate,
    get_commission_fetcher,
    get_credential_store,
    get_session_registry,
)
from commission_dashboard.api.routes.auth import clear_session_cookie, set_session_cookie
from commission_dashboard.core.config import settings
from commission_dashboard.core.errors import DashboardError
from commission_dashboard.dashboard.filters import parse_date
from commission_dashboard.dashboard.metrics import (
    format_amount,
    format_currency,
    format_date,
    format_subscription_type,
    status_variant,
)
from commission_dashboard.dashboard.notifications import LOGGED_OUT
from commission_dashboard.dashboard.pagination import ELLIPSIS, NARROW_WINDOW, WIDE_WINDOW
from commission_dashboard.dashboard.session import AuthGate
from commission_dashboard.dashboard.state import TAB_FIRST_TIME, TAB_RECURRING, DashboardController, SessionRegistry
from commission_dashboard.services.commission_fetcher import CommissionFetcher
from commission_dashboard.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["currency"] = format_currency
templates.env.filters["amount"] = format_amount
templates.env.filters["display_date"] = format_date
templates.env.filters["subscription_type"] = format_subscription_type
templates.env.filters["status_variant"] = status_variant
templates.env.globals["ELLIPSIS"] = ELLIPSIS
templates.env.globals["WIDE_WINDOW"] = WIDE_WINDOW
templates.env.globals["NARROW_WINDOW"] = NARROW_WINDOW

router = APIRouter(tags=["pages"], include_in_schema=False)

REFRESH_WHILE_LOADING_SECONDS = 2


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def _promo_filter_allowed(gate: AuthGate) -> bool:
    return gate.has_any_role(settings.PROMO_FILTER_ROLES)


# =========================================================
# LOGIN / LOGOUT
# =========================================================
@router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    logged_out: bool = Query(False),
    gate: AuthGate = Depends(get_auth_gate),
):
    if gate.is_authenticated:
        return _redirect("/")
    return templates.TemplateResponse(
        request,
        "login.html",
        {"error": None, "username": "", "notification": LOGGED_OUT if logged_out else None},
    )


@router.post("/login", response_class=HTMLResponse)
async def login_submit(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    gate: AuthGate = Depends(get_auth_gate),
    store: CredentialStore = Depends(get_credential_store),
):
    if gate.is_authenticated:
        return _redirect("/")

    try:
        user = store.authenticate(username.strip(), password)
    except DashboardError as exc:
        return templates.TemplateResponse(
            request,
            "login.html",
            {"error": exc.message, "username": username, "notification": None},
            status_code=exc.status_code,
        )

    response = _redirect("/")
    token = set_session_cookie(response, user)
    gate.login(user, token)
    return response


@router.post("/logout")
async def logout_submit(
    gate: AuthGate = Depends(get_auth_gate),
    registry: SessionRegistry = Depends(get_session_registry),
):
    if gate.is_authenticated:
        logger.info("logout", extra={"username": gate.user.username})  # type: ignore[union-attr]
        registry.discard(gate.session_key)
        gate.logout()
    response = _redirect("/login?logged_out=1")
    clear_session_cookie(response)
    return response


# =========================================================
# DASHBOARD
# =========================================================
@router.get("/", response_class=HTMLResponse)
async def dashboard_page(
    request: Request,
    tab: Optional[str] = Query(None),
    page: Optional[int] = Query(None),
    gate: AuthGate = Depends(get_auth_gate),
    registry: SessionRegistry = Depends(get_session_registry),
    fetcher: CommissionFetcher = Depends(get_commission_fetcher),
):
    if not gate.is_authenticated:
        return _redirect("/login")

    state = registry.get_or_create(gate.session_key)  # type: ignore[arg-type]
    if state.applied_filters is None:
        # initial load with the default filters
        await DashboardController(state, fetcher).apply()

    state.select_tab(tab)
    if page is not None:
        state.go_to_page(page)

    context: Dict[str, Any] = {
        "user": gate.user,
        "state": state,
        "status": state.status.value,
        "summary": state.summary,
        "controls": state.controls,
        "promo_filter_allowed": _promo_filter_allowed(gate),
        "tabs": [
            (TAB_FIRST_TIME, "First Time", state.pages[TAB_FIRST_TIME]),
            (TAB_RECURRING, "Recurring", state.pages[TAB_RECURRING]),
        ],
        "notification": state.pop_notification(),
        "refresh_seconds": REFRESH_WHILE_LOADING_SECONDS if state.loading else None,
    }
    return templates.TemplateResponse(request, "dashboard.html", context)


@router.post("/dashboard/apply")
async def apply_filters(
    from_date: str = Form("", alias="from"),
    to_date: str = Form("", alias="to"),
    promo_id: str = Form(""),
    gate: AuthGate = Depends(get_auth_gate),
    registry: SessionRegistry = Depends(get_session_registry),
    fetcher: CommissionFetcher = Depends(get_commission_fetcher),
):
    if not gate.is_authenticated:
        return _redirect("/login")

    state = registry.get_or_create(gate.session_key)  # type: ignore[arg-type]
    controls = state.controls
    controls.set_from(parse_date(from_date))
    controls.set_to(parse_date(to_date))
    if _promo_filter_allowed(gate):
        controls.set_promo_id(promo_id)

    await DashboardController(state, fetcher).apply()
    return _redirect("/")


@router.post("/dashboard/retry")
async def retry_fetch(
    gate: AuthGate = Depends(get_auth_gate),
    registry: SessionRegistry = Depends(get_session_registry),
    fetcher: CommissionFetcher = Depends(get_commission_fetcher),
):
    if not gate.is_authenticated:
        return _redirect("/login")

    state = registry.get_or_create(gate.session_key)  # type: ignore[arg-type]
    await DashboardController(state, fetcher).retry()
    return _redirect("/")
