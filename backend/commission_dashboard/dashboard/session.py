from __future__ import annotations

import enum
from typing import Iterable, Optional

from commission_dashboard.core.security import decode_session_token
from commission_dashboard.schemas.auth import PublicUser


class AuthStatus(str, enum.Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class AuthGate:
    """
    Decides between the login screen and the dashboard.

    loading -> authenticated | unauthenticated (restore)
    unauthenticated -> authenticated (login)
    authenticated -> unauthenticated (logout)
    """

    def __init__(self) -> None:
        self.status = AuthStatus.LOADING
        self.user: Optional[PublicUser] = None
        self.token: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.status is AuthStatus.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.status is AuthStatus.AUTHENTICATED

    def _require(self, *allowed: AuthStatus) -> None:
        if self.status not in allowed:
            names = ", ".join(s.value for s in allowed)
            raise RuntimeError(f"Illegal auth transition from {self.status.value}; expected {names}")

    def restore(self, token: Optional[str]) -> AuthStatus:
        self._require(AuthStatus.LOADING)
        user = decode_session_token(token)
        if user is None:
            self.status = AuthStatus.UNAUTHENTICATED
            return self.status
        self.user = user
        self.token = token
        self.status = AuthStatus.AUTHENTICATED
        return self.status

    def login(self, user: PublicUser, token: str) -> AuthStatus:
        self._require(AuthStatus.UNAUTHENTICATED)
        self.user = user
        self.token = token
        self.status = AuthStatus.AUTHENTICATED
        return self.status

    def logout(self) -> AuthStatus:
        self._require(AuthStatus.AUTHENTICATED)
        self.user = None
        self.token = None
        self.status = AuthStatus.UNAUTHENTICATED
        return self.status

    def has_any_role(self, roles: Iterable[str]) -> bool:
        if self.user is None:
            return False
        allowed = {(r or "").strip().lower() for r in roles}
        return (self.user.role or "").strip().lower() in allowed

    @property
    def session_key(self) -> Optional[str]:
        """Key for per-session server-side state; None while signed out."""
        if self.user is None or self.token is None:
            return None
        return f"{self.user.id}:{self.token[-16:]}"
