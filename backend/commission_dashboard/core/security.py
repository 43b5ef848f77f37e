from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from commission_dashboard.core.config import settings
from commission_dashboard.schemas.auth import PublicUser


def _normalize_token(token: Optional[str]) -> str:
    """
    Make token decoding resilient to common copy-paste issues:
    - Leading/trailing whitespace/newlines
    - Surrounding quotes
    - Accidentally including the 'Bearer ' prefix
    """
    if token is None:
        return ""

    t = token.strip()

    # remove surrounding quotes if present
    if (t.startswith('"') and t.endswith('"')) or (t.startswith("'") and t.endswith("'")):
        t = t[1:-1].strip()

    # remove accidental bearer prefix
    if t.lower().startswith("bearer "):
        t = t[7:].strip()

    return t


def create_session_token(user: PublicUser, expires_minutes: Optional[int] = None) -> str:
    """
    Sign the sanitized user into a session token. The password never gets here:
    PublicUser has no such field.
    """
    now = datetime.now(timezone.utc)
    expire_dt = now + timedelta(minutes=expires_minutes or settings.SESSION_EXPIRE_MINUTES)

    to_encode: dict[str, Any] = {
        "sub": user.id,
        "username": user.username,
        "role": user.role,
        "name": user.name,
        "email": user.email,
        "exp": int(expire_dt.timestamp()),
        "iat": int(now.timestamp()),
    }

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_session_token(token: Optional[str]) -> Optional[PublicUser]:
    """
    Returns the session user, or None for a missing/expired/tampered token.
    """
    token = _normalize_token(token)
    if not token:
        return None

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require_sub": True, "require_exp": True},
        )
    except JWTError:
        # Includes expired signature, bad format, bad signature, wrong algorithm, etc.
        return None

    sub = payload.get("sub")
    username = payload.get("username")
    if not sub or not username:
        return None

    return PublicUser(
        id=str(sub),
        username=username,
        role=payload.get("role") or "",
        name=payload.get("name") or "",
        email=payload.get("email"),
    )
