# backend/commission_dashboard/core/config.py

from __future__ import annotations

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "dev-secret-change-me"


def _strip_trailing_slash(url: str) -> str:
    return (url or "").strip().rstrip("/")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -----------------------------
    # Environment
    # -----------------------------
    # Use: development | staging | production
    ENVIRONMENT: str = "development"

    # -----------------------------
    # Upstream admin API
    # -----------------------------
    UPSTREAM_API_BASE_URL: str = "https://admin-api.zatiq.tech/api/v1/admin"
    UPSTREAM_TIMEOUT_SECONDS: float = 15.0
    # Off = relay exactly one upstream page (the historical behaviour).
    UPSTREAM_FETCH_ALL_PAGES: bool = False
    UPSTREAM_MAX_PAGES: int = 50

    # -----------------------------
    # Credential store
    # -----------------------------
    USERS_FILE: str = "data/users.json"

    # -----------------------------
    # Session (JWT in an HttpOnly cookie)
    # -----------------------------
    JWT_SECRET: str = DEV_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    SESSION_EXPIRE_MINUTES: int = 480
    SESSION_COOKIE_NAME: str = "dashboard_session"
    SESSION_COOKIE_SECURE: bool = False

    # -----------------------------
    # Dashboard
    # -----------------------------
    PAGE_SIZE: int = 20
    DEFAULT_FILTER_FROM: Optional[str] = None
    DEFAULT_FILTER_TO: Optional[str] = None
    DEFAULT_PROMO_ID: Optional[str] = None
    PROMO_FILTER_ROLES: List[str] = ["admin"]
    CURRENCY_SYMBOL: str = "৳"

    # -----------------------------
    # HTTP / logging
    # -----------------------------
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @property
    def UPSTREAM_API_BASE_URL_CLEAN(self) -> str:
        return _strip_trailing_slash(self.UPSTREAM_API_BASE_URL)

    @property
    def is_production_like(self) -> bool:
        return (self.ENVIRONMENT or "").strip().lower() in {"staging", "production"}

    def model_post_init(self, __context) -> None:  # pydantic v2 hook
        # Never run staging/production with a placeholder secret.
        if self.is_production_like:
            if not self.JWT_SECRET or self.JWT_SECRET.strip() == DEV_JWT_SECRET:
                raise ValueError("JWT_SECRET must be set to a strong value in staging/production.")
            if len(self.JWT_SECRET.strip()) < 32:
                raise ValueError("JWT_SECRET is too short; use at least 32 characters in staging/production.")

        # Light sanity checks (all envs)
        if self.JWT_ALGORITHM not in {"HS256"}:
            raise ValueError(f"Unsupported JWT_ALGORITHM={self.JWT_ALGORITHM!r}. Allowed: HS256")
        if self.PAGE_SIZE < 1:
            raise ValueError("PAGE_SIZE must be at least 1.")
        if self.UPSTREAM_MAX_PAGES < 1:
            raise ValueError("UPSTREAM_MAX_PAGES must be at least 1.")


settings = Settings()
