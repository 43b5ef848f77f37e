from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

PROMO_NOT_FOUND = "PROMO_NOT_FOUND"


@dataclass
class DashboardError(Exception):
    """
    Base for every failure the dashboard surfaces to a caller.

    `code` is machine-readable (also sent as X-Error-Code), `message` is shown
    to the operator, `status_code` is what the HTTP layer answers with.
    """

    code: str
    message: str
    status_code: int

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(DashboardError):
    def __init__(self, message: str):
        super().__init__(code="VALIDATION_ERROR", message=message, status_code=400)


class AuthError(DashboardError):
    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(code="INVALID_CREDENTIALS", message=message, status_code=401)


class PromoNotFoundError(DashboardError):
    def __init__(self, promo_id: Optional[str]):
        self.promo_id = promo_id
        super().__init__(code=PROMO_NOT_FOUND, message=PROMO_NOT_FOUND, status_code=404)

    def to_payload(self) -> dict[str, Any]:
        return {"error": PROMO_NOT_FOUND}


class UpstreamHttpError(DashboardError):
    """
    A non-2xx answer. `upstream_status` is the status the remote side sent;
    `status_code` is what we answer with (the proxy always reports 500).
    """

    def __init__(self, upstream_status: int, message: Optional[str] = None):
        self.upstream_status = upstream_status
        super().__init__(
            code="UPSTREAM_HTTP_ERROR",
            message=message or f"HTTP error: {upstream_status}",
            status_code=500,
        )

    def to_payload(self) -> dict[str, Any]:
        return {"error": "Failed to fetch commission data", "upstream_status": self.upstream_status}


class UnknownError(DashboardError):
    def __init__(self, message: str = "Internal server error"):
        super().__init__(code="UNKNOWN_ERROR", message=message, status_code=500)
