from __future__ import annotations

from typing import Any, Dict, List, Optional

from commission_dashboard.core.security import create_session_token
from commission_dashboard.schemas.auth import PublicUser

UPSTREAM_BASE_URL = "https://upstream.test/api/v1/admin"

USERS = [
    {
        "id": 1,
        "username": "a",
        "password": "p",
        "role": "admin",
        "name": "Alice Admin",
        "email": "alice@example.com",
    },
    {
        "id": 2,
        "username": "viewer",
        "password": "secret",
        "role": "viewer",
        "name": "Victor Viewer",
        "email": "victor@example.com",
    },
]


def session_cookie_for(username: str) -> str:
    row = next(u for u in USERS if u["username"] == username)
    user = PublicUser.model_validate({k: v for k, v in row.items() if k != "password"})
    return create_session_token(user)


def make_record(
    subscription_id: str,
    *,
    shop_id: str = "S1",
    commission_amount: str = "10.00",
    amount: str = "100.00",
    status: Optional[str] = "completed",
    subscription_type: str = "first_time",
    created_at: str = "2024-06-05T10:00:00Z",
) -> Dict[str, Any]:
    return {
        "subscription_id": subscription_id,
        "shop_id": shop_id,
        "shop_name": f"Shop {shop_id}",
        "plan_id": "P1",
        "promo_code_id": None,
        "renewal_promo_code_id": None,
        "amount": amount,
        "commission_amount": commission_amount,
        "status": status,
        "created_at": created_at,
        "subscription_type": subscription_type,
    }


def make_envelope(records: List[Dict[str, Any]], **overrides: Any) -> Dict[str, Any]:
    envelope = {
        "current_page": 1,
        "data": records,
        "first_page_url": f"{UPSTREAM_BASE_URL}/commission/special?page=1",
        "from": 1 if records else None,
        "last_page": 1,
        "last_page_url": f"{UPSTREAM_BASE_URL}/commission/special?page=1",
        "links": [],
        "next_page_url": None,
        "path": f"{UPSTREAM_BASE_URL}/commission/special",
        "per_page": 100,
        "prev_page_url": None,
        "to": len(records) if records else None,
        "total": len(records),
    }
    envelope.update(overrides)
    return envelope
