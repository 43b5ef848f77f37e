# backend/commission_dashboard/schemas/commission.py
from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    v = str(value).strip()
    return v or None


class SubscriptionRecord(BaseModel):
    """
    One row of commission activity. Money stays a decimal string on the wire.
    Every field may be null upstream; a row with gaps is still shown.
    """

    model_config = ConfigDict(extra="allow")

    subscription_id: Optional[str] = None
    shop_id: Optional[str] = None
    shop_name: Optional[str] = None
    plan_id: Optional[str] = None
    promo_code_id: Optional[str] = None
    renewal_promo_code_id: Optional[str] = None
    amount: Optional[str] = None
    commission_amount: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    subscription_type: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_str(cls, v):
        # upstream emits ids and amounts as numbers at times
        if v is None or isinstance(v, str):
            return v
        return str(v)


class PageLink(BaseModel):
    url: Optional[str] = None
    label: Optional[str] = None
    active: bool = False


class ApiResponse(BaseModel):
    """
    Paginated envelope returned by the upstream admin API.
    Pagination metadata is carried along but never used to navigate.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    current_page: Optional[int] = None
    data: List[SubscriptionRecord] = Field(default_factory=list)
    first_page_url: Optional[str] = None
    from_: Optional[int] = Field(default=None, alias="from")
    last_page: Optional[int] = None
    last_page_url: Optional[str] = None
    links: List[PageLink] = Field(default_factory=list)
    next_page_url: Optional[str] = None
    path: Optional[str] = None
    per_page: Optional[int] = None
    prev_page_url: Optional[str] = None
    to: Optional[int] = None
    total: Optional[int] = None

    @field_validator("data", mode="before")
    @classmethod
    def null_data_is_empty(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            rows = [row for row in v if isinstance(row, dict)]
            if len(rows) != len(v):
                logger.warning("commission.rows_skipped", extra={"skipped": len(v) - len(rows)})
            return rows
        return v


class DashboardFilters(BaseModel):
    """
    `from` and `to` are inclusive YYYY-MM-DD strings. Python names are
    from_date / to_date; the wire names are the aliases.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_date: str = Field(alias="from")
    to_date: str = Field(alias="to")
    promo_id: Optional[str] = None

    @field_validator("from_date", "to_date")
    @classmethod
    def require_value(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("from and to parameters are required")
        return v

    @field_validator("promo_id", mode="before")
    @classmethod
    def normalize_promo_id(cls, v):
        return _blank_to_none(v)

    def to_query(self) -> dict[str, str]:
        params = {"from": self.from_date, "to": self.to_date}
        if self.promo_id:
            params["promo_id"] = self.promo_id
        return params
