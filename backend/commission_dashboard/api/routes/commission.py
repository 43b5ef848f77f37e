# backend/commission_dashboard/api/routes/commission.py
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from commission_dashboard.api.deps.session import get_upstream_client
from commission_dashboard.core.errors import ValidationError
from commission_dashboard.schemas.commission import DashboardFilters
from commission_dashboard.services.commission_proxy import UpstreamCommissionClient

router = APIRouter(prefix="/commission", tags=["commission"])

MISSING_RANGE_MESSAGE = "from and to parameters are required"


@router.get("")
async def get_commission(
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    promo_id: Optional[str] = Query(None),
    upstream: UpstreamCommissionClient = Depends(get_upstream_client),
) -> Any:
    """
    Relay to {admin-api}/commission/special.

    200 -> upstream body as-is
    400 -> from/to missing
    404 -> {"error": "PROMO_NOT_FOUND"} when promo_id matched no rows
    500 -> upstream failed
    """
    if not (from_date or "").strip() or not (to_date or "").strip():
        raise ValidationError(MISSING_RANGE_MESSAGE)

    filters = DashboardFilters(from_date=from_date, to_date=to_date, promo_id=promo_id)
    return await upstream.fetch_special(filters)
