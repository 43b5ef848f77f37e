from __future__ import annotations

from typing import Optional

import httpx

from commission_dashboard.core.errors import PROMO_NOT_FOUND, PromoNotFoundError, UpstreamHttpError
from commission_dashboard.schemas.commission import ApiResponse, DashboardFilters

COMMISSION_ENDPOINT = "/api/commission"


class CommissionFetcher:
    """
    Client side of the commission proxy.

    404 + PROMO_NOT_FOUND -> PromoNotFoundError, any other non-2xx ->
    UpstreamHttpError("HTTP error: <status>"). Transport and decode errors
    are not translated.
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url
        self.transport = transport
        self.timeout = httpx.Timeout(timeout) if timeout is not None else httpx.Timeout(30.0)

    async def fetch(self, filters: DashboardFilters) -> ApiResponse:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            transport=self.transport,
            timeout=self.timeout,
            headers={"Cache-Control": "no-store"},
        ) as client:
            response = await client.get(COMMISSION_ENDPOINT, params=filters.to_query())

        if not response.is_success:
            if response.status_code == 404 and _error_marker(response) == PROMO_NOT_FOUND:
                raise PromoNotFoundError(filters.promo_id)
            raise UpstreamHttpError(response.status_code)

        body = response.json()
        if isinstance(body, list):
            # bare record list relayed without an envelope
            body = {"data": body}
        return ApiResponse.model_validate(body)


def _error_marker(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("error")
    return None
