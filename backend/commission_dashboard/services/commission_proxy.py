from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from commission_dashboard.core.config import settings
from commission_dashboard.core.errors import PromoNotFoundError, UnknownError, UpstreamHttpError
from commission_dashboard.schemas.commission import DashboardFilters

logger = logging.getLogger(__name__)

SPECIAL_COMMISSION_PATH = "/commission/special"
FETCH_FAILED_MESSAGE = "Failed to fetch commission data"


class UpstreamCommissionClient:
    """
    Stateless relay to the admin API's commission endpoint.
    Every call goes upstream; nothing is cached.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        fetch_all_pages: Optional[bool] = None,
        max_pages: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.UPSTREAM_API_BASE_URL_CLEAN).rstrip("/")
        self.timeout = httpx.Timeout(timeout if timeout is not None else settings.UPSTREAM_TIMEOUT_SECONDS)
        self.fetch_all_pages = settings.UPSTREAM_FETCH_ALL_PAGES if fetch_all_pages is None else fetch_all_pages
        self.max_pages = max_pages or settings.UPSTREAM_MAX_PAGES
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={"Content-Type": "application/json", "Cache-Control": "no-store"},
        )

    async def _get_page(self, client: httpx.AsyncClient, params: Dict[str, Any]) -> Any:
        try:
            response = await client.get(SPECIAL_COMMISSION_PATH, params=params)
        except httpx.HTTPError as e:
            logger.exception("commission.upstream_unreachable", extra={"params": params})
            raise UnknownError(FETCH_FAILED_MESSAGE) from e

        if not response.is_success:
            logger.error(
                "commission.upstream_status",
                extra={"params": params, "upstream_status": response.status_code},
            )
            raise UpstreamHttpError(response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            logger.exception("commission.upstream_bad_json", extra={"params": params})
            raise UnknownError(FETCH_FAILED_MESSAGE) from e

        return payload

    async def fetch_special(self, filters: DashboardFilters) -> Any:
        """
        Returns the upstream body untouched, except that an empty result for
        a given promo id means the promo does not exist. A body that is not an
        envelope (e.g. a bare list) is relayed as-is.
        """
        params: Dict[str, Any] = filters.to_query()

        async with self._client() as client:
            payload = await self._get_page(client, params)
            if self.fetch_all_pages and isinstance(payload, dict):
                payload = await self._collect_remaining_pages(client, params, payload)

        records = payload.get("data") if isinstance(payload, dict) else payload
        if filters.promo_id and not records:
            logger.info("commission.promo_not_found", extra={"promo_id": filters.promo_id})
            raise PromoNotFoundError(filters.promo_id)

        return payload

    async def _collect_remaining_pages(
        self,
        client: httpx.AsyncClient,
        params: Dict[str, Any],
        first: Dict[str, Any],
    ) -> Dict[str, Any]:
        last_page = _as_int(first.get("last_page")) or 1
        current = _as_int(first.get("current_page")) or 1
        if last_page <= current:
            return first

        stop = min(last_page, current + self.max_pages - 1)
        if stop < last_page:
            logger.warning(
                "commission.page_cap_reached",
                extra={"last_page": last_page, "max_pages": self.max_pages},
            )

        records: List[Any] = list(first.get("data") or [])
        for page in range(current + 1, stop + 1):
            payload = await self._get_page(client, {**params, "page": page})
            if isinstance(payload, dict):
                records.extend(payload.get("data") or [])

        return _merge_envelope(first, records)


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _merge_envelope(first: Dict[str, Any], records: List[Any]) -> Dict[str, Any]:
    """
    Rewrite the first page's envelope so it describes one complete page.
    """
    merged = dict(first)
    count = len(records)
    merged.update(
        {
            "data": records,
            "current_page": 1,
            "last_page": 1,
            "from": 1 if count else None,
            "to": count if count else None,
            "per_page": count,
            "next_page_url": None,
            "prev_page_url": None,
            "last_page_url": first.get("first_page_url"),
            "links": [],
        }
    )
    if merged.get("total") is None:
        merged["total"] = count
    return merged
