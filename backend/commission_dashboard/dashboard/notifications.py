from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from commission_dashboard.core.errors import PromoNotFoundError, UpstreamHttpError
from commission_dashboard.schemas.commission import DashboardFilters


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: str = "default"


LOGGED_OUT = Notification(title="Logged Out", description="You have been successfully logged out.")


def notification_for(error: BaseException, filters: Optional[DashboardFilters] = None) -> Notification:
    if isinstance(error, PromoNotFoundError):
        promo_id = error.promo_id or (filters.promo_id if filters else None) or ""
        return Notification(
            title="Promo Not Found",
            description=f'Promo ID "{promo_id}" could not be found. Please check and try again.',
            variant="destructive",
        )
    if isinstance(error, UpstreamHttpError):
        return Notification(
            title="Network Error",
            description="Failed to connect to the server. Please check your connection and try again.",
            variant="destructive",
        )
    return Notification(
        title="Error",
        description="Failed to fetch commission data. Please try again.",
        variant="destructive",
    )
