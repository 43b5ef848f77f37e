from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from commission_dashboard.core.config import settings
from commission_dashboard.schemas.commission import SubscriptionRecord

FIRST_TIME = "first_time"
RENEWED = "renewed"

# Everything that is not first-time is recurring; no record is dropped.
RECURRING_RULE = "not-first-time"

STATUS_VARIANTS = {
    "completed": "default",
    "pending": "secondary",
    "failed": "destructive",
}


def _parse_amount(value: Optional[str]) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return math.nan


def is_first_time(record: SubscriptionRecord) -> bool:
    return record.subscription_type == FIRST_TIME


def partition_records(
    records: Sequence[SubscriptionRecord],
    *,
    strict_renewals: bool = False,
) -> Tuple[List[SubscriptionRecord], List[SubscriptionRecord]]:
    """
    Split into (first_time, recurring).

    strict_renewals=True only counts subscription_type == "renewed" as
    recurring, which drops any other type from both buckets.
    """
    first_time = [r for r in records if is_first_time(r)]
    if strict_renewals:
        recurring = [r for r in records if r.subscription_type == RENEWED]
    else:
        recurring = [r for r in records if not is_first_time(r)]
    return first_time, recurring


def total_commission(records: Iterable[SubscriptionRecord]) -> float:
    return sum((_parse_amount(r.commission_amount) for r in records), 0.0)


def is_completed(record: SubscriptionRecord) -> bool:
    return bool(record.status) and record.status.lower() == "completed"


@dataclass(frozen=True)
class DashboardSummary:
    total_commission: float
    total_transactions: int
    completed_transactions: int
    unique_shops: int
    first_time_count: int
    recurring_count: int

    @property
    def has_data(self) -> bool:
        return self.total_transactions > 0

    @property
    def is_numeric(self) -> bool:
        return not math.isnan(self.total_commission)

    @property
    def completion_rate(self) -> Optional[int]:
        if not self.has_data:
            return None
        # round-half-up, same as Math.round for non-negative values
        return int(math.floor(self.completed_transactions / self.total_transactions * 100 + 0.5))

    @property
    def completion_rate_label(self) -> str:
        rate = self.completion_rate
        if rate is None:
            return "Not enough data"
        return f"{rate}% completion rate"


def summarize(records: Sequence[SubscriptionRecord]) -> DashboardSummary:
    first_time, recurring = partition_records(records)
    return DashboardSummary(
        total_commission=total_commission(records),
        total_transactions=len(records),
        completed_transactions=sum(1 for r in records if is_completed(r)),
        unique_shops=len({r.shop_id for r in records if r.shop_id is not None}),
        first_time_count=len(first_time),
        recurring_count=len(recurring),
    )


# -----------------------------
# Display formatting
# -----------------------------
def format_currency(amount: float, symbol: Optional[str] = None) -> str:
    symbol = settings.CURRENCY_SYMBOL if symbol is None else symbol
    if math.isnan(amount) or math.isinf(amount):
        return f"{symbol}—"
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_amount(value: Optional[str]) -> str:
    return format_currency(_parse_amount(value))


def format_date(value: Optional[str]) -> str:
    """'2024-06-05T10:00:00Z' -> 'Jun 5, 2024'. Unparsable text is shown as-is."""
    if not value:
        return ""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text.replace(" ", "T", 1))
    except ValueError:
        return value
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def format_subscription_type(value: Optional[str]) -> str:
    if not value:
        return ""
    return value.replace("_", " ", 1).capitalize()


def status_variant(status: Optional[str]) -> str:
    if not status:
        return "outline"
    return STATUS_VARIANTS.get(status.lower(), "outline")
