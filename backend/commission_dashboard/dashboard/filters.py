from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional

from commission_dashboard.core.config import settings
from commission_dashboard.schemas.commission import DashboardFilters

DATE_FORMAT = "%Y-%m-%d"
DEFAULT_RANGE_DAYS = 30


def to_date_string(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value.strip()[:10], DATE_FORMAT).date()
    except ValueError:
        return None


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def date_label(value: Optional[str]) -> str:
    """'2024-06-01' -> 'June 1st, 2024'; empty or invalid -> 'Pick a date'."""
    parsed = parse_date(value)
    if parsed is None:
        return "Pick a date"
    return f"{parsed:%B} {_ordinal(parsed.day)}, {parsed.year}"


def default_filters(today: Optional[date] = None) -> DashboardFilters:
    today = today or date.today()
    return DashboardFilters(
        from_date=settings.DEFAULT_FILTER_FROM or to_date_string(today - timedelta(days=DEFAULT_RANGE_DAYS)),
        to_date=settings.DEFAULT_FILTER_TO or to_date_string(today),
        promo_id=settings.DEFAULT_PROMO_ID,
    )


@dataclass
class FilterDraft:
    from_date: str
    to_date: str
    promo_id: Optional[str] = None


@dataclass
class FilterControls:
    """
    Date pickers plus an Apply button. Each setter touches only its own field
    of the draft; nothing is fetched until apply().
    """

    filters: DashboardFilters
    on_apply: Optional[Callable[[DashboardFilters], Any]] = None
    draft: FilterDraft = field(init=False)

    def __post_init__(self) -> None:
        self.draft = FilterDraft(
            from_date=self.filters.from_date,
            to_date=self.filters.to_date,
            promo_id=self.filters.promo_id,
        )

    def set_from(self, value: Optional[date]) -> None:
        if value is not None:
            self.draft.from_date = to_date_string(value)

    def set_to(self, value: Optional[date]) -> None:
        if value is not None:
            self.draft.to_date = to_date_string(value)

    def set_promo_id(self, value: Optional[str]) -> None:
        self.draft.promo_id = (value or "").strip() or None

    def snapshot(self) -> DashboardFilters:
        return DashboardFilters(
            from_date=self.draft.from_date,
            to_date=self.draft.to_date,
            promo_id=self.draft.promo_id,
        )

    def apply(self, on_apply: Optional[Callable[[DashboardFilters], Any]] = None):
        """
        Commit the draft and hand it to the callback (the one passed here, else
        self.on_apply); returns whatever the callback returns.
        """
        self.filters = self.snapshot()
        callback = on_apply or self.on_apply
        if callback is None:
            return self.filters
        return callback(self.filters)

    @property
    def from_label(self) -> str:
        return date_label(self.draft.from_date)

    @property
    def to_label(self) -> str:
        return date_label(self.draft.to_date)
