from __future__ import annotations

import enum
import logging
from collections import OrderedDict
from typing import Dict, List, Optional

from commission_dashboard.core.config import settings
from commission_dashboard.core.errors import DashboardError
from commission_dashboard.dashboard.filters import FilterControls, default_filters
from commission_dashboard.dashboard.metrics import RECURRING_RULE, DashboardSummary, partition_records, summarize
from commission_dashboard.dashboard.notifications import Notification, notification_for
from commission_dashboard.dashboard.pagination import Paginator
from commission_dashboard.schemas.commission import ApiResponse, DashboardFilters, SubscriptionRecord
from commission_dashboard.services.commission_fetcher import CommissionFetcher

logger = logging.getLogger(__name__)

TAB_FIRST_TIME = "first-time"
TAB_RECURRING = "recurring"
TABS = (TAB_FIRST_TIME, TAB_RECURRING)

MAX_TRACKED_SESSIONS = 500
FETCH_FAILED_MESSAGE = "Failed to fetch commission data. Please try again."


class DashboardStatus(str, enum.Enum):
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    READY = "ready"


class DashboardState:
    """
    Everything one signed-in browser session sees on the dashboard.

    Fetches are fenced by sequence number: only the result of the most
    recently *issued* fetch is applied, whatever order results arrive in.
    """

    def __init__(self, filters: Optional[DashboardFilters] = None, page_size: Optional[int] = None):
        self.controls = FilterControls(filters or default_filters())
        self.page_size = page_size or settings.PAGE_SIZE

        self._seq = 0
        self.latest_seq = 0
        self.loading = False
        self.error: Optional[BaseException] = None
        self.response: Optional[ApiResponse] = None
        self.applied_filters: Optional[DashboardFilters] = None
        self._notification: Optional[Notification] = None

        self.records: List[SubscriptionRecord] = []
        self.summary: DashboardSummary = summarize([])
        self.active_tab = TAB_FIRST_TIME
        self.pages: Dict[str, Paginator[SubscriptionRecord]] = {
            TAB_FIRST_TIME: Paginator([], page_size=self.page_size),
            TAB_RECURRING: Paginator([], page_size=self.page_size),
        }

    # -----------------------------
    # Fetch lifecycle
    # -----------------------------
    def begin_fetch(self, filters: DashboardFilters) -> int:
        self._seq += 1
        self.latest_seq = self._seq
        self.loading = True
        self.error = None
        self.applied_filters = filters
        return self._seq

    def is_current(self, seq: int) -> bool:
        return seq == self.latest_seq

    def complete(self, seq: int, response: ApiResponse) -> bool:
        if not self.is_current(seq):
            logger.info("dashboard.stale_result_dropped", extra={"seq": seq, "latest_seq": self.latest_seq})
            return False

        self.loading = False
        self.error = None
        self.response = response
        self.records = list(response.data)
        self.summary = summarize(self.records)

        first_time, recurring = partition_records(self.records)
        self.pages[TAB_FIRST_TIME].set_items(first_time)
        self.pages[TAB_RECURRING].set_items(recurring)
        logger.info(
            "dashboard.loaded",
            extra={
                "seq": seq,
                "records": len(self.records),
                "first_time": len(first_time),
                "recurring": len(recurring),
                "recurring_rule": RECURRING_RULE,
            },
        )
        return True

    def fail(self, seq: int, error: BaseException) -> bool:
        if not self.is_current(seq):
            logger.info("dashboard.stale_error_dropped", extra={"seq": seq, "latest_seq": self.latest_seq})
            return False

        self.loading = False
        self.error = error
        self._notification = notification_for(error, self.applied_filters)
        return True

    @property
    def status(self) -> DashboardStatus:
        if self.loading:
            return DashboardStatus.LOADING
        if self.error is not None:
            return DashboardStatus.ERROR
        if not self.summary.has_data:
            return DashboardStatus.EMPTY
        return DashboardStatus.READY

    @property
    def error_message(self) -> str:
        if self.error is None:
            return ""
        if isinstance(self.error, DashboardError):
            return self.error.message
        # transport and decode failures carry internals not meant for operators
        return FETCH_FAILED_MESSAGE

    def pop_notification(self) -> Optional[Notification]:
        n, self._notification = self._notification, None
        return n

    # -----------------------------
    # Tabs / pages
    # -----------------------------
    def select_tab(self, tab: Optional[str]) -> str:
        if tab in TABS:
            self.active_tab = tab  # type: ignore[assignment]
        return self.active_tab

    @property
    def active_page(self) -> Paginator[SubscriptionRecord]:
        return self.pages[self.active_tab]

    def go_to_page(self, page: int) -> int:
        return self.active_page.go_to(page)


class DashboardController:
    """
    Wires the filter controls' Apply button to the fetcher and the state.
    """

    def __init__(self, state: DashboardState, fetcher: CommissionFetcher):
        self.state = state
        self.fetcher = fetcher

    async def _fetch(self, filters: DashboardFilters) -> bool:
        seq = self.state.begin_fetch(filters)
        try:
            response = await self.fetcher.fetch(filters)
        except Exception as e:  # every failure is shown to the operator, never fatal
            logger.warning(
                "dashboard.fetch_failed",
                extra={"seq": seq, "error_type": type(e).__name__, "error_message": str(e)},
            )
            return self.state.fail(seq, e)
        return self.state.complete(seq, response)

    async def apply(self) -> bool:
        return await self.state.controls.apply(self._fetch)

    async def retry(self) -> bool:
        filters = self.state.applied_filters or self.state.controls.snapshot()
        return await self._fetch(filters)


class SessionRegistry:
    """
    In-memory DashboardState per signed-in session, oldest evicted first.
    """

    def __init__(self, max_sessions: int = MAX_TRACKED_SESSIONS):
        self.max_sessions = max_sessions
        self._states: "OrderedDict[str, DashboardState]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, key: str) -> bool:
        return key in self._states

    def get_or_create(self, key: str) -> DashboardState:
        state = self._states.get(key)
        if state is None:
            state = DashboardState()
            self._states[key] = state
            while len(self._states) > self.max_sessions:
                self._states.popitem(last=False)
        else:
            self._states.move_to_end(key)
        return state

    def discard(self, key: Optional[str]) -> None:
        if key is not None:
            self._states.pop(key, None)
