from __future__ import annotations

import math
from typing import Generic, List, Sequence, TypeVar, Union

T = TypeVar("T")

ELLIPSIS = "..."
WIDE_WINDOW = 5
NARROW_WINDOW = 3

PageToken = Union[int, str]


class Paginator(Generic[T]):
    """
    Fixed-size local pages over an in-memory list. Pages are 1-based and the
    current page is always clamped into range.
    """

    def __init__(self, items: Sequence[T] = (), page_size: int = 20, current_page: int = 1):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.page_size = page_size
        self._items: List[T] = list(items)
        self.current_page = 1
        self.go_to(current_page)

    @property
    def items(self) -> List[T]:
        return self._items

    def set_items(self, items: Sequence[T]) -> None:
        """Swap the list and go back to page 1 so a shorter list never lands on an empty page."""
        self._items = list(items)
        self.current_page = 1

    @property
    def total_items(self) -> int:
        return len(self._items)

    @property
    def total_pages(self) -> int:
        return math.ceil(len(self._items) / self.page_size)

    @property
    def last_page(self) -> int:
        return max(self.total_pages, 1)

    def go_to(self, page: int) -> int:
        self.current_page = min(max(int(page), 1), self.last_page)
        return self.current_page

    def next(self) -> int:
        return self.go_to(self.current_page + 1)

    def previous(self) -> int:
        return self.go_to(self.current_page - 1)

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def start_index(self) -> int:
        return (self.current_page - 1) * self.page_size

    @property
    def end_index(self) -> int:
        return min(self.start_index + self.page_size, len(self._items))

    @property
    def page_items(self) -> List[T]:
        return self._items[self.start_index:self.end_index]

    @property
    def show_controls(self) -> bool:
        return self.total_pages > 1

    @property
    def summary(self) -> str:
        if not self._items:
            return "Showing 0 of 0 entries"
        return f"Showing {self.start_index + 1} to {self.end_index} of {len(self._items)} entries"

    def page_numbers(self, max_visible: int = WIDE_WINDOW) -> List[PageToken]:
        return page_window(self.current_page, self.total_pages, max_visible)


def page_window(current: int, total: int, max_visible: int = WIDE_WINDOW) -> List[PageToken]:
    """
    Page-number buttons to render, with ELLIPSIS where pages are skipped.

    Wide layouts show current±1 between the first and last page; narrow
    layouts (max_visible < WIDE_WINDOW) show only the current page, pinned to
    page 2 / total-1 near the edges.
    """
    if total <= max_visible:
        return list(range(1, total + 1))

    pages: List[PageToken] = [1]

    if max_visible < WIDE_WINDOW:
        if current <= 2:
            start = end = 2
        elif current >= total - 1:
            start = end = total - 1
        else:
            start = end = current
    else:
        start = max(2, current - 1)
        end = min(total - 1, current + 1)

    if start > 2:
        pages.append(ELLIPSIS)
    pages.extend(range(start, end + 1))
    if end < total - 1:
        pages.append(ELLIPSIS)

    pages.append(total)
    return pages
