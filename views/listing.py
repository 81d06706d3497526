"""Search, category filter, sort and pagination for the business and audience lists."""

import math
from datetime import datetime, timezone
from typing import Callable, Generic, Sequence, TypeVar

from config import settings
from schemas import Audience, Business

T = TypeVar("T")

SORT_OPTIONS = ("name", "category", "recent")
ALL_CATEGORIES = "all"
PAGE_WINDOW = 5

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def page_window(current: int, total_pages: int, size: int = PAGE_WINDOW) -> list[int]:
    """Page numbers to show around ``current``: the first five near the start,
    the last five near the end, otherwise centred on the current page."""
    if total_pages <= 0:
        return []
    if total_pages <= size:
        return list(range(1, total_pages + 1))
    half = size // 2
    if current <= half + 1:
        start = 1
    elif current >= total_pages - half:
        start = total_pages - size + 1
    else:
        start = current - half
    return list(range(start, start + size))


def showing_range(page: int, page_size: int, total: int) -> tuple[int, int, int]:
    """``(first, last, total)`` for the "Showing a-b of n" line; ``(0, 0, 0)`` when empty."""
    if total <= 0:
        return (0, 0, 0)
    first = (page - 1) * page_size + 1
    last = min(page * page_size, total)
    return (first, last, total)


class ListView(Generic[T]):
    """Filter/sort/paginate a list of records held in memory.

    Subclasses say how to read a record's searchable text, category and
    timestamp; everything else is shared.
    """

    def __init__(self, items: Sequence[T] = (), page_size: int | None = None):
        self.items: list[T] = list(items)
        self.page_size = page_size or settings.page_size
        self.search = ""
        self.category = ALL_CATEGORIES
        self.sort_by = "name"
        self.page = 1

    # Hooks
    def _name(self, item: T) -> str:
        raise NotImplementedError

    def _search_fields(self, item: T) -> list[str]:
        return [self._name(item)]

    def _category(self, item: T) -> str:
        return ""

    def _created_at(self, item: T) -> datetime | None:
        return None

    # ── State changes ────────────────────────────────────

    def set_items(self, items: Sequence[T]) -> None:
        self.items = list(items)
        self.page = self._clamp(self.page)

    def set_search(self, term: str) -> None:
        self.search = term or ""
        self.page = 1

    def set_category(self, category: str) -> None:
        self.category = category or ALL_CATEGORIES
        self.page = 1

    def set_sort(self, sort_by: str) -> None:
        if sort_by not in SORT_OPTIONS:
            raise ValueError(f"Unknown sort option: {sort_by}")
        self.sort_by = sort_by

    def go_to(self, page: int) -> int:
        self.page = self._clamp(page)
        return self.page

    # ── Derived views ────────────────────────────────────

    @property
    def categories(self) -> list[str]:
        seen: list[str] = []
        for item in self.items:
            category = self._category(item)
            if category and category not in seen:
                seen.append(category)
        return seen

    @property
    def filtered(self) -> list[T]:
        term = self.search.strip().lower()
        result = []
        for item in self.items:
            if term and not any(term in (field or "").lower() for field in self._search_fields(item)):
                continue
            if self.category != ALL_CATEGORIES and self._category(item) != self.category:
                continue
            result.append(item)
        return self._sorted(result)

    def _sorted(self, items: list[T]) -> list[T]:
        key: Callable[[T], object]
        if self.sort_by == "category":
            key = lambda item: (self._category(item) or "").lower()
        elif self.sort_by == "recent":
            # Newest first; missing timestamps go last
            dated = [i for i in items if self._created_at(i) is not None]
            undated = [i for i in items if self._created_at(i) is None]
            return sorted(dated, key=lambda item: self._created_at(item) or _EPOCH, reverse=True) + undated
        else:
            key = lambda item: self._name(item).lower()
        return sorted(items, key=key)

    @property
    def total_pages(self) -> int:
        return math.ceil(len(self.filtered) / self.page_size)

    def _clamp(self, page: int) -> int:
        return max(1, min(int(page), max(self.total_pages, 1)))

    def page_items(self, page: int | None = None) -> list[T]:
        page = self._clamp(self.page if page is None else page)
        start = (page - 1) * self.page_size
        return self.filtered[start:start + self.page_size]

    def page_window(self) -> list[int]:
        return page_window(self.page, self.total_pages)

    def showing_range(self) -> tuple[int, int, int]:
        return showing_range(self.page, self.page_size, len(self.filtered))

    def snapshot(self, to_dict: Callable[[T], dict]) -> dict:
        first, last, total = self.showing_range()
        return {
            "items": [to_dict(item) for item in self.page_items()],
            "page": self.page,
            "total_pages": self.total_pages,
            "page_window": self.page_window(),
            "showing": {"first": first, "last": last, "total": total},
            "categories": self.categories,
            "search": self.search,
            "category": self.category,
            "sort_by": self.sort_by,
        }


class BusinessListView(ListView[Business]):
    def _name(self, item: Business) -> str:
        return item.name

    def _search_fields(self, item: Business) -> list[str]:
        return [item.name, item.description]

    def _category(self, item: Business) -> str:
        return item.industry_category

    def _created_at(self, item: Business) -> datetime | None:
        return item.created_at


class AudienceListView(ListView[Audience]):
    def _name(self, item: Audience) -> str:
        return item.name

    def _search_fields(self, item: Audience) -> list[str]:
        return [item.name, item.description, item.manual_description]

    def _created_at(self, item: Audience) -> datetime | None:
        return item.created_at
