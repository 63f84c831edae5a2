"""Pagination helpers over Protean querysets."""

import math
from dataclasses import dataclass, field
from typing import Any

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class Page:
    items: list[Any] = field(default_factory=list)
    total: int = 0
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


def normalize_pagination(page: int | None, limit: int | None) -> tuple[int, int]:
    page = page if page and page > 0 else DEFAULT_PAGE
    limit = limit if limit and limit > 0 else DEFAULT_LIMIT
    return page, min(limit, MAX_LIMIT)


def fetch_page(queryset, page: int | None = None, limit: int | None = None) -> Page:
    page, limit = normalize_pagination(page, limit)
    results = queryset.offset((page - 1) * limit).limit(limit).all()
    return Page(items=list(results.items), total=results.total, page=page, limit=limit)


def iter_all(queryset, batch_size: int = MAX_LIMIT):
    """Yield every record matching ``queryset``, fetching ``batch_size`` rows at a time."""
    offset = 0
    while True:
        results = queryset.offset(offset).limit(batch_size).all()
        yield from results.items
        offset += batch_size
        if offset >= results.total or not results.items:
            break
