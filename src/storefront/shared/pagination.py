"""Pagination over Protean querysets."""

import math
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
BATCH_SIZE = 100


@dataclass(frozen=True)
class Page:
    """One page of results plus the metadata the API reports alongside it."""

    items: list[Any] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    total: int = 0

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)

    def meta(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
        }


def paginate(queryset, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> Page:
    """Fetch a single page from ``queryset`` (1-based ``page``)."""
    page = max(page, 1)
    limit = max(limit, 1)
    result = queryset.offset((page - 1) * limit).limit(limit).all()
    return Page(items=list(result.items), page=page, limit=limit, total=result.total)


def iterate(queryset, batch_size: int = BATCH_SIZE) -> Iterator[Any]:
    """Yield every record matched by ``queryset``, fetching in batches."""
    offset = 0
    while True:
        result = queryset.offset(offset).limit(batch_size).all()
        yield from result.items
        offset += batch_size
        if not result.items or offset >= result.total:
            break
