"""Pagination: offset/limit window for change lists.

Invariants:
    - offset = results_per_page * (page - 1), limit = results_per_page
    - Pages start at 1; page < 1 is rejected
    - page_count is at least 1 so an empty list still renders page 1 of 1
    - An offset past MAX_OFFSET (signed 64-bit) yields an empty window, never
      a driver overflow
"""

from dataclasses import dataclass

from entity_admin.core.errors import InvalidPageError

RESULTS_PER_PAGE = 25

MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class PaginationOptions:
    offset: int
    limit: int


def get_pagination_options(
    page: int, results_per_page: int = RESULTS_PER_PAGE,
) -> PaginationOptions:
    """Offset/limit for a 1-based page number."""
    if page < 1:
        raise InvalidPageError(page)
    offset = results_per_page * (page - 1)
    if offset > MAX_OFFSET:
        return PaginationOptions(offset=0, limit=0)
    return PaginationOptions(offset=offset, limit=results_per_page)


def page_count(count: int, results_per_page: int = RESULTS_PER_PAGE) -> int:
    return max(1, -(-count // results_per_page))


def page_window(page: int, total_pages: int, radius: int = 2) -> list[int]:
    """Page numbers shown around the current page in the pager."""
    start = max(1, page - radius)
    end = min(total_pages, page + radius)
    return list(range(start, end + 1))
