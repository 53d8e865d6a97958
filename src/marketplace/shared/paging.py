"""Pagination helpers shared by order listings and vendor views."""

import math
from collections.abc import Iterator

SCAN_BATCH_SIZE = 100


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if total else 0


def page_offset(page: int, page_size: int) -> int:
    return (max(page, 1) - 1) * page_size


def scan(query, batch_size: int = SCAN_BATCH_SIZE) -> Iterator:
    """Yield every record matching a Protean QuerySet, fetching in batches.

    QuerySets carry a default limit, so an unbounded read has to walk the
    result pages explicitly.
    """
    offset = 0
    while True:
        result = query.offset(offset).limit(batch_size).all()
        yield from result.items
        offset += batch_size
        if offset >= result.total:
            break
