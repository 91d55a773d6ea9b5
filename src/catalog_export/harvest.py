"""Exhaustive fetching over offset/limit paged endpoints."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Sequence

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int, int], Awaitable[Sequence[Any]]]


async def harvest_all(
    fetch_page: PageFetcher,
    page_size: int,
    label: str = "items",
) -> list[Any]:
    """
    Fetch every page from ``fetch_page(offset, limit)`` and concatenate them.

    Pages are requested from offset 0, advancing by ``page_size``. Harvesting
    stops at the first page holding fewer than ``page_size`` items, so a result
    count that is an exact multiple of ``page_size`` costs one extra request
    returning an empty page.

    Any failure while fetching a page propagates; nothing partial is returned.
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")

    results: list[Any] = []
    offset = 0
    while True:
        page = await fetch_page(offset, page_size)
        results.extend(page)
        if len(page) < page_size:
            break
        offset += page_size
        logger.debug("Fetched %d %s, continuing...", len(results), label)

    return results
