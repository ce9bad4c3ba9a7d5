"""Accumulate items across a limit/offset paged listing call."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from jira_bridge.core.domain.paging import Page, PageCursor

logger = structlog.get_logger()

SERVER_MAX_PAGE_SIZE = 100

PageFetcher = Callable[[int, int], Awaitable[Page]]


async def collect_paged(
    fetch_page: PageFetcher,
    limit: int,
    page_cap: int = SERVER_MAX_PAGE_SIZE,
) -> list[Any]:
    """Call ``fetch_page(offset, page_size)`` until ``limit`` items are gathered.

    Stops early on an empty page, or once the accumulated count reaches the
    total a page reports. The offset always advances by a full page so the
    loop runs at most ``ceil(limit / page_size)`` times.
    """
    if limit <= 0:
        return []

    cursor = PageCursor.start(limit, page_cap)
    collected: list[Any] = []
    fetches = 0
    while len(collected) < limit:
        page = await fetch_page(cursor.offset, cursor.page_size)
        fetches += 1
        if not page.items:
            break
        remaining = limit - len(collected)
        collected.extend(page.items[:remaining])
        if page.total is not None and len(collected) >= page.total:
            break
        cursor = cursor.advance()

    logger.debug("Paged collection finished", fetches=fetches, collected=len(collected), limit=limit)
    return collected
