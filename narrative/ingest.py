"""One-shot asynchronous loading of both catalogs.

Both sources are read concurrently. If either read fails the whole
ingestion is abandoned: the error is logged and an empty dataset is
returned. There is no retry.
"""

from __future__ import annotations

import asyncio
import io
import logging
from typing import List, Optional

import httpx
import pandas as pd

from narrative.config import is_url
from narrative.data import build_catalog, empty_catalog, read_source_csv

logger = logging.getLogger(__name__)

FETCH_TIMEOUT_SECONDS = 30.0


async def fetch_source(source: str, client: Optional[httpx.AsyncClient] = None) -> pd.DataFrame:
    """Read one raw catalog from a local path or an http(s) URL."""
    if not is_url(source):
        return await asyncio.to_thread(read_source_csv, source)
    if client is None:
        async with httpx.AsyncClient(timeout=FETCH_TIMEOUT_SECONDS) as own_client:
            return await fetch_source(source, own_client)
    resp = await client.get(source)
    resp.raise_for_status()
    return read_source_csv(io.StringIO(resp.text))


async def _cancel_pending(tasks: List[asyncio.Future]) -> None:
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


async def fetch_catalog(historical: str, modern: str, client: Optional[httpx.AsyncClient] = None) -> pd.DataFrame:
    """Fetch both catalogs together and build the base dataset."""
    if client is None:
        async with httpx.AsyncClient(timeout=FETCH_TIMEOUT_SECONDS) as own_client:
            return await fetch_catalog(historical, modern, own_client)
    tasks = [
        asyncio.ensure_future(fetch_source(historical, client)),
        asyncio.ensure_future(fetch_source(modern, client)),
    ]
    try:
        historical_rows, modern_rows = await asyncio.gather(*tasks)
    except (httpx.HTTPError, OSError, ValueError):
        logger.exception("catalog ingestion failed (historical=%s modern=%s)", historical, modern)
        await _cancel_pending(tasks)
        return empty_catalog()
    return build_catalog(historical_rows, modern_rows)


class IngestionHandle:
    """Cancellable handle on an in-flight catalog ingestion."""

    def __init__(self, task: "asyncio.Task[pd.DataFrame]") -> None:
        self._task = task

    def cancel(self) -> bool:
        return self._task.cancel()

    def done(self) -> bool:
        return self._task.done()

    def cancelled(self) -> bool:
        return self._task.cancelled()

    async def result(self) -> pd.DataFrame:
        # Shielded so a cancelled waiter does not cancel the ingestion itself.
        return await asyncio.shield(self._task)


def start_ingestion(historical: str, modern: str) -> IngestionHandle:
    """Schedule `fetch_catalog` on the running event loop."""
    task = asyncio.get_running_loop().create_task(fetch_catalog(historical, modern), name="catalog-ingestion")
    return IngestionHandle(task)
