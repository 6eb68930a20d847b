"""
Batch maintenance helpers: a bounded-concurrency parallel map and the
percentile ranking used for recommendation counts.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Iterable

import numpy as np
from tqdm import tqdm

from booklist import config


async def bounded_map(
    items: Iterable[Any],
    fn: Callable[[Any], Any],
    concurrency: int = config.MAX_CONCURRENT,
    desc: str = "",
) -> list[Any]:
    """
    Apply *fn* to every item with at most *concurrency* calls in flight.

    Synchronous functions run in worker threads.  A failing item is reported
    and yields ``None``; the rest of the batch carries on.  Results keep the
    input order.
    """
    items = list(items)
    sem = asyncio.Semaphore(concurrency)
    bar = tqdm(total=len(items), desc=desc, leave=False)

    async def _run(item):
        async with sem:
            try:
                if inspect.iscoroutinefunction(fn):
                    return await fn(item)
                return await asyncio.to_thread(fn, item)
            except Exception as e:
                tqdm.write(f"    [!] {desc or 'item'} {item!r} failed: {e}")
                return None
            finally:
                bar.update(1)

    try:
        return list(await asyncio.gather(*(_run(item) for item in items)))
    finally:
        bar.close()


def compute_percentiles(ids: list[str], counts: dict[str, int]) -> dict[str, float]:
    """
    Rank each id by its count among all ids (ids missing from *counts* have 0).

    The percentile is the position of the first strictly greater count in the
    sorted list of all counts divided by the number of ids, or 1.0 when no
    count is greater.
    """
    if not ids:
        return {}
    sorted_counts = np.sort(np.array([counts.get(i, 0) for i in ids]))
    total = len(sorted_counts)
    percentiles = {}
    for i in ids:
        position = int(np.searchsorted(sorted_counts, counts.get(i, 0), side="right"))
        percentiles[i] = 1.0 if position == total else position / total
    return percentiles


async def write_updates(store, table: str, updates: dict[str, dict], desc: str = "") -> int:
    """Apply ``{row_id: values}`` updates concurrently; returns how many succeeded."""

    def _write(item):
        row_id, values = item
        store.update(table, row_id, values)
        return True

    results = await bounded_map(updates.items(), _write, desc=desc or f"Updating {table}")
    return sum(1 for r in results if r)
