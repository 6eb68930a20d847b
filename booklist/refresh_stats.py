"""
Derived Statistics Refresh
==========================
Recomputes the columns derived from the rest of the dataset:

    percentiles  — recommendation_percentile on every book and person
    similar      — similar_books / similar_people caches that still point
                   at rows which no longer exist (merged or deleted)

Store writes fan out through ``bounded_map``.

Usage:
    python -m booklist.refresh_stats percentiles
    python -m booklist.refresh_stats similar
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from booklist.batch import bounded_map, compute_percentiles, write_updates
from booklist.store import create_store

# table → (recommendations column, cache column, RPC, RPC id argument)
TABLES = {
    "books": ("book_id", "similar_books", "get_similar_books_to_book_by_description", "book_id_arg"),
    "people": ("person_id", "similar_people", "get_similar_people_by_description_embedding", "person_id_arg"),
}

TOP_N = 5


# ─── percentiles ────────────────────────────────────────────────────────────

async def refresh_percentiles(store, table: str) -> int:
    count_column = TABLES[table][0]
    counts = store.recommendation_counts(count_column)
    ids = [row["id"] for row in store.select_all(table, "id")]
    print(f"\n  [*] {table}: {len(ids)} rows, {len(counts)} with recommendations")

    percentiles = compute_percentiles(ids, counts)
    updates = {i: {"recommendation_percentile": p} for i, p in percentiles.items()}
    saved = await write_updates(store, table, updates, desc=f"{table} percentiles")

    print(f"  Top {TOP_N} most recommended {table}:")
    for rank, (row_id, n) in enumerate(counts.most_common(TOP_N), start=1):
        pct = percentiles.get(row_id)
        if pct is not None:
            print(f"    {rank}. {row_id}: {n} recommendations ({pct * 100:.1f}th percentile)")
    return saved


# ─── similar caches ─────────────────────────────────────────────────────────

def stale_cache_ids(rows: list[dict], cache_column: str, existing: set[str]) -> list[str]:
    """Ids of rows whose cached similar list references a missing id."""
    stale = []
    for row in rows:
        cached = row.get(cache_column)
        if not isinstance(cached, list):
            continue
        if any(isinstance(c, dict) and c.get("id") and c["id"] not in existing for c in cached):
            stale.append(row["id"])
    return stale


async def refresh_similar(store, table: str) -> int:
    _, cache_column, function, id_arg = TABLES[table]
    existing = {row["id"] for row in store.select_all(table, "id")}
    rows = store.select_all(
        table, f"id, {cache_column}",
        present=(cache_column, "description_embedding"),
    )
    stale = stale_cache_ids(rows, cache_column, existing)
    print(f"\n  [*] {table}: {len(rows)} cached, {len(stale)} with missing references")

    def _refresh(row_id):
        similar = store.rpc(function, {id_arg: row_id})
        store.update(table, row_id, {cache_column: similar})
        return True

    results = await bounded_map(stale, _refresh, desc=f"{table} similar")
    return sum(1 for r in results if r)


async def run(command: str) -> dict[str, int]:
    store = create_store()
    job = refresh_percentiles if command == "percentiles" else refresh_similar
    return {table: await job(store, table) for table in TABLES}


# ─── CLI entry-point ────────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(description="Refresh derived statistics")
    parser.add_argument("command", choices=["percentiles", "similar"])
    args = parser.parse_args()

    print("=" * 60)
    print(f"  Refresh stats: {args.command}")
    print("=" * 60)
    try:
        saved = asyncio.run(run(args.command))
    except Exception as e:
        print(f"\n[!] Refresh failed: {e}")
        sys.exit(1)

    print("\n" + "=" * 60)
    for table, n in saved.items():
        print(f"  [+] Updated {n} {table}")
    print("=" * 60)


if __name__ == "__main__":
    main()
