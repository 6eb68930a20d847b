"""
Book Enrichment
===============
Backfills missing fields on book rows.

    covers  — look each book up on Open Library and store the first cover
              that actually exists (ISBN cover first, then the work's OLID
              cover)
    amazon  — web search for the book's amazon.com page

Open Library has no API key and asks clients to stay gentle, so cover
lookups run through a small semaphore with a delay before every request.

Usage:
    python -m booklist.enrich_books covers
    python -m booklist.enrich_books covers --concurrency 2
    python -m booklist.enrich_books amazon
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import aiohttp

from booklist.browser import browser_page, find_amazon_url
from booklist.store import create_store

# ─── Configuration ───────────────────────────────────────────────────────────

OPEN_LIBRARY_SEARCH = "https://openlibrary.org/search.json"
COVERS_URL = "https://covers.openlibrary.org/b/{kind}/{identifier}-{size}.jpg"
COVER_SIZE = "M"
MAX_CONCURRENT = 1
PER_REQUEST_DELAY = 1.0
REQUEST_TIMEOUT = 15
AMAZON_DELAY = 1.0

# Distinguishes a failed lookup from a book that has no cover
LOOKUP_FAILED = object()


# ─── Open Library lookups ───────────────────────────────────────────────────

async def search_open_library(
    session: aiohttp.ClientSession, title: str, author: str
) -> dict | None:
    """
    Return ``{"olid": ..., "isbn": ...}`` for the top search hit, or ``None``.
    Either identifier may be ``None``.
    """
    params = {"q": f"{title} {author}", "fields": "key,isbn"}
    async with session.get(
        OPEN_LIBRARY_SEARCH,
        params=params,
        timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT),
    ) as resp:
        if resp.status != 200:
            print(f"    [!] HTTP {resp.status} searching for: {title}")
            return None
        data = await resp.json()

    docs = data.get("docs") or []
    if not docs:
        return None
    top = docs[0]
    key = top.get("key") or ""
    isbns = top.get("isbn") or []
    return {
        "olid": key.rsplit("/", 1)[-1] or None,
        "isbn": isbns[0] if isbns else None,
    }


def cover_url(kind: str, identifier: str, size: str = COVER_SIZE) -> str:
    return COVERS_URL.format(kind=kind, identifier=identifier, size=size)


async def cover_exists(session: aiohttp.ClientSession, url: str) -> bool:
    """``default=false`` makes the covers API 404 instead of serving a blank."""
    async with session.get(
        url,
        params={"default": "false"},
        timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT),
    ) as resp:
        return resp.status == 200


async def find_cover(session: aiohttp.ClientSession, title: str, author: str) -> str | None:
    ids = await search_open_library(session, title, author)
    if not ids:
        return None
    for kind in ("isbn", "olid"):
        identifier = ids.get(kind)
        if not identifier:
            continue
        url = cover_url(kind, identifier)
        if await cover_exists(session, url):
            return url
    return None


async def fetch_single(
    session: aiohttp.ClientSession,
    book: dict,
    sem: asyncio.Semaphore,
):
    """Cover URL, ``None`` when no cover exists, ``LOOKUP_FAILED`` on error."""
    async with sem:
        await asyncio.sleep(PER_REQUEST_DELAY)
        try:
            return await find_cover(session, book["title"], book["author"])
        except Exception as e:
            print(f"    [!] Cover lookup failed for '{book['title']}': {e}")
            return LOOKUP_FAILED


async def fetch_batch(books: list[dict], max_concurrent: int = MAX_CONCURRENT) -> list[dict]:
    """Returns ``{"book": ..., "cover_url": ...}`` per book, in input order."""
    sem = asyncio.Semaphore(max_concurrent)
    async with aiohttp.ClientSession() as session:
        urls = await asyncio.gather(*(fetch_single(session, b, sem) for b in books))
    return [{"book": b, "cover_url": u} for b, u in zip(books, urls)]


# ─── Subcommands ────────────────────────────────────────────────────────────

async def enrich_covers(store, max_concurrent: int = MAX_CONCURRENT) -> dict:
    books = store.select_all("books", "id, title, author", missing=("cover_url",))
    print(f"  [*] {len(books)} books without a cover")

    stats = {"found": 0, "missing": 0, "failed": 0}
    for item in await fetch_batch(books, max_concurrent):
        book, url = item["book"], item["cover_url"]
        if url is LOOKUP_FAILED:
            stats["failed"] += 1
            continue
        if not url:
            stats["missing"] += 1
            print(f"  [-] No cover for: {book['title']}")
            continue
        try:
            store.update("books", book["id"], {"cover_url": url})
        except Exception as e:
            stats["failed"] += 1
            print(f"  [!] Could not save cover for '{book['title']}': {e}")
            continue
        stats["found"] += 1
        print(f"  [+] {book['title']}: {url}")
    return stats


async def enrich_amazon_links(store, page) -> dict:
    books = store.select_all("books", "id, title, author", missing=("amazon_url",))
    print(f"  [*] {len(books)} books without a purchase link")

    stats = {"found": 0, "missing": 0, "failed": 0}
    for i, book in enumerate(books, start=1):
        print(f"\n  [{i}/{len(books)}] {book['title']} — {book['author']}")
        try:
            url = await find_amazon_url(page, book["title"], book["author"])
            if url:
                store.update("books", book["id"], {"amazon_url": url})
        except Exception as e:
            stats["failed"] += 1
            print(f"    [!] {e}")
            continue
        if url:
            stats["found"] += 1
            print(f"    [+] {url}")
        else:
            stats["missing"] += 1
            print("    [-] No amazon link found")
        await asyncio.sleep(AMAZON_DELAY)
    return stats


async def run(args) -> dict:
    store = create_store()
    if args.command == "covers":
        return await enrich_covers(store, args.concurrency)
    async with browser_page() as page:
        return await enrich_amazon_links(store, page)


# ─── CLI entry-point ────────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(description="Backfill missing fields on books")
    sub = parser.add_subparsers(dest="command", required=True)
    covers = sub.add_parser("covers", help="Find cover images on Open Library")
    covers.add_argument(
        "--concurrency", type=int, default=MAX_CONCURRENT,
        help=f"Concurrent Open Library lookups (default: {MAX_CONCURRENT})",
    )
    sub.add_parser("amazon", help="Find amazon.com purchase links")
    args = parser.parse_args()

    print("=" * 60)
    print(f"  Enrich books: {args.command}")
    print("=" * 60)
    try:
        stats = asyncio.run(run(args))
    except Exception as e:
        print(f"\n[!] Enrichment failed: {e}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("  SUMMARY")
    print("=" * 60)
    print(f"  Found:     {stats['found']}")
    print(f"  Not found: {stats['missing']}")
    print(f"  Failed:    {stats['failed']}")
    print("=" * 60)


if __name__ == "__main__":
    main()
