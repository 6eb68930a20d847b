"""
Record Cleanup
==============
Re-applies the canonical normalization rules to rows already in the store.
Each subcommand only writes rows whose value actually changes.

    titles   — normalize_title on every book title (optionally after an
               LLM "sanitize title" pass)
    genres   — restrict every book's genre list to the standard tags
    names    — strip labels / trailing roles from people's names
    twitter  — canonicalize Twitter/X profile URLs to https://x.com/<user>

Usage:
    python -m booklist.clean_records titles
    python -m booklist.clean_records titles --llm
    python -m booklist.clean_records genres
    python -m booklist.clean_records names --since 2025-01-01 --until 2025-02-01
    python -m booklist.clean_records twitter
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from booklist.batch import write_updates
from booklist.llm import PromptClient
from booklist.normalize import (
    clean_person_name,
    filter_genres,
    is_twitter_url,
    normalize_title,
    sanitize_twitter_url,
)
from booklist.store import create_store


# ─── Change planning ────────────────────────────────────────────────────────

def plan_title_updates(books: list[dict], prompts: PromptClient | None = None) -> dict[str, dict]:
    """Map book id → ``{"title": new}`` for every title that changes."""
    updates: dict[str, dict] = {}
    for book in books:
        original = book.get("title") or ""
        if not original:
            continue
        title = original
        if prompts is not None:
            try:
                title = prompts.sanitize_title(title) or title
            except Exception as e:
                print(f"  [!] Sanitize failed for \"{original}\": {e}")
                continue
        title = normalize_title(title)
        if title != original:
            print(f"  [+] \"{original}\" → \"{title}\"")
            updates[book["id"]] = {"title": title}
    return updates


def plan_genre_updates(books: list[dict]) -> dict[str, dict]:
    updates: dict[str, dict] = {}
    for book in books:
        genres = filter_genres(book.get("genre"))
        if genres != (book.get("genre") or []):
            updates[book["id"]] = {"genre": genres}
    return updates


def plan_name_updates(people: list[dict]) -> dict[str, dict]:
    updates: dict[str, dict] = {}
    for person in people:
        original = person.get("full_name") or ""
        name = clean_person_name(original)
        if name and name != original:
            print(f"  [+] \"{original}\" → \"{name}\"")
            updates[person["id"]] = {"full_name": name}
    return updates


def plan_twitter_updates(people: list[dict]) -> dict[str, dict]:
    updates: dict[str, dict] = {}
    for person in people:
        url = person.get("url")
        if not is_twitter_url(url):
            continue
        cleaned = sanitize_twitter_url(url)
        if cleaned != url:
            print(f"  [+] {person.get('full_name')}: {url} → {cleaned}")
            updates[person["id"]] = {"url": cleaned}
    return updates


# ─── Subcommands ────────────────────────────────────────────────────────────

async def clean_titles(store, prompts: PromptClient | None = None) -> int:
    books = store.select_all("books", "id, title")
    print(f"  [*] Checking {len(books)} titles")
    updates = plan_title_updates(books, prompts)
    return await write_updates(store, "books", updates, desc="Titles")


async def clean_genres(store) -> int:
    books = store.select_all("books", "id, genre")
    print(f"  [*] Checking {len(books)} genre lists")
    updates = plan_genre_updates(books)
    return await write_updates(store, "books", updates, desc="Genres")


async def clean_names(store, since: str | None = None, until: str | None = None) -> int:
    people = store.select_all(
        "people", "id, full_name", created_after=since, created_before=until,
    )
    print(f"  [*] Checking {len(people)} names")
    updates = plan_name_updates(people)
    return await write_updates(store, "people", updates, desc="Names")


async def clean_twitter(store) -> int:
    people = store.select_all("people", "id, full_name, url", present=("url",))
    print(f"  [*] Checking {len(people)} profile URLs")
    updates = plan_twitter_updates(people)
    return await write_updates(store, "people", updates, desc="Twitter URLs")


async def run(args) -> int:
    store = create_store()
    if args.command == "titles":
        return await clean_titles(store, PromptClient() if args.llm else None)
    if args.command == "genres":
        return await clean_genres(store)
    if args.command == "names":
        return await clean_names(store, since=args.since, until=args.until)
    return await clean_twitter(store)


# ─── CLI entry-point ────────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(description="Normalize records already in the store")
    sub = parser.add_subparsers(dest="command", required=True)

    titles = sub.add_parser("titles", help="Title-case and tidy book titles")
    titles.add_argument("--llm", action="store_true", help="Run the LLM sanitize pass first")
    sub.add_parser("genres", help="Filter genres to the standard tags")
    names = sub.add_parser("names", help="Strip labels and roles from people's names")
    names.add_argument("--since", help="Only people created on/after this ISO date")
    names.add_argument("--until", help="Only people created before this ISO date")
    sub.add_parser("twitter", help="Canonicalize Twitter/X profile URLs")

    args = parser.parse_args()

    print("=" * 60)
    print(f"  Clean records: {args.command}")
    print("=" * 60)
    try:
        updated = asyncio.run(run(args))
    except Exception as e:
        print(f"\n[!] Cleanup failed: {e}")
        sys.exit(1)
    print(f"\n  [+] Updated {updated} rows")
    print("=" * 60)


if __name__ == "__main__":
    main()
