"""
Embedding backfill for rows created without vectors (e.g. scraped with the
embedding tier switched off).

Books need a description; title, author and description are each embedded
into their own column.  People need a description, which is embedded as
"<name>: <description>".

Usage:
    python -m booklist.embed_records books
    python -m booklist.embed_records people
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from tqdm import tqdm

from booklist.batch import write_updates
from booklist.embeddings import Embedder
from booklist.store import create_store


def plan_book_embeddings(books: list[dict], embedder: Embedder) -> dict[str, dict]:
    updates: dict[str, dict] = {}
    for book in tqdm(books, desc="Embedding books"):
        try:
            updates[book["id"]] = embedder.book_embeddings(
                book["title"], book["author"], book["description"]
            )
        except Exception as e:
            tqdm.write(f"  [!] {book['title']}: {e}")
    return updates


def plan_person_embeddings(people: list[dict], embedder: Embedder) -> dict[str, dict]:
    updates: dict[str, dict] = {}
    for person in tqdm(people, desc="Embedding people"):
        try:
            updates[person["id"]] = embedder.person_embeddings(
                person["full_name"], person["description"]
            )
        except Exception as e:
            tqdm.write(f"  [!] {person['full_name']}: {e}")
    return updates


async def embed_books(store, embedder: Embedder) -> tuple[int, int]:
    books = store.select_all(
        "books", "id, title, author, description",
        missing=("title_embedding",), present=("description",),
    )
    print(f"  [*] {len(books)} books without embeddings")
    updates = plan_book_embeddings(books, embedder)
    return await write_updates(store, "books", updates, desc="Saving books"), len(books)


async def embed_people(store, embedder: Embedder) -> tuple[int, int]:
    people = store.select_all(
        "people", "id, full_name, description",
        missing=("description_embedding",), present=("description",),
    )
    print(f"  [*] {len(people)} people without embeddings")
    updates = plan_person_embeddings(people, embedder)
    return await write_updates(store, "people", updates, desc="Saving people"), len(people)


def main():
    parser = argparse.ArgumentParser(description="Backfill embedding columns")
    parser.add_argument("table", choices=["books", "people"])
    args = parser.parse_args()

    print("=" * 60)
    print(f"  Embed records: {args.table}")
    print("=" * 60)

    job = embed_books if args.table == "books" else embed_people
    try:
        saved, total = asyncio.run(job(create_store(), Embedder()))
    except Exception as e:
        print(f"\n[!] Embedding failed: {e}")
        sys.exit(1)

    print(f"\n  [+] Embedded {saved}/{total} {args.table}")
    print("=" * 60)


if __name__ == "__main__":
    main()
