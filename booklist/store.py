"""
Booklist Store
==============
Thin wrapper around a Supabase client exposing exactly the reads and writes
the scripts need.  The heavy similarity math lives in Postgres functions
(``find_similar_books`` for trigram matching, ``get_best_matching_book`` for
cosine matching over stored embeddings); this module only shuttles rows.

Uniqueness of books (title + author), people (full name) and recommendations
(book + person + source) is enforced here, not by the schema: every insert
first looks the key up and only inserts when nothing holds it.

    store = create_store()
    book = store.find_book("Dune", "Frank Herbert")
"""

from __future__ import annotations

import re
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Any

from supabase import Client, create_client

from booklist import config

PAGE_SIZE = 1000  # PostgREST caps a single response at 1000 rows


class StoreError(Exception):
    """A write returned no row and no existing row could be found."""


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def vector_literal(vector: list[float]) -> str:
    """Serialize an embedding the way pgvector parses RPC text arguments."""
    return "[" + ",".join(repr(float(v)) for v in vector) + "]"


def like_escape(term: str) -> str:
    """Escape LIKE wildcards so *term* matches literally."""
    return re.sub(r"([\\%_])", r"\\\1", term)


def create_store() -> "BooklistStore":
    url = config.require_env("SUPABASE_URL", config.SUPABASE_URL)
    key = config.require_env("SUPABASE_KEY", config.SUPABASE_KEY)
    return BooklistStore(create_client(url, key))


class BooklistStore:
    def __init__(self, client: Client):
        self.client = client

    # ── generic helpers ─────────────────────────────────────────────────

    def _first(self, query) -> dict | None:
        rows = query.limit(1).execute().data
        return rows[0] if rows else None

    def select_all(
        self,
        table: str,
        columns: str = "*",
        missing: tuple[str, ...] = (),
        present: tuple[str, ...] = (),
        created_after: str | None = None,
        created_before: str | None = None,
        order: str = "id",
    ) -> list[dict]:
        """
        Read every row of *table*, paging past the PostgREST row cap.

        ``missing`` columns must be NULL, ``present`` columns must not be.
        """
        rows: list[dict] = []
        start = 0
        while True:
            query = self.client.table(table).select(columns)
            for col in missing:
                query = query.is_(col, "null")
            for col in present:
                query = query.not_.is_(col, "null")
            if created_after:
                query = query.gte("created_at", created_after)
            if created_before:
                query = query.lt("created_at", created_before)
            # OFFSET pages are only stable under a total order
            query = query.order(order)
            page = query.range(start, start + PAGE_SIZE - 1).execute().data or []
            rows.extend(page)
            if len(page) < PAGE_SIZE:
                return rows
            start += PAGE_SIZE

    def update(self, table: str, row_id: str, values: dict[str, Any]) -> None:
        values = {**values, "updated_at": utc_now()}
        self.client.table(table).update(values).eq("id", row_id).execute()

    def rpc(self, function: str, params: dict[str, Any] | None = None) -> Any:
        return self.client.rpc(function, params or {}).execute().data

    def _insert(self, table: str, row: dict, lookup) -> str:
        """Return the id of the row already holding *row*'s key, else insert it."""
        existing = lookup()
        if existing:
            return existing["id"]
        data = self.client.table(table).insert(row).execute().data
        if data:
            return data[0]["id"]
        raise StoreError(f"Insert into {table} returned no row for {row.get('id')}")

    # ── books ───────────────────────────────────────────────────────────

    def find_book(self, title: str, author: str) -> dict | None:
        return self._first(
            self.client.table("books")
            .select("id, title, author")
            .eq("title", title)
            .eq("author", author)
        )

    def find_similar_books(self, title: str, author: str) -> list[dict]:
        """Trigram candidates: id, title, author, title_similarity, author_similarity."""
        return self.rpc("find_similar_books", {"p_title": title, "p_author": author}) or []

    def find_best_matching_book(
        self, title_embedding: list[float], author_embedding: list[float]
    ) -> list[dict]:
        """Cosine candidates with the same shape as :meth:`find_similar_books`."""
        return self.rpc(
            "get_best_matching_book",
            {
                "p_title_embedding": vector_literal(title_embedding),
                "p_author_embedding": vector_literal(author_embedding),
            },
        ) or []

    def insert_book(self, row: dict) -> str:
        return self._insert(
            "books", row,
            lambda: self.find_book(row["title"], row["author"]),
        )

    # ── people ──────────────────────────────────────────────────────────

    def find_person(self, full_name: str) -> dict | None:
        return self._first(
            self.client.table("people")
            .select("id, full_name, type, url")
            .eq("full_name", full_name)
        )

    def search_people(self, term: str, limit: int = 25) -> list[dict]:
        """Case-insensitive substring search on full_name."""
        return (
            self.client.table("people")
            .select("id, full_name, type, url")
            .ilike("full_name", f"%{like_escape(term)}%")
            .limit(limit)
            .execute()
            .data
        ) or []

    def insert_person(self, row: dict) -> str:
        return self._insert(
            "people", row,
            lambda: self.find_person(row["full_name"]),
        )

    # ── recommendations ─────────────────────────────────────────────────

    def find_recommendation(self, book_id: str, person_id: str, source: str) -> dict | None:
        return self._first(
            self.client.table("recommendations")
            .select("id")
            .eq("book_id", book_id)
            .eq("person_id", person_id)
            .eq("source", source)
        )

    def insert_recommendation(self, row: dict) -> str:
        return self._insert(
            "recommendations", row,
            lambda: self.find_recommendation(row["book_id"], row["person_id"], row["source"]),
        )

    def recommendation_counts(self, column: str) -> Counter:
        """Number of recommendations per ``book_id`` or ``person_id``."""
        rows = self.select_all("recommendations", column, present=(column,))
        return Counter(r[column] for r in rows)
