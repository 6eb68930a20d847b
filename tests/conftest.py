"""
Shared fixtures: an in-memory stand-in for BooklistStore and a canned
prompt client, so resolver and script tests never touch the network.
"""

from collections import Counter

import pytest
from rapidfuzz import fuzz

from booklist.llm import GenreAndDescription
from booklist.normalize import basic_title


class FakeStore:
    """Implements the BooklistStore surface over plain dicts."""

    def __init__(self):
        self.tables = {"books": {}, "people": {}, "recommendations": {}}
        self.similar_candidates = None   # override for find_similar_books
        self.semantic_candidates = []    # returned by find_best_matching_book
        self.rpc_results = {}
        self.calls = Counter()

    # ── helpers ──

    def rows(self, table):
        return list(self.tables[table].values())

    def add(self, table, **row):
        self.tables[table][row["id"]] = dict(row)
        return row["id"]

    def select_all(self, table, columns="*", missing=(), present=(),
                   created_after=None, created_before=None, order=None):
        out = []
        for row in self.rows(table):
            if any(row.get(c) is not None for c in missing):
                continue
            if any(row.get(c) is None for c in present):
                continue
            if created_after and (row.get("created_at") or "") < created_after:
                continue
            if created_before and (row.get("created_at") or "") >= created_before:
                continue
            out.append(dict(row))
        return out

    def update(self, table, row_id, values):
        self.calls["update"] += 1
        self.tables[table][row_id].update(values)

    def rpc(self, function, params=None):
        return self.rpc_results.get(function)

    # ── books ──

    def find_book(self, title, author):
        self.calls["find_book"] += 1
        for row in self.rows("books"):
            if row["title"] == title and row["author"] == author:
                return row
        return None

    def find_similar_books(self, title, author):
        self.calls["find_similar_books"] += 1
        if self.similar_candidates is not None:
            return self.similar_candidates
        out = []
        for row in self.rows("books"):
            out.append({
                "id": row["id"],
                "title": row["title"],
                "author": row["author"],
                "title_similarity": fuzz.ratio(basic_title(row["title"]).lower(), title.lower()) / 100,
                "author_similarity": fuzz.ratio(row["author"].lower(), author.lower()) / 100,
            })
        return out

    def find_best_matching_book(self, title_embedding, author_embedding):
        self.calls["find_best_matching_book"] += 1
        return self.semantic_candidates

    def insert_book(self, row):
        self.calls["insert_book"] += 1
        existing = self.find_book(row["title"], row["author"])
        if existing:
            return existing["id"]
        return self.add("books", **row)

    # ── people ──

    def find_person(self, full_name):
        for row in self.rows("people"):
            if row["full_name"] == full_name:
                return row
        return None

    def search_people(self, term, limit=25):
        return [r for r in self.rows("people") if term.lower() in r["full_name"].lower()][:limit]

    def insert_person(self, row):
        self.calls["insert_person"] += 1
        existing = self.find_person(row["full_name"])
        if existing:
            return existing["id"]
        return self.add("people", **row)

    # ── recommendations ──

    def find_recommendation(self, book_id, person_id, source):
        for row in self.rows("recommendations"):
            if (row["book_id"], row["person_id"], row["source"]) == (book_id, person_id, source):
                return row
        return None

    def insert_recommendation(self, row):
        existing = self.find_recommendation(row["book_id"], row["person_id"], row["source"])
        if existing:
            return existing["id"]
        return self.add("recommendations", **row)

    def recommendation_counts(self, column):
        return Counter(r[column] for r in self.rows("recommendations") if r.get(column))


class FakePrompts:
    """Canned answers for every prompt, recording what was asked."""

    def __init__(self, person_type="Author", genre=None, description="A book."):
        self.person_type = person_type
        self.genre = genre or ["Fiction"]
        self.description = description
        self.asked = []

    def categorize_person(self, full_name):
        self.asked.append(("categorize_person", full_name))
        return self.person_type

    def genre_and_description(self, title, author):
        self.asked.append(("genre_and_description", title, author))
        return GenreAndDescription(genre=self.genre, description=self.description)

    def sanitize_title(self, title):
        self.asked.append(("sanitize_title", title))
        return title

    def describe_person(self, full_name, person_type):
        self.asked.append(("describe_person", full_name, person_type))
        return f"{full_name} is a well-known {person_type}."


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def prompts():
    return FakePrompts()
