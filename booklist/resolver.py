"""
Record Deduplication Resolver
=============================
Decides whether an incoming book or person already exists in the store
before anything new is written.

Books go through a tiered match:

  1. Exact     — normalized title + author equality
  2. Fuzzy     — trigram similarity over the subtitle-free title and the
                 cleaned author (computed by the store)
  3. Semantic  — cosine similarity over title / author embeddings
                 (only when an embedder is configured)
  4. Create    — LLM genre + description, purchase link, embeddings

People get exact full-name equality, then a fuzzy name match, then creation.

Fuzzy and semantic candidates must clear a title minimum and an author
minimum separately; a strong author score never carries a weak title, so
two books by the same author stay distinct.  Among the candidates that
clear both, the highest mean wins.

All collaborators are passed in, so tests can run the resolver against an
in-memory store and fake prompt client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from rapidfuzz import fuzz

from booklist import config
from booklist.normalize import (
    basic_title,
    clean_author_name,
    collapse_whitespace,
    normalize_title,
    sanitize_twitter_url,
)
from booklist.store import new_id, utc_now

LinkFinder = Callable[[str, str], Awaitable[Optional[str]]]
SocialFinder = Callable[[str, Optional[str]], Awaitable[Optional[str]]]


@dataclass
class Match:
    """An existing row the incoming record resolved to."""
    id: str
    tier: str            # "exact" | "fuzzy" | "semantic"
    score: float = 1.0


def _best_candidate(
    candidates: list[dict], title_min: float, author_min: float
) -> tuple[dict, float] | None:
    """
    Pick the candidate with the highest mean title/author similarity among
    those clearing both *title_min* and *author_min*.
    """
    scored = []
    for c in candidates:
        title_sim = float(c.get("title_similarity") or 0)
        author_sim = float(c.get("author_similarity") or 0)
        if title_sim >= title_min and author_sim >= author_min:
            scored.append((c, (title_sim + author_sim) / 2))
    if not scored:
        return None
    return max(scored, key=lambda pair: pair[1])


# ─── Books ──────────────────────────────────────────────────────────────────

class BookResolver:
    def __init__(
        self,
        store,
        prompts,
        embedder=None,
        link_finder: LinkFinder | None = None,
        fuzzy_thresholds: tuple[float, float] = (
            config.FUZZY_TITLE_THRESHOLD, config.FUZZY_AUTHOR_THRESHOLD,
        ),
        semantic_thresholds: tuple[float, float] = (
            config.SEMANTIC_TITLE_THRESHOLD, config.SEMANTIC_AUTHOR_THRESHOLD,
        ),
    ):
        self.store = store
        self.prompts = prompts
        self.embedder = embedder
        self.link_finder = link_finder
        # (title minimum, author minimum)
        self.fuzzy_thresholds = fuzzy_thresholds
        self.semantic_thresholds = semantic_thresholds

    def find_existing(self, title: str, author: str) -> Match | None:
        """Run the match tiers on an already-normalized title and author."""
        exact = self.store.find_book(title, author)
        if exact:
            return Match(exact["id"], "exact")

        best = _best_candidate(
            self.store.find_similar_books(basic_title(title), author),
            *self.fuzzy_thresholds,
        )
        if best:
            return Match(best[0]["id"], "fuzzy", best[1])

        if self.embedder is not None:
            title_vec, author_vec = self.embedder.embed_many([title, author])
            best = _best_candidate(
                self.store.find_best_matching_book(title_vec, author_vec),
                *self.semantic_thresholds,
            )
            if best:
                return Match(best[0]["id"], "semantic", best[1])

        return None

    async def create(self, title: str, author: str) -> str:
        enrichment = self.prompts.genre_and_description(title, author)
        now = utc_now()
        row = {
            "id": new_id(),
            "title": title,
            "author": author,
            "genre": enrichment.genre,
            "description": enrichment.description,
            "created_at": now,
            "updated_at": now,
        }
        if self.link_finder is not None:
            row["amazon_url"] = await self.link_finder(title, author)
        if self.embedder is not None:
            row.update(self.embedder.book_embeddings(title, author, enrichment.description))
        return self.store.insert_book(row)

    async def resolve(self, title: str, author: str) -> str:
        """Return the id of the matching book, creating it when nothing matches."""
        title = normalize_title(title)
        author = clean_author_name(author)

        match = self.find_existing(title, author)
        if match:
            print(f"    [=] {match.tier} match for \"{title}\" ({match.score:.2f})")
            return match.id

        print(f"    [+] Creating \"{title}\" by {author}")
        return await self.create(title, author)


# ─── People ─────────────────────────────────────────────────────────────────

class PersonResolver:
    def __init__(
        self,
        store,
        prompts,
        social_finder: SocialFinder | None = None,
        name_threshold: float = config.PERSON_NAME_THRESHOLD,
    ):
        self.store = store
        self.prompts = prompts
        self.social_finder = social_finder
        self.name_threshold = name_threshold

    def find_existing(self, full_name: str) -> tuple[dict, str] | None:
        exact = self.store.find_person(full_name)
        if exact:
            return exact, "exact"

        tokens = full_name.split()
        if not tokens:
            return None
        candidates = self.store.search_people(tokens[-1])
        scored = [
            (c, fuzz.token_sort_ratio(full_name, c["full_name"], processor=str.lower))
            for c in candidates
        ]
        scored = [pair for pair in scored if pair[1] >= self.name_threshold]
        if scored:
            return max(scored, key=lambda pair: pair[1])[0], "fuzzy"
        return None

    async def resolve(self, full_name: str, url: str | None = None) -> str:
        full_name = collapse_whitespace(full_name)
        url = sanitize_twitter_url(url)

        found = self.find_existing(full_name)
        if found:
            person, tier = found
            print(f"  [=] {tier} match for {full_name} -> {person['full_name']}")
            if url and person.get("url") != url:
                self.store.update("people", person["id"], {"url": url})
                print(f"  [+] Updated URL for {person['full_name']}: {url}")
            return person["id"]

        person_type = self.prompts.categorize_person(full_name)
        if not url and self.social_finder is not None:
            url = sanitize_twitter_url(await self.social_finder(full_name, person_type))

        now = utc_now()
        person_id = self.store.insert_person({
            "id": new_id(),
            "full_name": full_name,
            "type": person_type,
            "url": url,
            "created_at": now,
            "updated_at": now,
        })
        print(f"  [+] Created {full_name} ({person_type})")
        return person_id


# ─── Recommendations ────────────────────────────────────────────────────────

class RecommendationLinker:
    def __init__(self, store):
        self.store = store

    def link(
        self,
        book_id: str,
        person_id: str,
        source: str,
        source_link: str | None = None,
    ) -> tuple[str, bool]:
        """
        Ensure one recommendation edge exists.

        Returns ``(recommendation_id, created)``.
        """
        existing = self.store.find_recommendation(book_id, person_id, source)
        if existing:
            return existing["id"], False

        now = utc_now()
        rec_id = self.store.insert_recommendation({
            "id": new_id(),
            "book_id": book_id,
            "person_id": person_id,
            "source": source,
            "source_link": source_link,
            "created_at": now,
            "updated_at": now,
        })
        return rec_id, True
