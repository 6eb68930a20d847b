"""
Recommendation Page Scraper
===========================
Scrapes one webpage listing a notable person's book recommendations and
stores the result:

  1. Open the page in a Stagehand browser session
  2. Extract the recommender's name, the source name and every title/author
  3. Resolve the person (exact → fuzzy name → create)
  4. Resolve each book (exact → fuzzy → semantic → create with enrichment)
  5. Link each book to the person, once per source

A failure on one book is reported and that book is skipped.

Usage:
    python -m booklist.scrape_recommendations --url="https://example.com/picks"
    python -m booklist.scrape_recommendations --url=... --source="Example Blog"
    python -m booklist.scrape_recommendations --url=... --find-links --embed
"""

from __future__ import annotations

import argparse
import asyncio
import functools
import sys
from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from booklist.browser import browser_page, extract, find_amazon_url
from booklist.embeddings import Embedder
from booklist.llm import PromptClient
from booklist.normalize import collapse_whitespace
from booklist.resolver import BookResolver, PersonResolver, RecommendationLinker
from booklist.store import create_store

# ─── Extraction schemas ─────────────────────────────────────────────────────

class PersonName(BaseModel):
    person_name: str = Field(
        description="The full name of the person whose book recommendations are shown"
    )


class SourceName(BaseModel):
    source: str = Field(
        description="The name of the website or publication the page belongs to"
    )


class ExtractedBook(BaseModel):
    title: str = Field(description="The title of the book")
    author: str = Field(description="The author of the book")


class BookList(BaseModel):
    books: list[ExtractedBook] = Field(description="Array of all books found on the page")


@dataclass
class ScrapedPage:
    url: str
    person_name: str
    source: str
    books: list[ExtractedBook] = field(default_factory=list)


@dataclass
class RunSummary:
    processed: int = 0
    linked: int = 0
    already_linked: int = 0
    failed: list[str] = field(default_factory=list)


# ─── Page extraction ────────────────────────────────────────────────────────

async def scrape_page(page, url: str, source: str | None = None) -> ScrapedPage:
    await page.goto(url)

    person = await extract(
        page,
        "Extract the name of the person whose book recommendations are being shown. "
        "This is likely in the page title or header.",
        PersonName,
    )

    if not source:
        source = (await extract(
            page,
            "Extract the name of the website or publication this page belongs to.",
            SourceName,
        )).source

    found = await extract(
        page,
        "Extract all books recommended on the webpage with their title and author. "
        "Make sure to clean up any extra whitespace.",
        BookList,
    )
    books = [b for b in found.books if b.title.strip()]

    return ScrapedPage(
        url=url,
        person_name=collapse_whitespace(person.person_name),
        source=collapse_whitespace(source),
        books=books,
    )


# ─── Storage ────────────────────────────────────────────────────────────────

async def save_recommendations(
    scraped: ScrapedPage,
    people: PersonResolver,
    books: BookResolver,
    linker: RecommendationLinker,
) -> RunSummary:
    summary = RunSummary()
    person_id = await people.resolve(scraped.person_name)

    for i, book in enumerate(scraped.books, start=1):
        print(f"\n  [{i}/{len(scraped.books)}] {book.title} — {book.author}")
        summary.processed += 1
        try:
            book_id = await books.resolve(book.title, book.author)
            _, created = linker.link(book_id, person_id, scraped.source, scraped.url)
        except Exception as e:
            print(f"    [!] Skipping \"{book.title}\": {e}")
            summary.failed.append(book.title)
            continue

        if created:
            summary.linked += 1
            print("    [+] Linked recommendation")
        else:
            summary.already_linked += 1
            print("    [=] Recommendation already recorded")

    return summary


# ─── Full run ───────────────────────────────────────────────────────────────

async def scrape_pipeline(
    url: str,
    source: str | None = None,
    find_links: bool = False,
    embed: bool = False,
) -> RunSummary | None:
    print("=" * 60)
    print("  Recommendation Scraper")
    print("=" * 60)
    print(f"  URL: {url}")

    store = create_store()
    prompts = PromptClient()
    embedder = Embedder() if embed else None

    async with browser_page() as page:
        scraped = await scrape_page(page, url, source)
        if not scraped.person_name:
            print("\n  [!] Could not find the person's name on the page")
            return None

        print(f"\n  Recommender: {scraped.person_name}")
        print(f"  Source:      {scraped.source}")
        print(f"  Books found: {len(scraped.books)}")

        link_finder = functools.partial(find_amazon_url, page) if find_links else None
        people = PersonResolver(store, prompts)
        books = BookResolver(store, prompts, embedder=embedder, link_finder=link_finder)
        linker = RecommendationLinker(store)

        summary = await save_recommendations(scraped, people, books, linker)

    print("\n" + "=" * 60)
    print("  SCRAPE COMPLETE — SUMMARY")
    print("=" * 60)
    print(f"  Books processed:             {summary.processed}")
    print(f"  New recommendations:         {summary.linked}")
    print(f"  Already recorded:            {summary.already_linked}")
    print(f"  Failed:                      {len(summary.failed)}")
    for title in summary.failed:
        print(f"    - {title}")
    print("=" * 60)
    return summary


# ─── CLI entry-point ────────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(description="Scrape a page of book recommendations")
    parser.add_argument("--url", required=True, help="Page listing the recommendations")
    parser.add_argument("--source", help="Source name (default: extracted from the page)")
    parser.add_argument(
        "--find-links", action="store_true",
        help="Search for a purchase link for every newly created book",
    )
    parser.add_argument(
        "--embed", action="store_true",
        help="Enable the embedding match tier and embed new books",
    )
    args = parser.parse_args()

    try:
        summary = asyncio.run(scrape_pipeline(
            args.url, source=args.source, find_links=args.find_links, embed=args.embed,
        ))
    except Exception as e:
        print(f"\n[!] Error occurred while scraping: {e}")
        sys.exit(1)
    if summary is None:
        sys.exit(1)


if __name__ == "__main__":
    main()
