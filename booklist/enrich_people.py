"""
People Enrichment
=================
Backfills missing fields on people rows, one person at a time:

    categorize    — LLM person type for people with no type
    social        — web search for a profile link for people with no URL
                    (--confirm: Twitter profile then Wikipedia page, each
                    accepted only after a y/n answer)
    descriptions  — one-sentence description for people with a URL and no
                    description.  Public figures of the "special" types are
                    described by the LLM; everyone else is described from
                    their own profile page.

Usage:
    python -m booklist.enrich_people categorize
    python -m booklist.enrich_people social --confirm
    python -m booklist.enrich_people descriptions
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Callable, Optional

from booklist.browser import (
    ask_yes_no,
    browser_page,
    extract_person_description,
    find_social_url,
)
from booklist.llm import PromptClient
from booklist.normalize import sanitize_twitter_url
from booklist.store import create_store

# ─── Configuration ───────────────────────────────────────────────────────────

# Types well known enough for the LLM to describe without a page visit
SPECIAL_TYPES = {
    "Entertainer",
    "Musician or Filmmaker",
    "Chef or Food Writer",
    "Technologist",
    "Journalist",
    "Executive",
    "Biographer",
    "Investor",
    "Architect or Designer",
    "Entrepreneur",
    "Author",
}


def _report(done: int, total: int, failed: list[str]) -> None:
    print("\n" + "=" * 60)
    print(f"  Updated: {done}/{total}")
    print(f"  Failed:  {len(failed)}")
    for name in failed:
        print(f"    - {name}")
    print("=" * 60)


# ─── categorize ─────────────────────────────────────────────────────────────

def categorize_people(store, prompts: PromptClient) -> tuple[int, list[str]]:
    people = store.select_all("people", "id, full_name", missing=("type",))
    print(f"  [*] {len(people)} people without a type")

    done, failed = 0, []
    for i, person in enumerate(people, start=1):
        name = person["full_name"]
        try:
            person_type = prompts.categorize_person(name)
            store.update("people", person["id"], {"type": person_type})
        except Exception as e:
            print(f"  [!] [{i}/{len(people)}] {name}: {e}")
            failed.append(name)
            continue
        done += 1
        print(f"  [+] [{i}/{len(people)}] {name} → {person_type}")
    return done, failed


# ─── social ─────────────────────────────────────────────────────────────────

async def find_social_links(
    store,
    page,
    confirm: Optional[Callable[[str], bool]] = None,
) -> tuple[int, list[str]]:
    people = store.select_all("people", "id, full_name, type", missing=("url",))
    print(f"  [*] {len(people)} people without a URL")

    done, failed = 0, []
    for i, person in enumerate(people, start=1):
        name = person["full_name"]
        print(f"\n  [{i}/{len(people)}] {name}")
        try:
            url = await find_social_url(page, name, person.get("type"), confirm=confirm)
            if not url:
                print("    [!] No link found")
                failed.append(name)
                continue
            store.update("people", person["id"], {"url": sanitize_twitter_url(url)})
        except Exception as e:
            print(f"    [!] {e}")
            failed.append(name)
            continue
        done += 1
    return done, failed


# ─── descriptions ───────────────────────────────────────────────────────────

def order_for_description(people: list[dict]) -> list[dict]:
    """Special types first; relative order is otherwise kept."""
    return sorted(people, key=lambda p: p.get("type") not in SPECIAL_TYPES)


async def describe_people(store, prompts: PromptClient, page) -> tuple[int, list[str]]:
    people = store.select_all(
        "people", "id, full_name, type, url",
        missing=("description",), present=("url",),
    )
    people = order_for_description(people)
    print(f"  [*] {len(people)} people without a description")

    done, failed = 0, []
    for i, person in enumerate(people, start=1):
        name = person["full_name"]
        try:
            if person.get("type") in SPECIAL_TYPES:
                description = prompts.describe_person(name, person.get("type"))
            else:
                description = await extract_person_description(page, person["url"], name)
            store.update("people", person["id"], {"description": description})
        except Exception as e:
            print(f"  [!] [{i}/{len(people)}] {name}: {e}")
            failed.append(name)
            continue
        done += 1
        print(f"  [+] [{i}/{len(people)}] {name}: {description}")
    return done, failed


async def run(args) -> tuple[int, int, list[str]]:
    store = create_store()
    if args.command == "categorize":
        done, failed = categorize_people(store, PromptClient())
    else:
        async with browser_page() as page:
            if args.command == "social":
                confirm = ask_yes_no if args.confirm else None
                done, failed = await find_social_links(store, page, confirm=confirm)
            else:
                done, failed = await describe_people(store, PromptClient(), page)
    return done, done + len(failed), failed


# ─── CLI entry-point ────────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(description="Backfill missing fields on people")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("categorize", help="Assign a person type")
    social = sub.add_parser("social", help="Find a profile link")
    social.add_argument(
        "--confirm", action="store_true",
        help="Search Twitter then Wikipedia, asking y/n for each candidate",
    )
    sub.add_parser("descriptions", help="Write a one-sentence description")
    args = parser.parse_args()

    print("=" * 60)
    print(f"  Enrich people: {args.command}")
    print("=" * 60)
    try:
        done, total, failed = asyncio.run(run(args))
    except Exception as e:
        print(f"\n[!] Enrichment failed: {e}")
        sys.exit(1)
    _report(done, total, failed)


if __name__ == "__main__":
    main()
