"""
Browser Automation Helpers
==========================
Wraps a Stagehand session.  Pages are driven with natural-language ``act``
instructions and read with schema-bound ``extract`` calls; every extraction is
re-validated against its pydantic schema before it reaches the caller.

Stagehand runs on Browserbase when ``BROWSERBASE_API_KEY`` is set and on a
local Chromium otherwise.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, TypeVar

from pydantic import BaseModel
from stagehand import Stagehand, StagehandConfig

from booklist import config

T = TypeVar("T", bound=BaseModel)

SEARCH_URL = "https://www.google.com"
SEARCH_SETTLE_DELAY = 2.0  # seconds for result links to render

# (label, query template, extraction instruction), tried in order when a
# human confirms each social profile candidate
SOCIAL_SEARCHES = [
    (
        "Twitter profile",
        "{name} twitter profile",
        "Extract the first link that contains 'twitter' or 'x'. Make sure it is a valid URL.",
    ),
    (
        "Wikipedia page",
        "{name} wikipedia",
        "Extract the first link that contains 'wikipedia'. Make sure it is a valid URL.",
    ),
]


class LinkList(BaseModel):
    links: list[str] = []


class Description(BaseModel):
    description: str


# ─── Session ────────────────────────────────────────────────────────────────

def build_config(headless: bool = config.HEADLESS) -> StagehandConfig:
    env = "BROWSERBASE" if config.BROWSERBASE_API_KEY else "LOCAL"
    return StagehandConfig(
        env=env,
        api_key=config.BROWSERBASE_API_KEY,
        project_id=config.BROWSERBASE_PROJECT_ID,
        model_name=config.BROWSER_MODEL_NAME,
        model_api_key=config.BROWSER_MODEL_API_KEY,
        local_browser_launch_options={"headless": headless},
        verbose=0,
    )


@asynccontextmanager
async def browser_page(headless: bool = config.HEADLESS) -> AsyncIterator[Any]:
    """Open a Stagehand session and yield its page; always closes the session."""
    stagehand = Stagehand(build_config(headless))
    await stagehand.init()
    try:
        yield stagehand.page
    finally:
        await stagehand.close()


# ─── Extraction ─────────────────────────────────────────────────────────────

async def extract(page, instruction: str, schema: type[T]) -> T:
    result = await page.extract(instruction=instruction, schema=schema)
    if isinstance(result, BaseModel):
        result = result.model_dump()
    return schema.model_validate(result)


async def search_links(page, query: str, instruction: str) -> list[str]:
    """Run a web search and extract result links per *instruction*."""
    await page.goto(SEARCH_URL)
    await page.act(f"Type '{query}' into the search input")
    await page.act("Press Enter")
    await asyncio.sleep(SEARCH_SETTLE_DELAY)
    found = await extract(page, instruction, LinkList)
    return [link.strip() for link in found.links if link and link.strip()]


async def find_amazon_url(page, title: str, author: str) -> str | None:
    links = await search_links(
        page,
        f"{title} {author} amazon",
        "Extract the first link that contains 'amazon.com'",
    )
    return next((link for link in links if "amazon." in link.lower()), None)


def ask_yes_no(question: str) -> bool:
    return input(f"{question} (y/n): ").strip().lower() == "y"


async def find_social_url(
    page,
    full_name: str,
    person_type: str | None = None,
    confirm: Callable[[str], bool] | None = None,
) -> str | None:
    """
    Look up a social profile for a person.

    Without *confirm* the first search result for "Name (Type)" is taken as
    is.  With *confirm*, a Twitter profile and then a Wikipedia page are
    searched and each candidate is only accepted once confirmed.
    """
    if confirm is None:
        query = f"{full_name} ({person_type})" if person_type else full_name
        links = await search_links(
            page, query,
            "Extract the first link from the search results. Make sure it is a valid URL.",
        )
        if links:
            print(f"    [+] Found link: {links[0]}")
            return links[0]
        return None

    for label, template, instruction in SOCIAL_SEARCHES:
        links = await search_links(page, template.format(name=full_name), instruction)
        if not links:
            continue
        print(f"\n    [+] Found {label}: {links[0]}")
        if confirm(f"    Is this the correct {label}?"):
            return links[0]
    return None


async def extract_person_description(page, url: str, full_name: str) -> str:
    await page.goto(url)
    found = await extract(
        page,
        f"Extract a 1 sentence description about {full_name} from their profile or bio. "
        "Focus on their main role, achievements, or expertise.",
        Description,
    )
    return found.description
