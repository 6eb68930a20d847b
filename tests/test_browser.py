"""
Tests for booklist/browser.py
=============================
Covers:
  1. Session config / lifecycle   (Browserbase vs local, always closed)
  2. Schema-bound extraction      (dict or model results re-validated)
  3. Search helpers               (amazon links, social profiles)
"""

import pytest
from pydantic import ValidationError
from unittest.mock import AsyncMock, MagicMock, patch

from booklist import browser
from booklist.browser import (
    Description,
    LinkList,
    browser_page,
    build_config,
    extract,
    extract_person_description,
    find_amazon_url,
    find_social_url,
)


def _page(*extractions):
    page = MagicMock()
    page.goto = AsyncMock()
    page.act = AsyncMock()
    page.extract = AsyncMock(side_effect=list(extractions))
    return page


@pytest.fixture(autouse=True)
def no_settle_delay():
    with patch.object(browser, "SEARCH_SETTLE_DELAY", 0):
        yield


# ═══════════════════════════════════════════════════════════════════════════════
#  1. Session
# ═══════════════════════════════════════════════════════════════════════════════

class TestSession:

    def test_local_env_without_browserbase_key(self):
        with patch.object(browser.config, "BROWSERBASE_API_KEY", None), \
             patch("booklist.browser.StagehandConfig") as mock_config:
            build_config(headless=True)

        kwargs = mock_config.call_args.kwargs
        assert kwargs["env"] == "LOCAL"
        assert kwargs["local_browser_launch_options"] == {"headless": True}

    def test_browserbase_env_with_key(self):
        with patch.object(browser.config, "BROWSERBASE_API_KEY", "bb-key"), \
             patch("booklist.browser.StagehandConfig") as mock_config:
            build_config()

        assert mock_config.call_args.kwargs["env"] == "BROWSERBASE"
        assert mock_config.call_args.kwargs["api_key"] == "bb-key"

    @pytest.mark.asyncio
    async def test_session_closed_after_error(self):
        fake = MagicMock()
        fake.init = AsyncMock()
        fake.close = AsyncMock()
        with patch("booklist.browser.build_config"), \
             patch("booklist.browser.Stagehand", return_value=fake):
            with pytest.raises(RuntimeError):
                async with browser_page() as page:
                    assert page is fake.page
                    raise RuntimeError("navigation failed")

        fake.init.assert_awaited_once()
        fake.close.assert_awaited_once()


# ═══════════════════════════════════════════════════════════════════════════════
#  2. Extraction
# ═══════════════════════════════════════════════════════════════════════════════

class TestExtract:

    @pytest.mark.asyncio
    async def test_dict_result_validated(self):
        page = _page({"links": ["https://a.example"]})

        result = await extract(page, "links please", LinkList)

        assert result == LinkList(links=["https://a.example"])
        page.extract.assert_awaited_once_with(instruction="links please", schema=LinkList)

    @pytest.mark.asyncio
    async def test_model_result_validated(self):
        page = _page(Description(description="A critic."))

        result = await extract(page, "describe", Description)

        assert result.description == "A critic."

    @pytest.mark.asyncio
    async def test_wrong_shape_raises(self):
        page = _page({"text": "nope"})

        with pytest.raises(ValidationError):
            await extract(page, "describe", Description)


# ═══════════════════════════════════════════════════════════════════════════════
#  3. Search helpers
# ═══════════════════════════════════════════════════════════════════════════════

class TestSearchHelpers:

    @pytest.mark.asyncio
    async def test_amazon_link_picked(self):
        page = _page({"links": ["https://www.goodreads.com/x", " https://www.amazon.com/dp/1 "]})

        url = await find_amazon_url(page, "Emma", "Jane Austen")

        assert url == "https://www.amazon.com/dp/1"
        page.goto.assert_awaited_once_with(browser.SEARCH_URL)
        typed = page.act.await_args_list[0].args[0]
        assert "Emma Jane Austen amazon" in typed

    @pytest.mark.asyncio
    async def test_no_amazon_link(self):
        page = _page({"links": ["https://www.goodreads.com/x"]})
        assert await find_amazon_url(page, "Emma", "Jane Austen") is None

    @pytest.mark.asyncio
    async def test_social_first_result_without_confirmation(self):
        page = _page({"links": ["https://x.com/janecritic", "https://example.com"]})

        url = await find_social_url(page, "Jane Critic", "Journalist")

        assert url == "https://x.com/janecritic"
        assert "Jane Critic (Journalist)" in page.act.await_args_list[0].args[0]

    @pytest.mark.asyncio
    async def test_social_falls_through_to_wikipedia(self):
        page = _page(
            {"links": ["https://x.com/someone_else"]},
            {"links": ["https://en.wikipedia.org/wiki/Jane_Critic"]},
        )
        answers = iter([False, True])

        url = await find_social_url(page, "Jane Critic", confirm=lambda q: next(answers))

        assert url == "https://en.wikipedia.org/wiki/Jane_Critic"

    @pytest.mark.asyncio
    async def test_social_all_rejected(self):
        page = _page({"links": ["https://x.com/a"]}, {"links": []})

        assert await find_social_url(page, "Jane Critic", confirm=lambda q: False) is None

    @pytest.mark.asyncio
    async def test_person_description_from_profile(self):
        page = _page({"description": "Jane Critic edits a books newsletter."})

        text = await extract_person_description(page, "https://example.com/jane", "Jane Critic")

        assert text == "Jane Critic edits a books newsletter."
        page.goto.assert_awaited_once_with("https://example.com/jane")
