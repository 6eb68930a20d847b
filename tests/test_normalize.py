"""
Tests for booklist/normalize.py
===============================
Covers:
  1. Title casing            (minor words, forced capitals, idempotence)
  2. Author credits          ("by" prefixes, initials, mixed case)
  3. Person names            (labels and trailing roles stripped)
  4. Twitter / X URLs        (handles, bare paths, hosts, pass-through)
  5. Genre filtering         (controlled vocabulary, order, fallback)
"""

import pytest

from booklist.normalize import (
    FALLBACK_GENRE,
    basic_title,
    clean_author_name,
    clean_person_name,
    collapse_whitespace,
    filter_genres,
    is_twitter_url,
    normalize_title,
    sanitize_twitter_url,
)


# ═══════════════════════════════════════════════════════════════════════════════
#  1. Titles
# ═══════════════════════════════════════════════════════════════════════════════

class TestTitles:

    def test_minor_words_lowercased(self):
        assert normalize_title("the lord of the rings") == "The Lord of the Rings"

    def test_first_word_always_capitalized(self):
        assert normalize_title("a tale of two cities") == "A Tale of Two Cities"

    def test_capitalizes_after_colon(self):
        assert normalize_title("dune: the graphic novel") == "Dune: The Graphic Novel"

    def test_capitalizes_after_opening_bracket(self):
        assert normalize_title("foundation (the foundation trilogy)") == \
            "Foundation (The Foundation Trilogy)"

    def test_whitespace_collapsed(self):
        assert normalize_title("  the   road  ") == "The Road"

    def test_numbers_untouched(self):
        assert normalize_title("1984") == "1984"

    @pytest.mark.parametrize("raw", [
        "THE GREAT GATSBY",
        "of mice and men",
        "sapiens: a brief history of humankind",
        "  gödel, escher, bach ",
    ])
    def test_idempotent(self, raw):
        once = normalize_title(raw)
        assert normalize_title(once) == once

    def test_basic_title_drops_subtitle(self):
        assert basic_title("Sapiens: A Brief History of Humankind") == "Sapiens"
        assert basic_title("Dune") == "Dune"


# ═══════════════════════════════════════════════════════════════════════════════
#  2. Authors
# ═══════════════════════════════════════════════════════════════════════════════

class TestAuthors:

    def test_strips_by_prefix(self):
        assert clean_author_name("by   jane doe ") == "Jane Doe"

    def test_strips_repeated_by_prefix(self):
        assert clean_author_name("By by George Orwell") == "George Orwell"

    def test_dots_bare_initials(self):
        assert clean_author_name("J K Rowling") == "J. K. Rowling"

    def test_keeps_dotted_initials(self):
        assert clean_author_name("j.r.r. tolkien") == "J.R.R. Tolkien"

    def test_all_caps_title_cased(self):
        assert clean_author_name("GEORGE ORWELL") == "George Orwell"

    def test_mixed_case_kept(self):
        assert clean_author_name("Cormac McCarthy") == "Cormac McCarthy"

    def test_apostrophe_and_hyphen(self):
        assert clean_author_name("flannery o'connor") == "Flannery O'Connor"
        assert clean_author_name("jean-paul sartre") == "Jean-Paul Sartre"

    @pytest.mark.parametrize("raw", ["by j k rowling", "GEORGE ORWELL", "ursula k. le guin"])
    def test_idempotent(self, raw):
        once = clean_author_name(raw)
        assert clean_author_name(once) == once


# ═══════════════════════════════════════════════════════════════════════════════
#  3. Person names
# ═══════════════════════════════════════════════════════════════════════════════

class TestPersonNames:

    def test_strips_label_and_role(self):
        assert clean_person_name("Processing: Jane Critic, Editor at Large") == "Jane Critic"

    def test_plain_name_unchanged(self):
        assert clean_person_name("Jane Critic") == "Jane Critic"

    def test_collapses_whitespace(self):
        assert clean_person_name("  Jane   Critic ") == "Jane Critic"
        assert collapse_whitespace("Jane \n Critic") == "Jane Critic"


# ═══════════════════════════════════════════════════════════════════════════════
#  4. Twitter / X URLs
# ═══════════════════════════════════════════════════════════════════════════════

class TestTwitterUrls:

    @pytest.mark.parametrize("raw", [
        "@janecritic",
        "twitter.com/janecritic",
        "https://twitter.com/janecritic",
        "https://www.twitter.com/janecritic?lang=en",
        "https://mobile.twitter.com/janecritic/status/123",
        "https://x.com/janecritic",
        "http://x.com/janecritic/",
    ])
    def test_canonical_form(self, raw):
        assert sanitize_twitter_url(raw) == "https://x.com/janecritic"

    def test_non_twitter_passthrough(self):
        url = "https://en.wikipedia.org/wiki/Jane_Critic"
        assert sanitize_twitter_url(url) == url

    def test_lookalike_host_is_not_twitter(self):
        assert not is_twitter_url("https://www.netflix.com/title/1")
        assert sanitize_twitter_url("https://www.netflix.com/title/1") == \
            "https://www.netflix.com/title/1"

    def test_empty_values(self):
        assert sanitize_twitter_url(None) is None
        assert sanitize_twitter_url("") == ""

    def test_idempotent(self):
        once = sanitize_twitter_url("@janecritic")
        assert sanitize_twitter_url(once) == once


# ═══════════════════════════════════════════════════════════════════════════════
#  5. Genres
# ═══════════════════════════════════════════════════════════════════════════════

class TestGenres:

    def test_unknown_genres_dropped(self):
        assert filter_genres(["Fiction", "Cyberpunk", "History"]) == ["Fiction", "History"]

    def test_order_kept_and_duplicates_removed(self):
        assert filter_genres(["History", "Fiction", "History"]) == ["History", "Fiction"]

    def test_empty_falls_back(self):
        assert filter_genres([]) == [FALLBACK_GENRE]
        assert filter_genres(None) == [FALLBACK_GENRE]
        assert filter_genres(["Cyberpunk"]) == [FALLBACK_GENRE]

    @pytest.mark.parametrize("genres", [
        ["Fiction", "Cyberpunk", "History"],
        ["History", "Fiction", "History"],
        ["Cyberpunk", "Steampunk"],
        ["Misc"],
        [],
        None,
    ])
    def test_filter_is_idempotent(self, genres):
        once = filter_genres(genres)
        assert filter_genres(once) == once
