"""
Canonical Normalization
=======================
One cleanup function per stored field.  Every script that writes a title,
author, person name, social URL or genre list goes through these, so rows
written by different runs stay comparable.

Bump ``NORMALIZATION_VERSION`` whenever one of the rules below changes.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

NORMALIZATION_VERSION = 2

# ─── Generic ────────────────────────────────────────────────────────────────

def collapse_whitespace(text: str) -> str:
    """Trim and collapse runs of whitespace into single spaces."""
    return re.sub(r"\s+", " ", text or "").strip()


# ─── Titles ─────────────────────────────────────────────────────────────────

MINOR_WORDS = {
    "a", "an", "and", "as", "at", "but", "by", "for",
    "if", "in", "nor", "of", "on", "or", "so", "the",
    "to", "yet",
}

# A word ending in one of these forces the next word to be capitalized
CAPITALIZE_AFTER = {":", "(", "[", "{", '"', "'", "—", "–"}

_LEADING_PUNCT = re.compile(r"^([(\[{\"']*)(.*)$")


def to_title_case(text: str) -> str:
    """
    Title-case a book title.

    The first word is always capitalized, as is any word that opens with a
    bracket or quote, or follows a word ending in ``:``, a bracket, a quote or
    a dash.  Minor words are lowercased everywhere else.

        >>> to_title_case("the lord of the rings")
        'The Lord of the Rings'
    """
    words = text.lower().split()
    result = []
    capitalize_next = True

    for word in words:
        lead, core = _LEADING_PUNCT.match(word).groups()
        if capitalize_next or lead or core not in MINOR_WORDS:
            core = core[:1].upper() + core[1:]
        word = lead + core
        result.append(word)
        capitalize_next = word[-1:] in CAPITALIZE_AFTER

    return " ".join(result)


def normalize_title(title: str) -> str:
    return to_title_case(collapse_whitespace(title))


def basic_title(title: str) -> str:
    """Drop the subtitle: everything from the first colon onward."""
    return title.split(":", 1)[0].strip()


# ─── Authors & people ───────────────────────────────────────────────────────

_BY_PREFIX = re.compile(r"^(?:by\s+)+", re.IGNORECASE)
_INITIALS = re.compile(r"^(?:[A-Za-z]\.)+$")


def _title_token(token: str) -> str:
    if len(token) == 1 and token.isalpha():
        return token.upper() + "."
    if _INITIALS.match(token):
        return token.upper()
    # Mixed-case tokens (McCarthy, DeLillo) are already deliberate
    if token != token.lower() and token != token.upper():
        return token
    return re.sub(
        r"(^|[-'’])([a-z])",
        lambda m: m.group(1) + m.group(2).upper(),
        token.lower(),
    )


def clean_author_name(author: str) -> str:
    """
    Clean a scraped author credit.

    Strips a leading "by ", collapses whitespace, title-cases each name and
    dots bare initials:

        >>> clean_author_name("by   jane doe ")
        'Jane Doe'
        >>> clean_author_name("J K Rowling")
        'J. K. Rowling'
    """
    name = _BY_PREFIX.sub("", collapse_whitespace(author))
    return " ".join(_title_token(t) for t in name.split())


def clean_person_name(raw: str) -> str:
    """
    Reduce an extracted recommender label to the bare name.

    "Processing: Jane Critic, Editor at Large" → "Jane Critic"
    """
    before_comma = raw.split(",", 1)[0]
    without_label = re.sub(r"^.*?:\s*", "", before_comma)
    return collapse_whitespace(without_label)


# ─── Social URLs ────────────────────────────────────────────────────────────

TWITTER_HOSTS = {
    "twitter.com", "www.twitter.com", "mobile.twitter.com",
    "x.com", "www.x.com", "mobile.x.com",
}

_HANDLE = re.compile(r"^@([A-Za-z0-9_]+)$")
_BARE_PROFILE = re.compile(r"^(?:www\.)?(?:twitter\.com|x\.com)/([A-Za-z0-9_]+)", re.IGNORECASE)


def is_twitter_url(url: str | None) -> bool:
    if not url:
        return False
    if _HANDLE.match(url) or _BARE_PROFILE.match(url):
        return True
    host = (urlparse(url).hostname or "").lower()
    return host in TWITTER_HOSTS


def sanitize_twitter_url(url: str | None) -> str | None:
    """
    Canonicalize any Twitter/X profile reference to ``https://x.com/<user>``.

    Anything that is not a Twitter/X reference is returned unchanged.
    """
    if not url:
        return url

    handle = _HANDLE.match(url)
    if handle:
        return f"https://x.com/{handle.group(1)}"

    bare = _BARE_PROFILE.match(url)
    if bare:
        return f"https://x.com/{bare.group(1)}"

    if not is_twitter_url(url):
        return url

    parts = [p for p in urlparse(url).path.split("/") if p]
    if parts:
        return f"https://x.com/{parts[0].lstrip('@')}"
    return url


# ─── Genres ─────────────────────────────────────────────────────────────────

STANDARD_GENRES = (
    "Fiction", "Historical", "Classic", "Nonfiction", "Economics", "Politics",
    "Science Fiction", "Fantasy", "Mystery", "Horror", "Romance", "History",
    "Biography", "Memoir", "Self-Help", "Business", "Science", "Philosophy",
    "Poetry", "Young Adult", "Children", "Misc",
)
FALLBACK_GENRE = "Misc"


def filter_genres(genres: list[str] | None) -> list[str]:
    """
    Keep only controlled-vocabulary genres, in order, without repeats.
    An empty result becomes ``["Misc"]``.
    """
    kept: list[str] = []
    for g in genres or []:
        if g in STANDARD_GENRES and g not in kept:
            kept.append(g)
    return kept or [FALLBACK_GENRE]
