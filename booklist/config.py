"""
Shared configuration for the booklist scripts.

Values come from the environment, with a ``.env`` file at the project root
loaded first.  Script-specific tunables live at the top of each script.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parent.parent
load_dotenv(ROOT_DIR / ".env")

# ─── Store ───────────────────────────────────────────────────────────────────

SUPABASE_URL = os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY") or os.getenv("NEXT_PUBLIC_SUPABASE_ANON_KEY")

# ─── LLM prompts ─────────────────────────────────────────────────────────────

BRAINTRUST_API_KEY = os.getenv("BRAINTRUST_API_KEY")
BRAINTRUST_PROJECT = os.getenv("BRAINTRUST_PROJECT", "booklist")

SLUG_CATEGORIZE_PERSON = "categorize-person-7bb3"
SLUG_GENRE_AND_DESCRIPTION = "genre-and-description-0680"
SLUG_SANITIZE_TITLE = "sanitize-title-fc91"
SLUG_PERSON_DESCRIPTION = "person-description"

# ─── Browser ─────────────────────────────────────────────────────────────────

BROWSERBASE_API_KEY = os.getenv("BROWSERBASE_API_KEY")
BROWSERBASE_PROJECT_ID = os.getenv("BROWSERBASE_PROJECT_ID")
BROWSER_MODEL_NAME = os.getenv("BROWSER_MODEL_NAME", "gpt-4o")
BROWSER_MODEL_API_KEY = os.getenv("MODEL_API_KEY") or os.getenv("OPENAI_API_KEY")
HEADLESS = os.getenv("HEADLESS", "1") != "0"

# ─── Embeddings ──────────────────────────────────────────────────────────────

EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2")

# ─── Deduplication thresholds ───────────────────────────────────────────────

# Each dimension is gated on its own; survivors are ranked by the mean.
# Trigram similarity of the subtitle-free title / cleaned author
FUZZY_TITLE_THRESHOLD = float(os.getenv("FUZZY_TITLE_THRESHOLD", "0.8"))
FUZZY_AUTHOR_THRESHOLD = float(os.getenv("FUZZY_AUTHOR_THRESHOLD", "0.6"))
# Cosine similarity of the title / author embeddings
SEMANTIC_TITLE_THRESHOLD = float(os.getenv("SEMANTIC_TITLE_THRESHOLD", "0.9"))
SEMANTIC_AUTHOR_THRESHOLD = float(os.getenv("SEMANTIC_AUTHOR_THRESHOLD", "0.9"))
# rapidfuzz token_sort_ratio (0-100) required to merge two person names
PERSON_NAME_THRESHOLD = float(os.getenv("PERSON_NAME_THRESHOLD", "92"))

# ─── Batch maintenance ──────────────────────────────────────────────────────

MAX_CONCURRENT = int(os.getenv("MAX_CONCURRENT", "10"))


def require_env(name: str, value: str | None) -> str:
    """Return *value* or fail loudly naming the missing variable."""
    if not value:
        raise RuntimeError(f"Missing {name} in environment variables")
    return value
