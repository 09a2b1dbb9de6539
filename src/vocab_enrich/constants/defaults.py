"""Default values for lookup, merging, batching and rate limiting."""

# Proficiency levels (CEFR)
CEFR_LEVELS = ("A1", "A2", "B1", "B2", "C1", "C2")
LEVEL_NOT_AVAILABLE = "n.a."

# Source lookups
SOURCE_TIMEOUT_SECONDS = 10.0
MAX_SOURCE_EXAMPLES = 2
MAX_SYNONYMS = 3

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

# Merging
MAX_MERGED_EXAMPLES = 3

# Batch orchestration
BATCH_CHUNK_SIZE = 100
WORD_DELAY_SECONDS = 0.4  # between words inside a chunk
CHUNK_DELAY_SECONDS = 1.0  # between chunks
FAILED_WORDS_LISTING_LIMIT = 10  # summaries list failed words up to this many

# Rate limiting (single-word endpoint)
RATE_LIMIT_MAX_REQUESTS = 30
RATE_LIMIT_WINDOW_SECONDS = 60.0
RATE_LIMIT_SWEEP_INTERVAL_SECONDS = 300.0
