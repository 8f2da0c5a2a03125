"""Harvest defaults (source endpoint, categories, selectors, pacing, paths).

Centralizes static defaults so the pipeline modules have no embedded magic
strings. These are baseline constants used to construct a HarvestConfig;
callers can override any of them through the environment or the CLI.
"""

from __future__ import annotations

from pathlib import Path

# Source endpoint: {BASE_URL}{category}?page={n}&page_size={size}
BASE_URL = "https://thequoteshub.com/api/tags/"
PARAM_PAGE = "page"
PARAM_PAGE_SIZE = "page_size"

# Headers
HDR_USER_AGENT = "User-Agent"
HDR_ACCEPT_LANGUAGE = "Accept-Language"
USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)
ACCEPT_LANGUAGE = "en-US,en;q=0.9"

# Categories, in snapshot order
CATEGORIES = (
    "daily",
    "motivational",
    "love",
    "happiness",
    "positive",
    "strength",
)

# Volume and sampling
PAGE_SIZE = 10
TARGET_RECORDS_PER_CATEGORY = 50
MAX_PAGES_CONSIDERED = 20
SAMPLING_SEQUENTIAL = "sequential"
SAMPLING_RANDOMIZED = "randomized"
SAMPLING_POLICIES = (SAMPLING_SEQUENTIAL, SAMPLING_RANDOMIZED)
SAMPLING_POLICY = SAMPLING_RANDOMIZED

# Pacing toward the single external host
INTER_REQUEST_DELAY_MS = 900
MIN_RECOMMENDED_DELAY_MS = 800
REQUEST_TIMEOUT_SECONDS = 20.0
MAX_ATTEMPTS = 2
BACKOFF_INITIAL_SECONDS = 0.8
BACKOFF_MAX_SECONDS = 6.0

# Fingerprint prefix length (normalized text characters)
FINGERPRINT_PREFIX_CHARS = 50

# DOM selectors
SEL_QUOTE_CONTAINER = ".quote-container"
SEL_QUOTE_TEXT = ".quote-text"
SEL_AUTHOR = ".author"
SEL_TAG = ".tag"
SEL_PAGINATION = ".pagination-info"

# Paths (working-directory relative)
OUTPUT_DIR = Path("daily-quotes")
