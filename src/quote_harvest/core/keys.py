"""Shared schema keys to avoid magic strings across quote_harvest modules."""

from __future__ import annotations

# Quote record keys (persisted snapshot)
K_TEXT = "text"
K_AUTHOR = "author"
K_CATEGORY = "category"
K_TAGS = "tags"

# Run summary keys
K_RUN_ID = "run_id"
K_DATE_KEY = "date_key"
K_SNAPSHOT_PATH = "snapshot_path"
K_COUNTS = "counts"
K_CATEGORIES = "categories"
K_STATUS = "status"
K_RECORDS = "records"
K_ERRORS = "errors"
