"""
Configuration settings for the activity goal tracker.
Every value can be overridden through an environment variable of the same name.
"""

import os

# Provider API
STRAVA_API_URL = os.environ.get("STRAVA_API_URL", "https://www.strava.com/api/v3")
PER_PAGE = int(os.environ.get("PER_PAGE", "200"))
REQUEST_TIMEOUT_SECONDS = int(os.environ.get("REQUEST_TIMEOUT_SECONDS", "30"))

# Overall timeout across the parallel per-account fetches
FETCH_TIMEOUT_SECONDS = int(os.environ.get("FETCH_TIMEOUT_SECONDS", "30"))

# Connected accounts: JSON list of {"id": ..., "access_token": ...}
ACCOUNTS_FILE = os.environ.get("ACCOUNTS_FILE", "accounts.json")

# Activity pool cache
CACHE_DIR = os.environ.get("CACHE_DIR", ".activity_cache")
CACHE_TTL_SECONDS = int(os.environ.get("CACHE_TTL_SECONDS", "900"))

DEFAULT_TIME_FRAME = os.environ.get("DEFAULT_TIME_FRAME", "week")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
