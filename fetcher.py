# fetcher.py

"""
Parallel activity fetching, one worker per connected account.
Every account settles into a SourceResult; failures are captured, never raised.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List, NamedTuple, Optional

import requests

from activities import activities_from_strava
from client import FetchError, StravaClient
from combiner import SourceResult
from config import CACHE_TTL_SECONDS, FETCH_TIMEOUT_SECONDS
from utils import cache_data, cache_path, load_cached_data, load_json


class Account(NamedTuple):
    source_id: str
    access_token: str


def load_accounts(path: str) -> List[Account]:
    """Load connected accounts from a JSON list of {"id", "access_token"} objects."""
    data = load_json(path)
    if not isinstance(data, list):
        return []

    accounts = []
    for entry in data:
        try:
            accounts.append(Account(str(entry['id']), entry.get('access_token') or ''))
        except (KeyError, TypeError, AttributeError) as e:
            logging.warning(f"Skipping invalid account entry: {e}")
    return accounts


def fetch_source(account: Account, after: Optional[int] = None,
                 client_factory: Callable[[str], StravaClient] = StravaClient,
                 cache_dir: Optional[str] = None) -> SourceResult:
    """Fetch and normalize one account's activities."""
    cache_file = cache_path(cache_dir, account.source_id) if cache_dir else None

    if cache_file:
        cached = load_cached_data(cache_file, max_age=CACHE_TTL_SECONDS)
        if isinstance(cached, dict) and cached.get('after') == after:
            return SourceResult(account.source_id, cached['activities'])

    try:
        client = client_factory(account.access_token)
        payloads = client.get_activities(after=after)
    except (FetchError, requests.exceptions.RequestException) as e:
        logging.error(f"Error fetching activities for {account.source_id}: {e}")
        return SourceResult(account.source_id, None, str(e) or e.__class__.__name__)

    activities = activities_from_strava(payloads)
    if cache_file:
        cache_data({'activities': activities, 'after': after, 'timestamp': time.time()}, cache_file)

    return SourceResult(account.source_id, activities)


def _run_fetch(account: Account, after: Optional[int], client_factory: Callable[[str], StravaClient],
               cache_dir: Optional[str], results: List[Optional[SourceResult]], slot: int) -> None:
    try:
        results[slot] = fetch_source(account, after, client_factory, cache_dir)
    except Exception as e:
        logging.error(f"Unexpected error fetching {account.source_id}: {e}")
        results[slot] = SourceResult(account.source_id, None, str(e) or e.__class__.__name__)


def fetch_all_sources(accounts: List[Account], after: Optional[int] = None,
                      timeout: float = FETCH_TIMEOUT_SECONDS,
                      client_factory: Callable[[str], StravaClient] = StravaClient,
                      cache_dir: Optional[str] = None) -> List[SourceResult]:
    """
    Fetch every account in parallel under one overall timeout.
    Accounts still pending when the timeout expires are reported as timed out.
    Workers are daemon threads, so a hung account never holds up process exit.
    """
    if not accounts:
        return []

    results: List[Optional[SourceResult]] = [None] * len(accounts)
    workers = [
        threading.Thread(
            target=_run_fetch,
            args=(account, after, client_factory, cache_dir, results, slot),
            name=f"fetch-{account.source_id}",
            daemon=True,
        )
        for slot, account in enumerate(accounts)
    ]
    for worker in workers:
        worker.start()

    deadline = time.monotonic() + timeout
    for worker in workers:
        worker.join(max(deadline - time.monotonic(), 0))

    settled = []
    for account, worker, result in zip(accounts, workers, results):
        if worker.is_alive() or result is None:
            logging.warning(f"Fetch for {account.source_id} timed out after {timeout}s")
            result = SourceResult(account.source_id, None, "Timed out")
        settled.append(result)
    return settled
