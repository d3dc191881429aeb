# client.py

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from tqdm import tqdm
from urllib3.util.retry import Retry

from config import PER_PAGE, REQUEST_TIMEOUT_SECONDS, STRAVA_API_URL


class FetchError(Exception):
    """Activities could not be fetched for an account."""


class UnauthorizedError(FetchError):
    """Access token rejected (expired or revoked)."""


class RateLimitedError(FetchError):
    """Provider rate limit hit."""


class StravaClient:
    """Client for reading athlete activities from the Strava API."""
    MAX_PAGES = 50

    def __init__(self, access_token: str, base_url: str = STRAVA_API_URL,
                 per_page: int = PER_PAGE, timeout: int = REQUEST_TIMEOUT_SECONDS):
        if not access_token:
            raise UnauthorizedError("No access token available")

        self.base_url = base_url.rstrip('/')
        self.access_token = access_token
        self.per_page = per_page
        self.timeout = timeout
        self._session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create requests session with retry strategy."""
        # 429 is surfaced to the caller rather than retried
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=["GET"]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session = requests.Session()
        session.mount("https://", adapter)
        session.headers.update({'Authorization': f'Bearer {self.access_token}'})
        return session

    def get_activities_page(self, page: int, after: Optional[int] = None) -> List[Dict[str, Any]]:
        """Fetch a single page of activities, optionally only those after a unix timestamp."""
        params = {'page': page, 'per_page': self.per_page}
        if after is not None:
            params['after'] = after

        try:
            response = self._session.get(
                f"{self.base_url}/athlete/activities",
                params=params,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Network error: {e}") from e

        if response.status_code == 401:
            raise UnauthorizedError("UNAUTHORIZED")
        if response.status_code == 429:
            raise RateLimitedError("RATE_LIMITED")

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise FetchError(f"Failed to fetch activities: {response.status_code} {response.reason}") from e

        data = response.json()
        if not isinstance(data, list):
            logging.warning(f"Unexpected response structure on page {page}")
            return []
        return data

    def get_activities(self, after: Optional[int] = None) -> List[Dict[str, Any]]:
        """Fetch all activities, page by page, until a short page is returned."""
        all_activities: List[Dict[str, Any]] = []

        with tqdm(desc="Retrieving activities", unit=" activities", leave=False) as pbar:
            for page in range(1, self.MAX_PAGES + 1):
                activities = self.get_activities_page(page, after)
                all_activities.extend(activities)
                pbar.update(len(activities))

                if len(activities) < self.per_page:
                    break
            else:
                logging.warning(f"Stopped after {self.MAX_PAGES} pages; older activities not fetched")

        logging.info(f"Retrieved {len(all_activities)} activities")
        return all_activities
