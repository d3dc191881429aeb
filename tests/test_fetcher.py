import json
import os
import tempfile
import threading
import unittest

from client import RateLimitedError, UnauthorizedError
from fetcher import Account, fetch_all_sources, fetch_source, load_accounts


def run_payload(activity_id: int) -> dict:
    return {
        "id": activity_id,
        "type": "Run",
        "distance": 5000,
        "moving_time": 1500,
        "elapsed_time": 1600,
        "total_elevation_gain": 20,
        "start_date": "2025-06-10T07:00:00",
    }


class FakeClient:
    """Stands in for StravaClient; behaviour keyed by access token."""
    release = threading.Event()

    def __init__(self, access_token: str):
        if access_token == "expired":
            raise UnauthorizedError("UNAUTHORIZED")
        self.access_token = access_token

    def get_activities(self, after=None):
        if self.access_token == "limited":
            raise RateLimitedError("RATE_LIMITED")
        if self.access_token == "slow":
            FakeClient.release.wait(5)
            return []
        return [run_payload(1), run_payload(2)]


class FetchSourceTests(unittest.TestCase):
    def test_successful_fetch_is_normalized(self):
        result = fetch_source(Account("alice", "good"), client_factory=FakeClient)
        self.assertTrue(result.ok)
        self.assertEqual(len(result.activities), 2)
        self.assertEqual(result.activities[0].category, "Run")

    def test_provider_errors_become_error_strings(self):
        expired = fetch_source(Account("bob", "expired"), client_factory=FakeClient)
        limited = fetch_source(Account("carol", "limited"), client_factory=FakeClient)
        self.assertEqual(expired.error, "UNAUTHORIZED")
        self.assertEqual(limited.error, "RATE_LIMITED")
        self.assertIsNone(limited.activities)

    def test_cached_pool_is_reused(self):
        with tempfile.TemporaryDirectory() as tmp:
            first = fetch_source(Account("alice", "good"), after=100,
                                 client_factory=FakeClient, cache_dir=tmp)
            # An expired token would fail, so a hit proves the cache was used
            second = fetch_source(Account("alice", "expired"), after=100,
                                  client_factory=FakeClient, cache_dir=tmp)
            self.assertTrue(second.ok)
            self.assertEqual(second.activities, first.activities)

            other_window = fetch_source(Account("alice", "expired"), after=200,
                                        client_factory=FakeClient, cache_dir=tmp)
            self.assertFalse(other_window.ok)


class FetchAllSourcesTests(unittest.TestCase):
    def test_partial_failure_keeps_order_and_successes(self):
        accounts = [Account("alice", "good"), Account("bob", "expired"), Account("carol", "good")]
        results = fetch_all_sources(accounts, client_factory=FakeClient)

        self.assertEqual([r.source_id for r in results], ["alice", "bob", "carol"])
        self.assertEqual([r.ok for r in results], [True, False, True])

    def test_pending_sources_time_out(self):
        FakeClient.release.clear()
        try:
            results = fetch_all_sources(
                [Account("alice", "good"), Account("slow", "slow")],
                timeout=0.5, client_factory=FakeClient
            )
            stuck = [t for t in threading.enumerate() if t.name == "fetch-slow"]
        finally:
            FakeClient.release.set()

        self.assertTrue(results[0].ok)
        self.assertEqual(results[1].error, "Timed out")
        self.assertTrue(stuck)
        self.assertTrue(all(t.daemon for t in stuck))

    def test_duplicate_source_ids_keep_separate_results(self):
        results = fetch_all_sources(
            [Account("shared", "good"), Account("shared", "expired")], client_factory=FakeClient
        )
        self.assertEqual([r.ok for r in results], [True, False])

    def test_no_accounts(self):
        self.assertEqual(fetch_all_sources([], client_factory=FakeClient), [])


class LoadAccountsTests(unittest.TestCase):
    def test_load_accounts(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "accounts.json")
            with open(path, "w") as f:
                json.dump([{"id": 7, "access_token": "abc"}, {"access_token": "missing-id"}], f)

            self.assertEqual(load_accounts(path), [Account("7", "abc")])

    def test_missing_file(self):
        self.assertEqual(load_accounts("/nonexistent/accounts.json"), [])


if __name__ == "__main__":
    unittest.main()
