import os
import pickle
import tempfile
import time
import unittest

from utils import cache_data, cache_path, get_cache_info, load_cached_data


class UtilsCacheTests(unittest.TestCase):
    def test_cache_round_trip(self):
        with tempfile.TemporaryDirectory() as tmp:
            cache_file = os.path.join(tmp, "nested", "cache.pkl")
            payload = {"activities": [{"id": 1}], "timestamp": time.time()}

            cache_data(payload, cache_file)
            self.assertTrue(os.path.exists(cache_file))

            self.assertEqual(load_cached_data(cache_file, max_age=60), payload)
            info = get_cache_info(cache_file)
            self.assertTrue(info["exists"])
            self.assertGreater(info["size"], 0)

    def test_stale_cache_is_ignored(self):
        with tempfile.TemporaryDirectory() as tmp:
            cache_file = os.path.join(tmp, "cache.pkl")
            with open(cache_file, "wb") as f:
                pickle.dump({"activities": [], "timestamp": 10.0}, f)

            self.assertIsNone(load_cached_data(cache_file, max_age=60))
            self.assertIsNotNone(load_cached_data(cache_file))

    def test_missing_and_corrupt_files(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertIsNone(load_cached_data(os.path.join(tmp, "missing.pkl")))

            corrupt = os.path.join(tmp, "corrupt.pkl")
            with open(corrupt, "wb") as f:
                f.write(b"not a pickle")
            self.assertIsNone(load_cached_data(corrupt))

    def test_cache_path_sanitizes_source_id(self):
        self.assertEqual(cache_path("cache", "user@example.com"), os.path.join("cache", "user_example_com.pkl"))


if __name__ == "__main__":
    unittest.main()
