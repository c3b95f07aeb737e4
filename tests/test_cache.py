"""Tests for HackathonCache."""

import unittest

from boundless.core.cache import HackathonCache, winners_cache_key
from tests.mock_utils import FakeClock


class HackathonCacheTestCase(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = HackathonCache(clock=self.clock)

    def test_get_returns_live_entry(self):
        entry = self.cache.set("k", {"a": 1}, ttl=10)
        self.assertEqual(self.cache.get("k"), entry)
        self.assertEqual(entry.data, {"a": 1})
        self.assertEqual(entry.expires_at, 1010.0)

    def test_entry_expires_after_ttl(self):
        self.cache.set("k", "v", ttl=10)
        self.clock.advance(10)
        self.assertIsNotNone(self.cache.get("k"))
        self.clock.advance(0.5)
        self.assertIsNone(self.cache.get("k"))
        self.assertEqual(len(self.cache), 0)

    def test_missing_key(self):
        self.assertIsNone(self.cache.get("missing"))

    def test_invalidate(self):
        self.cache.set("k", "v", ttl=10)
        self.cache.invalidate("k")
        self.cache.invalidate("never-set")
        self.assertIsNone(self.cache.get("k"))

    def test_invalidate_prefix(self):
        self.cache.set("hackathon:1:winners", 1, ttl=10)
        self.cache.set("hackathon:1:stats", 2, ttl=10)
        self.cache.set("hackathon:2:winners", 3, ttl=10)
        self.cache.invalidate_prefix("hackathon:1:")
        self.assertEqual(len(self.cache), 1)
        self.assertIsNotNone(self.cache.get("hackathon:2:winners"))

    def test_clear(self):
        self.cache.set("a", 1, ttl=10)
        self.cache.set("b", 2, ttl=10)
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)

    def test_cleanup_drops_only_expired(self):
        self.cache.set("short", 1, ttl=5)
        self.cache.set("long", 2, ttl=50)
        self.clock.advance(6)
        self.assertEqual(self.cache.cleanup(), 1)
        self.assertIsNone(self.cache.get("short"))
        self.assertIsNotNone(self.cache.get("long"))

    def test_etag_depends_on_content(self):
        first = self.cache.set("a", {"x": 1, "y": 2}, ttl=10)
        same = self.cache.set("b", {"y": 2, "x": 1}, ttl=10)
        other = self.cache.set("c", {"x": 2}, ttl=10)
        self.assertEqual(first.etag, same.etag)
        self.assertNotEqual(first.etag, other.etag)
        self.assertTrue(first.etag.startswith('"') and first.etag.endswith('"'))

    def test_winners_key(self):
        self.assertEqual(winners_cache_key("h1"), "hackathon:h1:winners")


if __name__ == "__main__":
    unittest.main()
