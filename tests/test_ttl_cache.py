"""TTL Cache Tests.

Tests for expiry, overwrite and housekeeping of the analysis result cache.
"""

import unittest
from datetime import timedelta

from optihub.core.errors import CacheMissError
from optihub.infrastructure.cache.ttl_cache import TTLCache

from project_fixtures import FakeClock


class TTLCacheTest(unittest.TestCase):
    """Test TTLCache behaviour against a controlled clock."""

    def setUp(self) -> None:
        self.clock = FakeClock()
        self.cache = TTLCache(clock=self.clock)

    def test_value_is_valid_until_ttl_elapses(self) -> None:
        """Test that an entry is readable before expiry and missing at expiry."""
        self.cache.set("AllTextureInfos", ["t1"], timedelta(minutes=5))

        self.clock.advance(minutes=4, seconds=59)
        self.assertTrue(self.cache.is_valid("AllTextureInfos"))
        self.assertEqual(self.cache.get("AllTextureInfos"), ["t1"])

        self.clock.advance(seconds=1)
        self.assertFalse(self.cache.is_valid("AllTextureInfos"))

    def test_get_on_missing_or_expired_raises(self) -> None:
        """Test that get() never returns an expired value."""
        with self.assertRaises(CacheMissError):
            self.cache.get("absent")

        self.cache.set("k", 1, 10)
        self.clock.advance(seconds=11)
        with self.assertRaises(KeyError) as ctx:
            self.cache.get("k")
        self.assertEqual(ctx.exception.key, "k")

    def test_try_get_returns_default(self) -> None:
        self.assertIsNone(self.cache.try_get("absent"))
        self.assertEqual(self.cache.try_get("absent", "fallback"), "fallback")

    def test_set_overwrites_and_restarts_ttl(self) -> None:
        """Test that set() replaces value and expiry relative to the new call."""
        self.cache.set("k", "old", 60)
        self.clock.advance(seconds=50)
        self.cache.set("k", "new", 60)
        self.clock.advance(seconds=50)

        self.assertEqual(self.cache.get("k"), "new")

    def test_remove_and_clear(self) -> None:
        self.cache.set("a", 1, 60)
        self.cache.set("b", 2, 60)

        self.assertTrue(self.cache.remove("a"))
        self.assertFalse(self.cache.remove("a"))
        self.assertNotIn("a", self.cache)
        self.assertIn("b", self.cache)

        self.cache.clear()
        self.assertEqual(len(self.cache), 0)

    def test_clear_expired_drops_only_expired(self) -> None:
        self.cache.set("short", 1, 10)
        self.cache.set("long", 2, 100)
        self.clock.advance(seconds=30)

        self.assertEqual(self.cache.clear_expired(), 1)
        count, keys = self.cache.stats()
        self.assertEqual(count, 1)
        self.assertEqual(keys, ["long"])

    def test_stats_include_expired_entries(self) -> None:
        """Test that stats report stored entries, expired or not."""
        self.cache.set("a", 1, 10)
        self.clock.advance(seconds=20)

        count, keys = self.cache.stats()
        self.assertEqual((count, keys), (1, ["a"]))
        self.assertFalse(self.cache.is_valid("a"))

    def test_detailed_stats_report_expiry(self) -> None:
        start = self.clock.now
        self.cache.set("a", 1, timedelta(minutes=5))

        self.assertEqual(self.cache.detailed_stats(), {"a": start + timedelta(minutes=5)})


if __name__ == "__main__":
    unittest.main()
