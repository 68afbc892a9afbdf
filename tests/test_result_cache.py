"""
Test suite for the categorization result cache.
"""

import unittest
from decimal import Decimal

from bookkeeping_engine.categorisation import (
    CategorizationResult,
    FlowDirection,
    MatchSource,
    ResultCache,
    fingerprint,
)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_result(code="420"):
    return CategorizationResult(
        category_code=code,
        confidence=96,
        flow_direction=FlowDirection.OUTFLOW,
        match_source=MatchSource.RULE_CATALOG,
    )


class TestFingerprint(unittest.TestCase):
    """Cache keys."""

    def test_normalized_description(self):
        """Case and spacing do not change the fingerprint."""
        self.assertEqual(
            fingerprint("TIM  HORTONS #183 ", Decimal("-12.47"), "v1"),
            fingerprint("tim hortons #183", Decimal("-12.47"), "v1"),
        )

    def test_amount_and_version_matter(self):
        """Different amounts or rule versions give different keys."""
        base = fingerprint("tim hortons", Decimal("-12.47"), "v1")
        self.assertNotEqual(base, fingerprint("tim hortons", Decimal("12.47"), "v1"))
        self.assertNotEqual(base, fingerprint("tim hortons", Decimal("-12.47"), "v2"))


class TestResultCache(unittest.TestCase):
    """TTL, LRU and invalidation."""

    def setUp(self):
        """Set up test fixtures."""
        self.clock = FakeClock()
        self.cache = ResultCache(ttl_seconds=60, max_entries=3, clock=self.clock)

    def test_hit_and_miss(self):
        """Stored results are returned until they expire."""
        self.assertIsNone(self.cache.get("tim hortons", Decimal("-1"), "v1"))
        self.cache.put("tim hortons", Decimal("-1"), "v1", make_result())

        self.assertEqual(self.cache.get("TIM HORTONS", Decimal("-1"), "v1"), make_result())
        stats = self.cache.get_stats()
        self.assertEqual(stats["hits"], 1)
        self.assertEqual(stats["misses"], 1)

    def test_entries_expire(self):
        """Entries older than the TTL are dropped."""
        self.cache.put("tim hortons", Decimal("-1"), "v1", make_result())
        self.clock.advance(59)
        self.assertIsNotNone(self.cache.get("tim hortons", Decimal("-1"), "v1"))

        self.clock.advance(1)
        self.assertIsNone(self.cache.get("tim hortons", Decimal("-1"), "v1"))
        self.assertEqual(len(self.cache), 0)

    def test_least_recently_used_evicted(self):
        """The entry not read for longest is evicted first."""
        for name in ["a shop", "b shop", "c shop"]:
            self.cache.put(name, Decimal("-1"), "v1", make_result())
        self.cache.get("a shop", Decimal("-1"), "v1")

        self.cache.put("d shop", Decimal("-1"), "v1", make_result())

        self.assertEqual(len(self.cache), 3)
        self.assertIsNone(self.cache.get("b shop", Decimal("-1"), "v1"))
        self.assertIsNotNone(self.cache.get("a shop", Decimal("-1"), "v1"))

    def test_invalidate_pattern(self):
        """Entries whose key contains or is contained in the pattern are dropped."""
        self.cache.put("ACME WIDGETS 1234", Decimal("-1"), "v1", make_result())
        self.cache.put("ACME WIDGETS 5678 TORONTO", Decimal("-1"), "v1", make_result())
        self.cache.put("TIM HORTONS", Decimal("-1"), "v1", make_result())

        dropped = self.cache.invalidate_pattern("acme widgets #")

        self.assertEqual(dropped, 2)
        self.assertIsNotNone(self.cache.get("TIM HORTONS", Decimal("-1"), "v1"))

    def test_invalidate_keywords(self):
        """Entries containing a changed keyword are dropped."""
        self.cache.put("TIM HORTONS #183", Decimal("-1"), "v1", make_result())
        self.cache.put("STARBUCKS", Decimal("-1"), "v1", make_result())

        self.assertEqual(self.cache.invalidate_keywords(["Hortons"]), 1)
        self.assertEqual(self.cache.invalidate_keywords([]), 0)
        self.assertEqual(len(self.cache), 1)

    def test_clear(self):
        """clear() drops everything."""
        self.cache.put("tim hortons", Decimal("-1"), "v1", make_result())
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)

    def test_max_entries_must_be_positive(self):
        """A cache must hold at least one entry."""
        with self.assertRaises(ValueError):
            ResultCache(max_entries=0)


if __name__ == "__main__":
    unittest.main()
