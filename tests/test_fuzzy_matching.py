"""
Test suite for fuzzy merchant matching.
"""

import unittest

from bookkeeping_engine.categorisation import FuzzyMerchantIndex, combined_similarity, clean_merchant_text
from bookkeeping_engine.categorisation.fuzzy import jaro_winkler_similarity, levenshtein_similarity
from bookkeeping_engine.patterns import KNOWN_MERCHANTS


class TestSimilarityMeasures(unittest.TestCase):
    """String similarity building blocks."""

    def test_identical_strings(self):
        """Identical strings are fully similar."""
        self.assertAlmostEqual(combined_similarity("starbucks", "starbucks"), 1.0)

    def test_levenshtein_similarity(self):
        """One edit in nine characters."""
        self.assertAlmostEqual(levenshtein_similarity("starbuks", "starbucks"), 1 - 1 / 9)

    def test_levenshtein_of_empty_strings(self):
        """Two empty strings are identical."""
        self.assertEqual(levenshtein_similarity("", ""), 1.0)

    def test_jaro_winkler_rewards_common_prefix(self):
        """Strings sharing a prefix score higher than ones sharing a suffix."""
        prefix = jaro_winkler_similarity("starbucks", "starbuxx")
        suffix = jaro_winkler_similarity("starbucks", "xxarbucks")
        self.assertGreater(prefix, suffix)

    def test_jaro_winkler_empty(self):
        """An empty string has no similarity."""
        self.assertEqual(jaro_winkler_similarity("", "abc"), 0.0)

    def test_combined_is_mean(self):
        """Combined similarity averages both measures."""
        a, b = "starbuks", "starbucks"
        expected = (jaro_winkler_similarity(a, b) + levenshtein_similarity(a, b)) / 2
        self.assertAlmostEqual(combined_similarity(a, b), expected)


class TestMerchantText(unittest.TestCase):
    """Merchant text cleaning."""

    def test_clean_merchant_text(self):
        """Digits and punctuation are dropped, apostrophes without a gap."""
        self.assertEqual(clean_merchant_text("McDonald's #4412"), "mcdonalds")
        self.assertEqual(clean_merchant_text("GRAND & TOY 55"), "grand & toy")


class TestFuzzyMerchantIndex(unittest.TestCase):
    """Index lookups."""

    def setUp(self):
        """Set up test fixtures."""
        self.index = FuzzyMerchantIndex(KNOWN_MERCHANTS)

    def test_typo_matches_merchant(self):
        """A misspelled merchant within the distance threshold matches."""
        match = self.index.find_match("STARBUKS COFFEE")

        self.assertIsNotNone(match)
        self.assertEqual(match.label, "Starbucks")
        self.assertEqual(match.category_code, "420")
        self.assertEqual(match.compared_text, "starbuks")
        self.assertLess(match.distance, 0.3)

    def test_unrelated_text_does_not_match(self):
        """Nothing is returned when no label is close enough."""
        self.assertIsNone(self.index.find_match("ZZQXJ UNKNOWN MERCHANT"))

    def test_short_text_is_ignored(self):
        """Text shorter than the minimum label length is not compared."""
        self.assertIsNone(self.index.best_match("A1"))

    def test_duplicate_labels_collapse(self):
        """Labels that clean to the same text are indexed once."""
        index = FuzzyMerchantIndex([
            {"label": "Tim Hortons", "category_code": "420"},
            {"label": "TIM HORTONS", "category_code": "453"},
        ])
        self.assertEqual(len(index), 1)
        self.assertEqual(index.labels, ["Tim Hortons"])

    def test_multi_word_label_uses_leading_window(self):
        """Two-word labels compare against the first two words of the text."""
        match = self.index.find_match("CANADIAN TIRE #221 MISSISSAUGA")

        self.assertIsNotNone(match)
        self.assertEqual(match.label, "Canadian Tire")
        self.assertAlmostEqual(match.similarity, 1.0)

    def test_stricter_threshold_rejects(self):
        """A tighter distance threshold rejects the same candidate."""
        self.assertIsNone(self.index.find_match("STARBUKS COFFEE", max_distance=0.01))


if __name__ == "__main__":
    unittest.main()
