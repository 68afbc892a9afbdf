"""
Test suite for learned patterns and the correction journal.
"""

import unittest
from datetime import datetime, timedelta, timezone

from bookkeeping_engine.categorisation import create_pattern_key
from bookkeeping_engine.learning import (
    Correction,
    CorrectionJournal,
    LearnedPattern,
    LearnedPatternStore,
    correction_key,
)


class RecordingPersistence:
    """Collects writes made by the stores."""

    def __init__(self):
        self.patterns = []
        self.corrections = []

    def save_learned_pattern(self, key, category_code, confidence):
        self.patterns.append((key, category_code, confidence))

    def record_correction(self, description, category_code):
        self.corrections.append((description, category_code))


class TestPatternKeys(unittest.TestCase):
    """Learned pattern key normalization."""

    def test_digits_collapse(self):
        """Digit runs become '#' and punctuation is dropped."""
        self.assertEqual(create_pattern_key("ACME WIDGETS 1234, TORONTO"), "acme widgets # toronto")
        self.assertEqual(create_pattern_key("ACME  WIDGETS 9999"), "acme widgets #")

    def test_empty(self):
        """Blank descriptions have an empty key."""
        self.assertEqual(create_pattern_key("  "), "")
        self.assertEqual(create_pattern_key(None), "")


class TestLearnedPatternStore(unittest.TestCase):
    """Learning and lookup."""

    def setUp(self):
        """Set up test fixtures."""
        self.persistence = RecordingPersistence()
        self.store = LearnedPatternStore(self.persistence)

    def test_learn_new_pattern(self):
        """A new key starts with usage 1 and is persisted."""
        pattern = self.store.learn("ACME WIDGETS 1234", "310")

        self.assertEqual(pattern.key, "acme widgets #")
        self.assertEqual(pattern.usage_count, 1)
        self.assertEqual(pattern.confidence, 90)
        self.assertEqual(self.persistence.patterns, [("acme widgets #", "310", 90)])

    def test_relearn_updates_category_and_usage(self):
        """Learning an existing key takes the new category and bumps usage."""
        self.store.learn("ACME WIDGETS 1234", "310")
        pattern = self.store.learn("ACME WIDGETS 5555", "320")

        self.assertEqual(pattern.category_code, "320")
        self.assertEqual(pattern.usage_count, 2)
        self.assertEqual(len(self.store), 1)

    def test_empty_key_not_learned(self):
        """Descriptions with nothing left after normalization are ignored."""
        self.assertIsNone(self.store.learn("!!!", "310"))
        self.assertEqual(len(self.store), 0)

    def test_exact_match(self):
        """Exact key hits return the stored confidence."""
        self.store.learn("ACME WIDGETS 1234", "310")

        match = self.store.find_match("acme widgets 77")

        self.assertTrue(match.exact)
        self.assertEqual(match.confidence, 90)

    def test_partial_match_penalized(self):
        """Containment hits lose the penalty, down to the floor."""
        self.store.learn("ACME WIDGETS 1234", "310")
        self.store.learn("LOW CONFIDENCE SHOP", "455", confidence=72)

        longer = self.store.find_match("ACME WIDGETS 5678 TORONTO")
        shorter = self.store.find_match("LOW CONFIDENCE")

        self.assertFalse(longer.exact)
        self.assertEqual(longer.confidence, 80)
        self.assertEqual(shorter.category_code, "455")
        self.assertEqual(shorter.confidence, 70)

    def test_short_keys_never_partial_match(self):
        """Keys under the minimum length only match exactly."""
        self.store.learn("AB", "310")
        self.assertIsNone(self.store.find_match("AB SUPPLY"))
        self.assertIsNotNone(self.store.find_match("ab"))

    def test_usage_increments_on_hit(self):
        """Hits bump the usage counter unless told not to."""
        self.store.learn("ACME WIDGETS 1234", "310")

        self.store.find_match("ACME WIDGETS 1")
        self.store.find_match("ACME WIDGETS 2", record_usage=False)

        self.assertEqual(self.store.get("acme widgets #").usage_count, 2)

    def test_touch_counts_use_of_known_key(self):
        """touch() bumps usage for stored keys and ignores unknown ones."""
        self.store.learn("ACME WIDGETS 1234", "310")

        self.assertTrue(self.store.touch("acme widgets #"))
        self.assertFalse(self.store.touch("no such key"))
        self.assertEqual(self.store.get("acme widgets #").usage_count, 2)
        self.assertEqual(len(self.store), 1)

    def test_learn_from_similar(self):
        """One category is applied to a group of descriptions."""
        learned = self.store.learn_from_similar(
            "ACME WIDGETS 1234", "310", ["ACME WIDGET CO", "WIDGETS ACME"]
        )

        self.assertEqual([p.key for p in learned], ["acme widgets #", "acme widget co", "widgets acme"])
        self.assertEqual(self.store.get_stats()["total_patterns"], 3)

    def test_load_replaces_contents(self):
        """load() swaps in stored patterns and skips empty keys."""
        self.store.learn("ACME WIDGETS 1234", "310")
        self.store.load([
            LearnedPattern(key="tim hortons ##", category_code="420", usage_count=7),
            LearnedPattern(key="  ", category_code="420"),
        ])

        self.assertEqual(len(self.store), 1)
        self.assertIsNone(self.store.get("acme widgets #"))
        self.assertEqual(self.store.get_stats()["total_usage"], 7)


class TestCorrectionJournal(unittest.TestCase):
    """Recording and replaying corrections."""

    def setUp(self):
        """Set up test fixtures."""
        self.persistence = RecordingPersistence()
        self.learned = LearnedPatternStore(self.persistence)
        self.journal = CorrectionJournal(self.learned, self.persistence)

    def test_record_teaches_learned_store(self):
        """A correction is persisted and learned as a pattern."""
        correction = self.journal.record("ACME WIDGETS 1234", "310")

        self.assertEqual(correction.category_code, "310")
        self.assertEqual(self.persistence.corrections, [("ACME WIDGETS 1234", "310")])
        self.assertEqual(self.learned.get("acme widgets #").category_code, "310")

    def test_lookup_ignores_case_and_surrounding_space(self):
        """The latest correction is found case-insensitively."""
        self.journal.record("SEND E-TFR", "877")
        self.journal.record("send e-tfr", "469")

        self.assertEqual(self.journal.lookup("  Send E-TFR ").category_code, "469")
        self.assertIsNone(self.journal.lookup("SEND E-TFR 2"))
        self.assertEqual(len(self.journal), 2)

    def test_lookup_collapses_inner_whitespace(self):
        """Runs of spaces inside a description do not hide a correction."""
        self.journal.record("SEND E-TFR", "469")

        self.assertEqual(self.journal.lookup("SEND  E-TFR").category_code, "469")
        self.assertEqual(self.journal.lookup("send\tE-TFR").category_code, "469")
        self.assertEqual(correction_key("  SEND   E-TFR "), "send e-tfr")

    def test_empty_corrections_rejected(self):
        """A correction needs a description and a category."""
        with self.assertRaises(ValueError):
            self.journal.record("   ", "310")
        with self.assertRaises(ValueError):
            self.journal.record("ACME", " ")

    def test_load_keeps_latest_by_timestamp(self):
        """Loaded corrections are replayed oldest first."""
        now = datetime.now(timezone.utc)
        self.journal.load([
            Correction("SEND E-TFR", "469", timestamp=now),
            Correction("SEND E-TFR", "877", timestamp=now - timedelta(days=1)),
        ])

        self.assertEqual(self.journal.lookup("SEND E-TFR").category_code, "469")
        self.assertEqual([c.category_code for c in self.journal.entries()], ["877", "469"])

    def test_listeners_receive_pattern_key(self):
        """Subscribers hear about the corrected description's key."""
        events = []
        self.journal.subscribe(lambda kind, values: events.append((kind, values)))

        self.journal.record("ACME WIDGETS 1234", "310")

        self.assertEqual(events, [("pattern", ("acme widgets #",))])


if __name__ == "__main__":
    unittest.main()
