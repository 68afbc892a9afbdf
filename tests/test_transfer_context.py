"""
Test suite for ambiguous transfer detection and context analysis.
"""

import unittest
from decimal import Decimal

from bookkeeping_engine.categorisation import TransferContextAnalyzer, is_ambiguous_transfer


class TestTransferDetection(unittest.TestCase):
    """Which descriptions count as ambiguous transfers."""

    def test_transfer_shapes(self):
        """Common person-to-person transfer wordings are detected."""
        for description in [
            "SEND E-TFR",
            "E-TRANSFER SENT JOHN",
            "ETFR 12345",
            "INTERAC MONEY TRANSFER",
            "EMAIL MONEY TRANSFER",
            "EMT RECEIVED",
        ]:
            with self.subTest(description=description):
                self.assertTrue(is_ambiguous_transfer(description))

    def test_fee_lines_are_not_transfers(self):
        """Transfer fee lines are left for the bank fee rules."""
        self.assertFalse(is_ambiguous_transfer("SEND E-TFR FEE"))
        self.assertFalse(is_ambiguous_transfer("E-TRANSFER FEE"))

    def test_other_descriptions(self):
        """Ordinary purchases and internal transfers are not ambiguous."""
        self.assertFalse(is_ambiguous_transfer("TIM HORTONS #183"))
        self.assertFalse(is_ambiguous_transfer(""))


class TestTransferContextAnalyzer(unittest.TestCase):
    """Purpose inference for ambiguous transfers."""

    def setUp(self):
        """Set up test fixtures."""
        self.analyzer = TransferContextAnalyzer()

    def test_single_family(self):
        """One matched family returns its base confidence."""
        context = self.analyzer.analyze("E-TRANSFER HYDRO BILL", Decimal("-120"))

        self.assertEqual(context.category_code, "442")
        self.assertEqual(context.confidence, 85)
        self.assertEqual(context.family, "utilities")
        self.assertIn("hydro", context.matched_keywords)
        self.assertTrue(context.has_context)

    def test_highest_base_confidence_wins_with_bonus(self):
        """Rent outranks food, and the second family adds a bonus."""
        context = self.analyzer.analyze("E-TFR RENT AND DINNER", Decimal("-900"))

        self.assertEqual(context.category_code, "469")
        self.assertEqual(context.confidence, 95)

    def test_confidence_is_capped(self):
        """Many matched families cannot push past the cap."""
        context = self.analyzer.analyze(
            "E-TFR RENT HYDRO CONTRACTOR GIFT DINNER LOAN", Decimal("-900")
        )

        self.assertEqual(context.category_code, "469")
        self.assertEqual(context.confidence, 95)

    def test_tie_keeps_first_family(self):
        """Families with equal base confidence keep declaration order."""
        context = self.analyzer.analyze("E-TFR PHONE REPAIR", Decimal("-80"))

        self.assertEqual(context.family, "utilities")
        self.assertEqual(context.confidence, 90)

    def test_keywords_match_at_word_start(self):
        """'rent' does not match inside 'current'."""
        context = self.analyzer.analyze("E-TFR CURRENT", Decimal("-50"))
        self.assertFalse(context.has_context)

    def test_amount_tiers_without_context(self):
        """Without keywords the confidence grows with the amount."""
        cases = [
            (Decimal("-500"), 25),
            (Decimal("-1000"), 35),
            (Decimal("2500"), 35),
            (Decimal("-5000"), 45),
            (Decimal("-12000"), 45),
        ]
        for amount, expected in cases:
            with self.subTest(amount=amount):
                context = self.analyzer.analyze("SEND E-TFR", amount)
                self.assertEqual(context.category_code, "877")
                self.assertEqual(context.confidence, expected)

    def test_from_config(self):
        """Analyzer settings come from the engine configuration."""
        analyzer = TransferContextAnalyzer.from_config({
            "transfer_context": {"review_code": "999", "family_bonus": 2, "confidence_cap": 91}
        })
        self.assertEqual(analyzer.analyze("SEND E-TFR", Decimal("-10")).category_code, "999")
        self.assertEqual(analyzer.analyze("E-TFR RENT AND DINNER", Decimal("-10")).confidence, 91)


if __name__ == "__main__":
    unittest.main()
