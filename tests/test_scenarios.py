"""
End-to-end categorization scenarios.

Runs realistic bank feed descriptions through the full cascade with the
packaged rule catalog and checks category, confidence, flow and source.
"""

import unittest
from decimal import Decimal

from bookkeeping_engine.categorisation import (
    CascadeResolver,
    FlowDirection,
    MatchSource,
    RuleCatalog,
    Transaction,
)
from bookkeeping_engine.learning import CustomKeywordStore, LearnedPatternStore
from bookkeeping_engine.patterns import SYSTEM_RULES


def build_resolver(use_cache: bool = True) -> CascadeResolver:
    return CascadeResolver(
        RuleCatalog.from_entries(SYSTEM_RULES),
        CustomKeywordStore(),
        LearnedPatternStore(),
        use_cache=use_cache,
    )


class TestKnownMerchantScenarios(unittest.TestCase):
    """Descriptions resolved by the static rule catalog."""

    def setUp(self):
        """Set up test fixtures."""
        self.resolver = build_resolver()

    def test_coffee_shop_purchase(self):
        """Tim Hortons purchase is Meals & Entertainment from the merchant rule."""
        result = self.resolver.categorize(Transaction(
            id="t1", date="2025-01-15", description="TIM HORTONS #183", amount=Decimal("-12.47")
        ))

        self.assertEqual(result.category_code, "420")
        self.assertEqual(result.confidence, 96)
        self.assertEqual(result.flow_direction, FlowDirection.OUTFLOW)
        self.assertEqual(result.match_source, MatchSource.RULE_CATALOG)
        self.assertEqual(result.merchant_label, "Tim Hortons")
        self.assertFalse(result.needs_review)

    def test_monthly_service_charge(self):
        """Service charges hit the training rule at full confidence."""
        result = self.resolver.categorize_description("MONTHLY SERVICE CHARGE", Decimal("-16.95"))

        self.assertEqual(result.category_code, "404")
        self.assertEqual(result.confidence, 100)
        self.assertEqual(result.flow_direction, FlowDirection.OUTFLOW)
        self.assertEqual(result.match_source, MatchSource.RULE_CATALOG)
        self.assertEqual(result.category_name, "Bank Fees")


class TestTransferScenarios(unittest.TestCase):
    """Ambiguous person-to-person transfers."""

    def setUp(self):
        """Set up test fixtures."""
        self.resolver = build_resolver()

    def test_bare_etransfer_goes_to_review(self):
        """A transfer with no purpose keyword is routed to manual review."""
        result = self.resolver.categorize_description("SEND E-TFR", Decimal("-500"))

        self.assertEqual(result.category_code, "877")
        self.assertEqual(result.confidence, 25)
        self.assertEqual(result.flow_direction, FlowDirection.OUTFLOW)
        self.assertEqual(result.match_source, MatchSource.TRANSFER_CONTEXT)
        self.assertTrue(result.needs_review)

    def test_correction_overrides_transfer_review(self):
        """After a correction the same transfer returns the corrected category."""
        self.resolver.categorize_description("SEND E-TFR", Decimal("-500"))
        self.resolver.record_correction("SEND E-TFR", "469")

        result = self.resolver.categorize_description("SEND E-TFR", Decimal("-500"))

        self.assertEqual(result.category_code, "469")
        self.assertEqual(result.confidence, 100)
        self.assertEqual(result.match_source, MatchSource.CORRECTION)
        self.assertEqual(result.flow_direction, FlowDirection.OUTFLOW)
        self.assertFalse(result.needs_review)

    def test_rent_etransfer_uses_context(self):
        """Rent keywords in the memo pick the rent family."""
        result = self.resolver.categorize_description("E-TRANSFER TO LANDLORD RENT MARCH", Decimal("-1800"))

        self.assertEqual(result.category_code, "469")
        self.assertEqual(result.match_source, MatchSource.TRANSFER_CONTEXT)
        self.assertEqual(result.confidence, 90)

    def test_etransfer_fee_is_bank_fee(self):
        """Fee lines are not treated as ambiguous transfers."""
        result = self.resolver.categorize_description("SEND E-TFR FEE", Decimal("-1.50"))

        self.assertEqual(result.category_code, "404")
        self.assertEqual(result.match_source, MatchSource.RULE_CATALOG)


class TestFallbackAndFuzzyScenarios(unittest.TestCase):
    """Unknown and misspelled merchants."""

    def setUp(self):
        """Set up test fixtures."""
        self.resolver = build_resolver()

    def test_unknown_deposit_falls_back_to_revenue(self):
        """Unmatched money in goes to Other Revenue for review."""
        result = self.resolver.categorize_description("ZZQXJ UNKNOWN MERCHANT", Decimal("100"))

        self.assertEqual(result.category_code, "260")
        self.assertEqual(result.confidence, 30)
        self.assertEqual(result.flow_direction, FlowDirection.INFLOW)
        self.assertEqual(result.match_source, MatchSource.FALLBACK)
        self.assertTrue(result.needs_review)

    def test_unknown_payment_falls_back_to_office_expenses(self):
        """Unmatched money out goes to the general expense account."""
        result = self.resolver.categorize_description("ZZQXJ UNKNOWN MERCHANT", Decimal("-100"))

        self.assertEqual(result.category_code, "453")
        self.assertEqual(result.flow_direction, FlowDirection.OUTFLOW)
        self.assertEqual(result.match_source, MatchSource.FALLBACK)

    def test_misspelled_merchant_matches_fuzzily(self):
        """A typo in a known merchant name still finds the merchant."""
        result = self.resolver.categorize_description("STARBUKS COFFEE", Decimal("-5.25"))

        self.assertEqual(result.match_source, MatchSource.FUZZY_MERCHANT)
        self.assertEqual(result.merchant_label, "Starbucks")
        self.assertEqual(result.category_code, "420")
        self.assertGreaterEqual(result.confidence, 70)
        self.assertLessEqual(result.confidence, 90)


class TestLearningScenarios(unittest.TestCase):
    """Corrections teach similar descriptions."""

    def setUp(self):
        """Set up test fixtures."""
        self.resolver = build_resolver()
        self.resolver.record_correction("ACME WIDGETS 1234", "310")

    def test_same_shape_different_number_is_exact(self):
        """Digits normalize away, so another store number is an exact learned hit."""
        result = self.resolver.categorize_description("ACME WIDGETS 9999", Decimal("-40"))

        self.assertEqual(result.category_code, "310")
        self.assertEqual(result.match_source, MatchSource.LEARNED_PATTERN)
        self.assertEqual(result.confidence, 90)

    def test_longer_description_is_partial(self):
        """A description containing the learned key matches at reduced confidence."""
        result = self.resolver.categorize_description("ACME WIDGETS 5678 TORONTO", Decimal("-40"))

        self.assertEqual(result.category_code, "310")
        self.assertEqual(result.match_source, MatchSource.LEARNED_PATTERN)
        self.assertEqual(result.confidence, 80)

    def test_original_description_uses_correction(self):
        """The corrected description itself resolves through the journal."""
        result = self.resolver.categorize_description("acme widgets 1234 ", Decimal("-40"))

        self.assertEqual(result.match_source, MatchSource.CORRECTION)
        self.assertEqual(result.confidence, 100)


if __name__ == "__main__":
    unittest.main()
