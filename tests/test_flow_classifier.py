"""
Test suite for cash-flow direction classification.
"""

import unittest
from decimal import Decimal

from bookkeeping_engine.categorisation import FlowDirection, classify_flow
from bookkeeping_engine.config.chart_of_accounts import AccountClass, get_account_class


class TestFlowClassification(unittest.TestCase):
    """Flow direction by account class and amount sign."""

    def test_revenue_follows_sign(self):
        """Revenue deposits are inflows, reversals outflows."""
        self.assertEqual(classify_flow("200", Decimal("150")), FlowDirection.INFLOW)
        self.assertEqual(classify_flow("200", Decimal("-150")), FlowDirection.OUTFLOW)

    def test_expense_is_always_outflow(self):
        """Expense codes report outflow for purchases and refunds."""
        self.assertEqual(classify_flow("420", Decimal("-12.47")), FlowDirection.OUTFLOW)
        self.assertEqual(classify_flow("420", Decimal("12.47")), FlowDirection.OUTFLOW)

    def test_direct_costs_are_expenses(self):
        """Direct cost accounts behave like expenses."""
        self.assertEqual(get_account_class("310"), AccountClass.EXPENSE)
        self.assertEqual(classify_flow("310", Decimal("40")), FlowDirection.OUTFLOW)

    def test_asset_liability_equity_follow_sign(self):
        """Balance sheet accounts follow the sign of the amount."""
        for code in ["610", "900", "881"]:
            with self.subTest(code=code):
                self.assertEqual(classify_flow(code, Decimal("10")), FlowDirection.INFLOW)
                self.assertEqual(classify_flow(code, Decimal("-10")), FlowDirection.OUTFLOW)

    def test_tracking_and_unknown_follow_sign(self):
        """Tracking and unrecognized codes follow the sign."""
        self.assertEqual(classify_flow("877", Decimal("-500")), FlowDirection.OUTFLOW)
        self.assertEqual(classify_flow("999", Decimal("5")), FlowDirection.INFLOW)
        self.assertEqual(classify_flow(None, Decimal("5")), FlowDirection.INFLOW)

    def test_zero_amount_is_outflow(self):
        """Zero is not money in."""
        self.assertEqual(classify_flow("260", Decimal("0")), FlowDirection.OUTFLOW)
        self.assertEqual(classify_flow("999", Decimal("0")), FlowDirection.OUTFLOW)
        self.assertEqual(classify_flow("877", Decimal("0.00")), FlowDirection.OUTFLOW)

    def test_account_class_override(self):
        """An explicit account class skips the chart lookup."""
        self.assertEqual(
            classify_flow("999", Decimal("5"), account_class=AccountClass.EXPENSE),
            FlowDirection.OUTFLOW,
        )


if __name__ == "__main__":
    unittest.main()
