"""
Cash-flow direction classification.

Revenue and asset accounts follow the sign of the amount. Expense accounts
are debit-normal, so they always report outflow (a positive amount on an
expense code is a refund reducing the outflow). Liability, equity, tracking
and unrecognized codes follow the sign of the amount.

A zero amount is outflow for every class, unrecognized codes included.
"""

from decimal import Decimal
from typing import Optional

from .models import FlowDirection
from ..config.chart_of_accounts import AccountClass, get_account_class


def _by_sign(amount: Decimal) -> FlowDirection:
    return FlowDirection.INFLOW if amount > 0 else FlowDirection.OUTFLOW


def classify_flow(
    category_code: Optional[str],
    amount: Decimal,
    account_class: Optional[AccountClass] = None
) -> FlowDirection:
    """
    Classify the cash-flow direction of a categorized transaction.

    Args:
        category_code: Ledger category code
        amount: Signed amount (positive = money in)
        account_class: Override for the chart-of-accounts lookup

    Returns:
        FlowDirection.INFLOW or FlowDirection.OUTFLOW
    """
    if account_class is None and category_code is not None:
        account_class = get_account_class(category_code)

    if account_class is AccountClass.EXPENSE:
        return FlowDirection.OUTFLOW
    return _by_sign(amount)
