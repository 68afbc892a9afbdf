"""
Chart of accounts for small-business bookkeeping.
Maps ledger category codes to account names, account types and account classes.
"""

from enum import Enum
from typing import Dict, Optional


class AccountClass(Enum):
    """Broad accounting class of a ledger account."""
    REVENUE = "revenue"
    ASSET = "asset"
    EXPENSE = "expense"
    LIABILITY = "liability"
    EQUITY = "equity"
    TRACKING = "tracking"


# Account type -> account class
ACCOUNT_TYPE_CLASSES = {
    "Revenue": AccountClass.REVENUE,
    "Other Income": AccountClass.REVENUE,
    "Accounts Receivable": AccountClass.ASSET,
    "Current Asset": AccountClass.ASSET,
    "Fixed Asset": AccountClass.ASSET,
    "Inventory": AccountClass.ASSET,
    "Non-current Asset": AccountClass.ASSET,
    "Direct Costs": AccountClass.EXPENSE,
    "Expense": AccountClass.EXPENSE,
    "Depreciation": AccountClass.EXPENSE,
    "Accounts Payable": AccountClass.LIABILITY,
    "Current Liability": AccountClass.LIABILITY,
    "Non-current Liability": AccountClass.LIABILITY,
    "Sales Tax": AccountClass.LIABILITY,
    "Wages Payable": AccountClass.LIABILITY,
    "Equity": AccountClass.EQUITY,
    "Tracking": AccountClass.TRACKING,
}


CHART_OF_ACCOUNTS = {
    # Revenue
    "200": {"name": "Sales Revenue", "type": "Revenue"},
    "220": {"name": "Service Revenue", "type": "Revenue"},
    "260": {"name": "Other Revenue", "type": "Revenue"},
    "270": {"name": "Interest Income", "type": "Revenue"},

    # Direct costs
    "310": {"name": "Cost of Goods Sold", "type": "Direct Costs"},
    "320": {"name": "Subcontractors", "type": "Direct Costs"},

    # Expenses
    "400": {"name": "Advertising", "type": "Expense"},
    "404": {"name": "Bank Fees", "type": "Expense"},
    "408": {"name": "Cleaning", "type": "Expense"},
    "412": {"name": "Consulting & Accounting", "type": "Expense"},
    "416": {"name": "Depreciation", "type": "Depreciation"},
    "420": {"name": "Entertainment", "type": "Expense"},
    "425": {"name": "Freight & Courier", "type": "Expense"},
    "429": {"name": "General Expenses", "type": "Expense"},
    "433": {"name": "Insurance", "type": "Expense"},
    "437": {"name": "Interest Expense", "type": "Expense"},
    "441": {"name": "Legal expenses", "type": "Expense"},
    "442": {"name": "Electricity", "type": "Expense"},
    "445": {"name": "Light, Power, Heating", "type": "Expense"},
    "449": {"name": "Motor Vehicle Expenses", "type": "Expense"},
    "453": {"name": "Office Expenses", "type": "Expense"},
    "455": {"name": "Supplies and Small Tools", "type": "Expense"},
    "461": {"name": "Printing & Stationery", "type": "Expense"},
    "469": {"name": "Rent", "type": "Expense"},
    "473": {"name": "Repairs and Maintenance", "type": "Expense"},
    "477": {"name": "Wages and Salaries", "type": "Expense"},
    "485": {"name": "Subscriptions", "type": "Expense"},
    "489": {"name": "Telephone & Internet", "type": "Expense"},
    "493": {"name": "Travel - National", "type": "Expense"},
    "494": {"name": "Travel - International", "type": "Expense"},
    "505": {"name": "Income Tax Expense", "type": "Expense"},

    # Assets
    "610": {"name": "Accounts Receivable", "type": "Accounts Receivable"},
    "620": {"name": "Prepayments", "type": "Current Asset"},
    "710": {"name": "Office Equipment", "type": "Fixed Asset"},
    "720": {"name": "Computer Equipment", "type": "Fixed Asset"},

    # Liabilities
    "800": {"name": "Accounts Payable", "type": "Accounts Payable"},
    "820": {"name": "Sales Tax", "type": "Sales Tax"},
    "825": {"name": "Employee Tax Payable", "type": "Current Liability"},
    "900": {"name": "Loan", "type": "Non-current Liability"},

    # Tracking and equity
    "877": {"name": "Tracking Transfers", "type": "Tracking"},
    "880": {"name": "Owner A Drawings", "type": "Equity"},
    "881": {"name": "Owner A Funds Introduced", "type": "Equity"},
    "960": {"name": "Retained Earnings", "type": "Equity"},
}


def get_account(category_code: str) -> Optional[Dict]:
    """
    Get account information for a category code.

    Args:
        category_code: Ledger category code

    Returns:
        Account dict with 'name' and 'type', or None if unknown
    """
    return CHART_OF_ACCOUNTS.get(str(category_code))


def get_account_name(category_code: str) -> Optional[str]:
    account = get_account(category_code)
    return account["name"] if account else None


def get_account_class(category_code: str) -> Optional[AccountClass]:
    """Return the account class of a code, or None for unrecognized codes."""
    account = get_account(category_code)
    if account is None:
        return None
    return ACCOUNT_TYPE_CLASSES.get(account["type"])
