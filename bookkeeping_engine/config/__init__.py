"""Configuration module for the categorization engine."""

from .engine_config import ENGINE_CONFIG
from .chart_of_accounts import (
    CHART_OF_ACCOUNTS,
    AccountClass,
    get_account,
    get_account_name,
    get_account_class,
)
from .rule_file_loader import load_rule_file, load_rule_csv, load_rule_json

__all__ = [
    "ENGINE_CONFIG",
    "CHART_OF_ACCOUNTS",
    "AccountClass",
    "get_account",
    "get_account_name",
    "get_account_class",
    "load_rule_file",
    "load_rule_csv",
    "load_rule_json",
]
