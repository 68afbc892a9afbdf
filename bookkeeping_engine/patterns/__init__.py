"""Transaction categorization patterns and static data tables."""

from .transaction_patterns import (
    SYSTEM_RULES,
    RULE_CLASS_PRIORITIES,
    KNOWN_MERCHANTS,
    TRANSFER_SHAPE_PATTERNS,
    TRANSFER_CONTEXT_FAMILIES,
    TRANSFER_AMOUNT_TIERS,
)

__all__ = [
    "SYSTEM_RULES",
    "RULE_CLASS_PRIORITIES",
    "KNOWN_MERCHANTS",
    "TRANSFER_SHAPE_PATTERNS",
    "TRANSFER_CONTEXT_FAMILIES",
    "TRANSFER_AMOUNT_TIERS",
]
