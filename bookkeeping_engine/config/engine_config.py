"""
Engine configuration for transaction categorization.
Contains confidence levels, acceptance thresholds, fallback codes and cache settings.
"""

# Engine Configuration
# All confidences are integers on a 0-100 scale
ENGINE_CONFIG = {
    # Confidence assigned by each cascade step
    "confidence": {
        "correction": 100,
        "learned_pattern": 90,
        "learned_partial_penalty": 10,
        "learned_partial_floor": 70,
        "custom_keyword_default": 90,
        "fallback": 30,
    },

    # Acceptance thresholds
    "thresholds": {
        "keyword_rule_min": 50,  # weighted keyword rule score
        "catalog_min": 50,  # minimum rule confidence to accept a catalog match
        "fuzzy_max_distance": 0.3,  # accept when 1 - similarity < 0.3
        "auto_accept": 85,  # results at or above this need no review
        "review": 40,  # results below this are flagged for manual review
        "min_partial_key_length": 3,  # shorter learned keys never partial-match
    },

    # Ambiguous transfer context analysis
    "transfer_context": {
        "family_bonus": 5,  # per additional matched family
        "confidence_cap": 95,
        "review_code": "877",  # Tracking Transfers
    },

    # Fuzzy merchant matching
    "fuzzy": {
        "min_label_length": 3,
        "confidence_ceiling": 90,
        "confidence_floor": 70,
        "prefix_weight": 0.1,
    },

    # Fallback codes when nothing matches
    "fallback_codes": {
        "inflow": "260",  # Other Revenue
        "outflow": "453",  # Office Expenses
    },

    # Result cache
    "cache": {
        "enabled": True,
        "ttl_seconds": 3600,
        "max_entries": 2000,
    },

    # Batch categorization
    "batch": {
        "max_workers": 1,
    },
}
