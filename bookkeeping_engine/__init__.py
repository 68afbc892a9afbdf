"""
Bookkeeping Engine - Transaction Categorization for Small-Business Ledgers.

Classifies free-text bank transaction descriptions into chart-of-accounts
categories with a confidence score and cash-flow direction, and learns from
user corrections.

Main Components:
    - categorisation: Cascade resolver and matching strategies
    - patterns: Static rule, merchant and transfer tables
    - learning: Custom keywords, learned patterns and corrections
    - persistence: SQL and local JSON stores with failover
    - config: Engine configuration and chart of accounts
    - reporting: pandas summaries of categorized transactions
"""

from typing import Dict, List, Optional

# Core categorisation components
from .categorisation import (
    CascadeResolver,
    Transaction,
    CategorizationResult,
    FlowDirection,
    MatchSource,
    Rule,
    RuleClass,
    RuleCatalog,
    InvalidRuleError,
    FuzzyMerchantIndex,
    ResultCache,
    classify_flow,
)

# Learning stores
from .learning import (
    CustomKeywordStore,
    LearnedPatternStore,
    CorrectionJournal,
    CustomKeyword,
    CustomKeywordRule,
    LearnedPattern,
    Correction,
)

# Persistence
from .persistence import (
    PersistencePort,
    PersistenceError,
    LocalJsonStore,
    SqlStore,
    FailoverPersistence,
    build_persistence,
)

# Configuration
from .config import ENGINE_CONFIG, CHART_OF_ACCOUNTS

from .reporting import build_category_summary, build_review_queue, results_to_dataframe


__version__ = "1.0.0"
__all__ = [
    # Categorisation
    "CascadeResolver",
    "Transaction",
    "CategorizationResult",
    "FlowDirection",
    "MatchSource",
    "Rule",
    "RuleClass",
    "RuleCatalog",
    "InvalidRuleError",
    "FuzzyMerchantIndex",
    "ResultCache",
    "classify_flow",
    # Learning
    "CustomKeywordStore",
    "LearnedPatternStore",
    "CorrectionJournal",
    "CustomKeyword",
    "CustomKeywordRule",
    "LearnedPattern",
    "Correction",
    # Persistence
    "PersistencePort",
    "PersistenceError",
    "LocalJsonStore",
    "SqlStore",
    "FailoverPersistence",
    "build_persistence",
    # Configuration
    "ENGINE_CONFIG",
    "CHART_OF_ACCOUNTS",
    # Reporting
    "build_category_summary",
    "build_review_queue",
    "results_to_dataframe",
    # Main functions
    "build_resolver",
    "run_categorization",
]


def build_resolver(
    persistence: Optional[PersistencePort] = None,
    config: Optional[Dict] = None,
    **persistence_kwargs
) -> CascadeResolver:
    """
    Build a ready-to-use resolver.

    Args:
        persistence: Persistence port (default: build_persistence(**persistence_kwargs))
        config: Engine configuration (default ENGINE_CONFIG)

    Returns:
        CascadeResolver loaded from persistence
    """
    if persistence is None:
        persistence = build_persistence(**persistence_kwargs)
    return CascadeResolver.from_persistence(persistence, config=config)


def run_categorization(
    transactions: List[Dict],
    resolver: Optional[CascadeResolver] = None,
    max_workers: Optional[int] = None,
    **persistence_kwargs
) -> Dict:
    """
    Main entry point for transaction categorization.

    This function orchestrates the complete pipeline:
    1. Build transactions from dicts
    2. Categorize every transaction through the cascade
    3. Summarize the results by category and flag low-confidence items

    Args:
        transactions: List of transaction dictionaries with keys:
            - id: (Optional) Transaction id
            - date: Transaction date (string)
            - amount: Transaction amount (positive = money in)
            - description: Transaction description (or 'name')
        resolver: Existing resolver (default: build_resolver(**persistence_kwargs))
        max_workers: Worker threads for categorization

    Returns:
        Dictionary containing:
            - categorized_transactions: List of categorized transaction dicts
            - category_summary: Per-category counts, totals and mean confidence
            - review_queue: Transactions below the review threshold
            - stats: Counts by match source

    Example:
        >>> result = run_categorization([
        ...     {"date": "2025-01-15", "amount": -12.47, "description": "TIM HORTONS #183"},
        ...     {"date": "2025-01-31", "amount": -16.95, "description": "MONTHLY SERVICE CHARGE"},
        ... ])
        >>> result["categorized_transactions"][0]["category_code"]
        '420'
    """
    if resolver is None:
        resolver = build_resolver(**persistence_kwargs)

    txns = [Transaction.from_dict(txn, index=i) for i, txn in enumerate(transactions)]
    categorized = resolver.categorize_transactions(txns, max_workers=max_workers)

    categorized_list = []
    source_counts: Dict[str, int] = {}
    for txn, result in categorized:
        row = txn.to_dict()
        row.update(result.to_dict())
        categorized_list.append(row)
        source = result.match_source.value
        source_counts[source] = source_counts.get(source, 0) + 1

    review_threshold = resolver.config["thresholds"]["review"]
    summary = build_category_summary(categorized)
    review = build_review_queue(categorized, threshold=review_threshold)

    return {
        "categorized_transactions": categorized_list,
        "category_summary": summary.to_dict(orient="records"),
        "review_queue": review.to_dict(orient="records"),
        "stats": {
            "total": len(categorized_list),
            "by_match_source": source_counts,
            "needs_review": len(review),
        },
    }
