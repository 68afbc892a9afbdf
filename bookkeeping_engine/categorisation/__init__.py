"""
Categorisation Module for the bookkeeping engine.

Orchestrates transaction categorization through:
- Preprocessing (normalization, learned pattern keys)
- Pattern matching (rule catalog predicates)
- Ambiguous transfer context analysis
- Fuzzy merchant matching
- Cash-flow classification and result caching
"""

from .models import Transaction, CategorizationResult, FlowDirection, MatchSource, to_decimal
from .preprocess import normalize_text, create_pattern_key, clean_merchant_text
from .pattern_matching import (
    MatchPredicate,
    LiteralPredicate,
    RegexPredicate,
    CompiledPredicate,
    build_predicate,
    match_keywords,
)
from .rule_catalog import Rule, RuleClass, RuleCatalog, InvalidRuleError, rule_from_entry
from .fuzzy import FuzzyMerchantIndex, FuzzyMatch, combined_similarity
from .transfer_context import TransferContextAnalyzer, TransferContext, is_ambiguous_transfer
from .flow import classify_flow
from .cache import ResultCache, fingerprint
# Imported last: the resolver depends on the learning and persistence packages
from .engine import CascadeResolver

__all__ = [
    # Main resolver
    "CascadeResolver",
    # Data types
    "Transaction",
    "CategorizationResult",
    "FlowDirection",
    "MatchSource",
    "to_decimal",
    # Preprocessing utilities
    "normalize_text",
    "create_pattern_key",
    "clean_merchant_text",
    # Pattern matching utilities
    "MatchPredicate",
    "LiteralPredicate",
    "RegexPredicate",
    "CompiledPredicate",
    "build_predicate",
    "match_keywords",
    # Rule catalog
    "Rule",
    "RuleClass",
    "RuleCatalog",
    "InvalidRuleError",
    "rule_from_entry",
    # Matchers
    "FuzzyMerchantIndex",
    "FuzzyMatch",
    "combined_similarity",
    "TransferContextAnalyzer",
    "TransferContext",
    "is_ambiguous_transfer",
    "classify_flow",
    "ResultCache",
    "fingerprint",
]
