"""
Cascade Resolver for transaction categorization.

Runs the matching strategies in strict precedence order and returns the
first acceptable match:

1. User corrections (exact description)
2. Ambiguous transfer context analysis
3. Custom keywords and keyword rules
4. Learned patterns
5. Static rule catalog
6. Fuzzy merchant matching
7. Fallback by amount sign
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .cache import ResultCache
from .flow import classify_flow
from .fuzzy import FuzzyMerchantIndex
from .models import CategorizationResult, MatchSource, Transaction, to_decimal
from .preprocess import create_pattern_key, normalize_text
from .rule_catalog import RuleCatalog
from .transfer_context import TransferContextAnalyzer, is_ambiguous_transfer
from ..config.chart_of_accounts import get_account_name
from ..config.engine_config import ENGINE_CONFIG
from ..learning.corrections import CorrectionJournal
from ..learning.keywords import CustomKeywordStore
from ..learning.learned_patterns import LearnedPatternStore
from ..learning.models import Correction, LearnedPattern
from ..patterns.transaction_patterns import KNOWN_MERCHANTS
from ..persistence.port import PersistencePort

logger = logging.getLogger(__name__)


class CascadeResolver:
    """Categorizes transactions through the matching cascade."""

    def __init__(
        self,
        rule_catalog: RuleCatalog,
        keyword_store: CustomKeywordStore,
        learned_store: LearnedPatternStore,
        persistence: Optional[PersistencePort] = None,
        correction_journal: Optional[CorrectionJournal] = None,
        merchant_index: Optional[FuzzyMerchantIndex] = None,
        cache: Optional[ResultCache] = None,
        config: Optional[Dict] = None,
        use_cache: bool = True
    ):
        """
        Initialize the resolver.

        Args:
            rule_catalog: Static rule catalog
            keyword_store: Custom keyword store
            learned_store: Learned pattern store
            persistence: Persistence port used by stores built here
            correction_journal: Journal of corrections (built on the learned
                store if not given)
            merchant_index: Fuzzy merchant index (built from the packaged
                merchant list and merchant-class rules if not given)
            cache: Result cache (built from config if not given)
            config: Engine configuration dict (default ENGINE_CONFIG)
            use_cache: Set False to disable result caching
        """
        self.config = config or ENGINE_CONFIG
        self.rule_catalog = rule_catalog
        self.keyword_store = keyword_store
        self.learned_store = learned_store
        self.persistence = persistence

        self.correction_journal = correction_journal or CorrectionJournal(learned_store, persistence)

        fuzzy_config = self.config["fuzzy"]
        self.merchant_index = merchant_index or FuzzyMerchantIndex(
            list(KNOWN_MERCHANTS) + rule_catalog.merchant_entries(),
            min_label_length=fuzzy_config["min_label_length"],
            prefix_weight=fuzzy_config["prefix_weight"],
        )
        self.transfer_analyzer = TransferContextAnalyzer.from_config(self.config)

        cache_config = self.config["cache"]
        if not use_cache or not cache_config.get("enabled", True):
            self.cache = None
        else:
            self.cache = cache or ResultCache(
                ttl_seconds=cache_config["ttl_seconds"],
                max_entries=cache_config["max_entries"],
            )

        self._usage_lock = threading.Lock()
        self._category_usage: Dict[str, int] = {}
        self._source_counts: Dict[str, int] = {}

        self.keyword_store.subscribe(self._on_store_change)
        self.learned_store.subscribe(self._on_store_change)
        self.correction_journal.subscribe(self._on_store_change)

        logger.info(
            f"Cascade resolver ready: {len(rule_catalog)} rules (version {rule_catalog.version}), "
            f"{len(self.merchant_index)} merchant labels, {len(learned_store)} learned patterns"
        )

    @classmethod
    def from_persistence(
        cls,
        persistence: PersistencePort,
        config: Optional[Dict] = None,
        **kwargs
    ) -> "CascadeResolver":
        """
        Build a resolver and all its stores from a persistence port.

        Pass a FailoverPersistence so failed reads degrade to empty stores
        instead of raising.
        """
        config = config or ENGINE_CONFIG
        confidence = config["confidence"]
        thresholds = config["thresholds"]

        catalog = RuleCatalog.from_entries(persistence.load_rule_catalog())

        keyword_store = CustomKeywordStore(
            persistence,
            default_confidence=confidence["custom_keyword_default"],
            rule_threshold=thresholds["keyword_rule_min"],
        )
        keyword_store.load(persistence.load_custom_keywords(), persistence.load_keyword_rules())

        learned_store = LearnedPatternStore(
            persistence,
            learned_confidence=confidence["learned_pattern"],
            partial_penalty=confidence["learned_partial_penalty"],
            partial_floor=confidence["learned_partial_floor"],
            min_partial_key_length=thresholds["min_partial_key_length"],
        )
        learned_store.load(persistence.load_learned_patterns())

        journal = CorrectionJournal(learned_store, persistence)
        journal.load(persistence.load_corrections())

        return cls(
            catalog,
            keyword_store,
            learned_store,
            persistence,
            correction_journal=journal,
            config=config,
            **kwargs
        )

    # ------------------------------------------------------------------
    # Categorization
    # ------------------------------------------------------------------

    def categorize(self, transaction: Transaction) -> CategorizationResult:
        """
        Categorize a single transaction.

        Never raises for unmatched input: the fallback step always answers.

        Args:
            transaction: Transaction to categorize

        Returns:
            CategorizationResult
        """
        description = transaction.description or ""
        amount = to_decimal(transaction.amount)

        if self.cache is not None:
            cached = self.cache.get(description, amount, self.rule_catalog.version)
            if cached is not None:
                if cached.match_source is MatchSource.LEARNED_PATTERN and cached.rule_id:
                    self.learned_store.touch(cached.rule_id)
                self._record_usage(cached)
                return cached

        result = self._resolve(description, amount)

        if self.cache is not None:
            self.cache.put(description, amount, self.rule_catalog.version, result)
        self._record_usage(result)
        return result

    def categorize_description(self, description: str, amount=0) -> CategorizationResult:
        """Categorize a bare description and amount."""
        return self.categorize(Transaction(id="", date="", description=description, amount=to_decimal(amount)))

    def categorize_transactions(
        self,
        transactions: Iterable[Transaction],
        max_workers: Optional[int] = None
    ) -> List[Tuple[Transaction, CategorizationResult]]:
        """
        Categorize a list of transactions.

        Args:
            transactions: Transactions to categorize
            max_workers: Worker threads (default from config); results keep
                input order either way

        Returns:
            List of tuples (transaction, result)
        """
        workers = max_workers if max_workers is not None else self.config["batch"]["max_workers"]
        if workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {workers}")

        txns = list(transactions)
        if workers == 1 or len(txns) < 2:
            results = [self.categorize(txn) for txn in txns]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(self.categorize, txns))

        logger.debug(f"Categorized {len(txns)} transactions with {workers} worker(s)")
        return list(zip(txns, results))

    def categorize_batch(
        self,
        transactions: Iterable[Transaction],
        max_workers: Optional[int] = None
    ) -> List[Transaction]:
        """
        Categorize transactions, returning categorized copies in input order.

        The inputs are not modified.
        """
        return [
            replace(
                txn,
                category_code=result.category_code,
                confidence=result.confidence,
                merchant_label=result.merchant_label,
                flow_direction=result.flow_direction,
            )
            for txn, result in self.categorize_transactions(transactions, max_workers)
        ]

    def _resolve(
        self,
        description: str,
        amount: Decimal,
        record_usage: bool = True
    ) -> CategorizationResult:
        steps = (
            self._match_correction,
            self._match_transfer_context,
            self._match_custom_keyword,
            lambda d, a: self._match_learned_pattern(d, a, record_usage),
            self._match_rule_catalog,
            self._match_fuzzy_merchant,
        )
        for step in steps:
            result = step(description, amount)
            if result is not None:
                logger.debug(
                    f"'{description}' -> {result.category_code} "
                    f"({result.match_source.value}, {result.confidence})"
                )
                return result
        return self._fallback(description, amount)

    def _build_result(
        self,
        category_code: str,
        confidence: float,
        match_source: MatchSource,
        amount: Decimal,
        merchant_label: Optional[str] = None,
        reasoning: str = "",
        rule_id: Optional[str] = None
    ) -> CategorizationResult:
        confidence = max(0, min(100, int(round(confidence))))
        return CategorizationResult(
            category_code=category_code,
            confidence=confidence,
            flow_direction=classify_flow(category_code, amount),
            match_source=match_source,
            merchant_label=merchant_label,
            category_name=get_account_name(category_code),
            needs_review=confidence < self.config["thresholds"]["review"],
            reasoning=reasoning,
            rule_id=rule_id,
        )

    def _match_correction(self, description: str, amount: Decimal) -> Optional[CategorizationResult]:
        correction = self.correction_journal.lookup(description)
        if correction is None:
            return None
        return self._build_result(
            correction.category_code,
            self.config["confidence"]["correction"],
            MatchSource.CORRECTION,
            amount,
            reasoning="User correction for this description",
        )

    def _match_transfer_context(self, description: str, amount: Decimal) -> Optional[CategorizationResult]:
        if not is_ambiguous_transfer(description):
            return None
        context = self.transfer_analyzer.analyze(description, amount)
        if context.has_context:
            reasoning = (
                f"Transfer purpose '{context.description}' from keywords "
                f"{', '.join(context.matched_keywords)}"
            )
        else:
            reasoning = "Transfer with no purpose keywords, manual review needed"
        return self._build_result(
            context.category_code,
            context.confidence,
            MatchSource.TRANSFER_CONTEXT,
            amount,
            reasoning=reasoning,
        )

    def _match_custom_keyword(self, description: str, amount: Decimal) -> Optional[CategorizationResult]:
        match = self.keyword_store.find_match(description)
        if match is None:
            return None
        kind = "keyword rule" if match.is_rule else "custom keyword"
        return self._build_result(
            match.category_code,
            match.confidence,
            MatchSource.CUSTOM_KEYWORD,
            amount,
            reasoning=f"Matched {kind} {', '.join(match.matched_keywords)}",
            rule_id=match.source_id,
        )

    def _match_learned_pattern(
        self,
        description: str,
        amount: Decimal,
        record_usage: bool = True
    ) -> Optional[CategorizationResult]:
        match = self.learned_store.find_match(description, record_usage=record_usage)
        if match is None:
            return None
        kind = "exact" if match.exact else "partial"
        return self._build_result(
            match.category_code,
            match.confidence,
            MatchSource.LEARNED_PATTERN,
            amount,
            reasoning=f"Learned pattern '{match.key}' ({kind} match)",
            rule_id=match.key,
        )

    def _match_rule_catalog(self, description: str, amount: Decimal) -> Optional[CategorizationResult]:
        rule = self.rule_catalog.find_best_match(
            description,
            min_confidence=self.config["thresholds"]["catalog_min"],
        )
        if rule is None:
            return None
        return self._build_result(
            rule.category_code,
            rule.confidence,
            MatchSource.RULE_CATALOG,
            amount,
            merchant_label=rule.merchant_label,
            reasoning=f"Matched {rule.rule_class.value} rule '{rule.rule_id}'",
            rule_id=rule.rule_id,
        )

    def _match_fuzzy_merchant(self, description: str, amount: Decimal) -> Optional[CategorizationResult]:
        match = self.merchant_index.find_match(
            description,
            max_distance=self.config["thresholds"]["fuzzy_max_distance"],
        )
        if match is None:
            return None
        fuzzy_config = self.config["fuzzy"]
        confidence = max(
            fuzzy_config["confidence_floor"],
            fuzzy_config["confidence_ceiling"] - match.distance * 100,
        )
        return self._build_result(
            match.category_code,
            confidence,
            MatchSource.FUZZY_MERCHANT,
            amount,
            merchant_label=match.label,
            reasoning=f"Similar to merchant '{match.label}' (similarity {match.similarity:.2f})",
        )

    def _fallback(self, description: str, amount: Decimal) -> CategorizationResult:
        codes = self.config["fallback_codes"]
        category_code = codes["inflow"] if amount > 0 else codes["outflow"]
        logger.debug(f"No match for '{description}', falling back to {category_code}")
        return self._build_result(
            category_code,
            self.config["confidence"]["fallback"],
            MatchSource.FALLBACK,
            amount,
            reasoning="No match found, categorized by amount sign",
        )

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    def record_correction(self, description: str, category_code: str) -> Correction:
        """
        Record a user correction.

        The next categorization of the same description returns the
        corrected category at full confidence, and similar descriptions
        pick it up through the learned pattern.
        """
        return self.correction_journal.record(description, category_code)

    def learn_from_similar(
        self,
        source_description: str,
        category_code: str,
        similar_descriptions: Iterable[str]
    ) -> List[LearnedPattern]:
        """Apply one category to a group of similar descriptions."""
        return self.learned_store.learn_from_similar(source_description, category_code, similar_descriptions)

    def _on_store_change(self, kind: str, values: Tuple[str, ...]) -> None:
        if self.cache is None:
            return
        if kind == "keyword":
            self.cache.invalidate_keywords(values)
        elif kind == "pattern":
            for key in values:
                self.cache.invalidate_pattern(key)
        else:
            self.cache.clear()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def _record_usage(self, result: CategorizationResult) -> None:
        with self._usage_lock:
            self._category_usage[result.category_code] = self._category_usage.get(result.category_code, 0) + 1
            source = result.match_source.value
            self._source_counts[source] = self._source_counts.get(source, 0) + 1

    def popular_categories(self, limit: int = 10) -> List[str]:
        """Category codes ordered by how often they were assigned."""
        with self._usage_lock:
            ranked = sorted(self._category_usage.items(), key=lambda item: (-item[1], item[0]))
        return [code for code, _ in ranked[:limit]]

    def explain(self, description: str, amount=0) -> Dict:
        """
        Show what every cascade step thinks of a description.

        Does not touch the cache or usage counters.
        """
        amount = to_decimal(amount)
        correction = self.correction_journal.lookup(description)
        keyword_match = self.keyword_store.find_match(description)
        learned_match = self.learned_store.find_match(description, record_usage=False)
        fuzzy_match = self.merchant_index.best_match(description)
        transfer = is_ambiguous_transfer(description)
        context = self.transfer_analyzer.analyze(description, amount) if transfer else None

        return {
            "description": description,
            "normalized": normalize_text(description),
            "pattern_key": create_pattern_key(description),
            "correction": correction.to_dict() if correction else None,
            "is_ambiguous_transfer": transfer,
            "transfer_context": {
                "category_code": context.category_code,
                "confidence": context.confidence,
                "family": context.family,
                "matched_keywords": list(context.matched_keywords),
            } if context else None,
            "custom_keyword": {
                "category_code": keyword_match.category_code,
                "confidence": keyword_match.confidence,
                "matched_keywords": list(keyword_match.matched_keywords),
                "is_rule": keyword_match.is_rule,
            } if keyword_match else None,
            "learned_pattern": {
                "key": learned_match.key,
                "category_code": learned_match.category_code,
                "confidence": learned_match.confidence,
                "exact": learned_match.exact,
            } if learned_match else None,
            "catalog_matches": [rule.to_dict() for rule in self.rule_catalog.find_all_matches(description)],
            "fuzzy_candidate": {
                "label": fuzzy_match.label,
                "category_code": fuzzy_match.category_code,
                "similarity": round(fuzzy_match.similarity, 4),
                "distance": round(fuzzy_match.distance, 4),
            } if fuzzy_match else None,
            "result": self._resolve(description, amount, record_usage=False).to_dict(),
        }

    def get_stats(self) -> Dict:
        with self._usage_lock:
            category_usage = dict(self._category_usage)
            source_counts = dict(self._source_counts)
        return {
            "rule_catalog": self.rule_catalog.get_stats(),
            "custom_keywords": self.keyword_store.get_stats(),
            "learned_patterns": self.learned_store.get_stats(),
            "corrections": len(self.correction_journal),
            "merchant_labels": len(self.merchant_index),
            "cache": self.cache.get_stats() if self.cache is not None else None,
            "match_sources": source_counts,
            "category_usage": category_usage,
        }
