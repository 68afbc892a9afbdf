"""
Static Rule Catalog.

Immutable, versioned collection of categorization rules. Rules are kept
pre-sorted by (priority desc, confidence desc, declaration order asc) so the
first matching rule is always the best one.
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from .pattern_matching import MatchPredicate, build_predicate, predicate_to_dict
from .preprocess import normalize_text
from ..patterns.transaction_patterns import RULE_CLASS_PRIORITIES

logger = logging.getLogger(__name__)


class InvalidRuleError(ValueError):
    """Raised when a rule entry cannot be turned into a Rule."""
    pass


class RuleClass(Enum):
    """Origin of a catalog rule."""
    BANK = "bank"
    MERCHANT = "merchant"
    FINANCIAL = "financial"
    SYSTEM = "system"
    TRAINING = "training"


@dataclass(frozen=True)
class Rule:
    """A single static categorization rule."""
    rule_id: str
    predicate: MatchPredicate
    merchant_label: Optional[str]
    category_code: str
    confidence: int
    priority: int
    rule_class: RuleClass
    declaration_index: int = 0

    @property
    def sort_key(self) -> Tuple[int, int, int]:
        return (-self.priority, -self.confidence, self.declaration_index)

    def matches(self, text: str) -> bool:
        return self.predicate.matches(text)

    def to_dict(self) -> Dict:
        entry = {
            "id": self.rule_id,
            "merchant": self.merchant_label,
            "category_code": self.category_code,
            "confidence": self.confidence,
            "priority": self.priority,
            "rule_class": self.rule_class.value,
        }
        entry.update(predicate_to_dict(self.predicate))
        return entry


def rule_from_entry(entry: Dict, declaration_index: int = 0) -> Rule:
    """
    Validate a raw rule entry and build a Rule.

    Args:
        entry: Dict with pattern, match_type, merchant, category_code,
            confidence, priority and rule_class keys
        declaration_index: Position of the entry in its source

    Returns:
        Rule instance

    Raises:
        InvalidRuleError: If any field is missing or out of range
    """
    if not isinstance(entry, dict):
        raise InvalidRuleError(f"Rule entry must be a dict, got {type(entry).__name__}")

    confidence = entry.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise InvalidRuleError(f"Rule confidence must be numeric: {confidence!r}")
    if not 0 <= confidence <= 100:
        raise InvalidRuleError(f"Rule confidence out of range 0-100: {confidence}")

    try:
        rule_class = RuleClass(str(entry.get("rule_class", "")).lower())
    except ValueError:
        raise InvalidRuleError(f"Unknown rule class: {entry.get('rule_class')!r}")

    priority = entry.get("priority")
    if priority is None:
        priority = RULE_CLASS_PRIORITIES[rule_class.value]
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise InvalidRuleError(f"Rule priority must be an integer: {priority!r}")

    category_code = str(entry.get("category_code") or "").strip()
    if not category_code:
        raise InvalidRuleError("Rule category_code is required")

    try:
        predicate = build_predicate(entry.get("pattern"), entry.get("match_type", "regex"))
    except ValueError as e:
        raise InvalidRuleError(str(e)) from e

    rule_id = entry.get("id") or f"rule-{declaration_index}"
    merchant = entry.get("merchant") or None

    return Rule(
        rule_id=str(rule_id),
        predicate=predicate,
        merchant_label=merchant,
        category_code=category_code,
        confidence=int(round(confidence)),
        priority=priority,
        rule_class=rule_class,
        declaration_index=declaration_index,
    )


class RuleCatalog:
    """Immutable, versioned rule catalog."""

    def __init__(self, rules: Iterable[Rule], version: Optional[str] = None):
        self._rules: Tuple[Rule, ...] = tuple(sorted(rules, key=lambda r: r.sort_key))
        self._version = version or self._compute_version(self._rules)

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[Dict],
        version: Optional[str] = None
    ) -> "RuleCatalog":
        """
        Build a catalog from raw entries, dropping invalid ones.

        Each invalid entry is logged and skipped; the rest of the catalog
        still loads.
        """
        rules = []
        dropped = 0
        for index, entry in enumerate(entries):
            try:
                rules.append(rule_from_entry(entry, declaration_index=index))
            except InvalidRuleError as e:
                dropped += 1
                rule_id = entry.get("id") if isinstance(entry, dict) else None
                logger.warning(f"Dropping invalid rule {rule_id or index}: {e}")

        if dropped:
            logger.warning(f"Dropped {dropped} invalid rule(s) while loading catalog")
        logger.info(f"Loaded rule catalog with {len(rules)} rules")
        return cls(rules, version=version)

    @staticmethod
    def _compute_version(rules: Tuple[Rule, ...]) -> str:
        payload = json.dumps([r.to_dict() for r in rules], sort_keys=True)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]

    @property
    def version(self) -> str:
        return self._version

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    def find_best_match(self, description: str, min_confidence: int = 0) -> Optional[Rule]:
        """
        Find the best rule matching a description.

        Args:
            description: Raw or normalized description
            min_confidence: Rules below this confidence are skipped

        Returns:
            Highest-priority matching rule, or None
        """
        text = normalize_text(description)
        if not text:
            return None
        for rule in self._rules:
            if rule.confidence < min_confidence:
                continue
            if rule.matches(text):
                return rule
        return None

    def find_all_matches(self, description: str) -> List[Rule]:
        """Return every matching rule in evaluation order (for debugging)."""
        text = normalize_text(description)
        if not text:
            return []
        return [rule for rule in self._rules if rule.matches(text)]

    def merchant_entries(self) -> List[Dict[str, str]]:
        """Labelled merchant-class rules, as fuzzy index entries."""
        entries = []
        for rule in self._rules:
            if rule.rule_class is RuleClass.MERCHANT and rule.merchant_label:
                entries.append({
                    "label": rule.merchant_label,
                    "category_code": rule.category_code,
                })
        return entries

    def get_stats(self) -> Dict:
        by_class: Dict[str, int] = {}
        by_category: Dict[str, int] = {}
        for rule in self._rules:
            by_class[rule.rule_class.value] = by_class.get(rule.rule_class.value, 0) + 1
            by_category[rule.category_code] = by_category.get(rule.category_code, 0) + 1
        return {
            "version": self._version,
            "total_rules": len(self._rules),
            "by_rule_class": by_class,
            "by_category": by_category,
        }

    def to_entries(self) -> List[Dict]:
        return [rule.to_dict() for rule in sorted(self._rules, key=lambda r: r.declaration_index)]
