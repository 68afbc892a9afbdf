"""
Custom Keyword Store.

User-defined literal keywords and multi-keyword rules mapped to categories.
Single keywords are checked first, in insertion order, and the first one
contained in the description wins. Keyword rules score by the fraction of
their keywords present.
"""

import json
import logging
import threading
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Tuple

from .models import (
    CustomKeyword,
    CustomKeywordRule,
    clamp_confidence,
    new_id,
    normalize_keywords,
    utc_now,
)
from ..categorisation.preprocess import normalize_text

if TYPE_CHECKING:
    from ..persistence.port import PersistencePort

logger = logging.getLogger(__name__)

Listener = Callable[[str, Tuple[str, ...]], None]


@dataclass(frozen=True)
class KeywordMatch:
    """A custom keyword or keyword rule that matched a description."""
    category_code: str
    confidence: int
    matched_keywords: Tuple[str, ...]
    source_id: str
    is_rule: bool = False
    description: Optional[str] = None


class CustomKeywordStore:
    """In-memory custom keyword store, written through to persistence."""

    def __init__(
        self,
        persistence: Optional["PersistencePort"] = None,
        default_confidence: int = 90,
        rule_threshold: int = 50
    ):
        self.persistence = persistence
        self.default_confidence = default_confidence
        self.rule_threshold = rule_threshold
        self._keywords: Dict[str, CustomKeyword] = {}
        self._rules: Dict[str, CustomKeywordRule] = {}
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    def subscribe(self, listener: Listener) -> None:
        """Register a callback(kind, keywords) run after every change."""
        self._listeners.append(listener)

    def _notify(self, kind: str, keywords: Iterable[str]) -> None:
        values = tuple(keywords)
        for listener in self._listeners:
            listener(kind, values)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(
        self,
        keywords: Iterable[CustomKeyword] = (),
        rules: Iterable[CustomKeywordRule] = ()
    ) -> None:
        """Replace the store contents without writing to persistence."""
        with self._lock:
            self._keywords = {}
            self._rules = {}
            for keyword in keywords:
                if not keyword.keyword:
                    logger.warning(f"Skipping empty custom keyword {keyword.keyword_id}")
                    continue
                self._keywords[keyword.keyword_id] = keyword
            for rule in rules:
                if not rule.keywords:
                    logger.warning(f"Skipping keyword rule {rule.rule_id} with no keywords")
                    continue
                self._rules[rule.rule_id] = rule
        logger.info(f"Loaded {len(self._keywords)} custom keywords and {len(self._rules)} keyword rules")
        self._notify("clear", ())

    # ------------------------------------------------------------------
    # Single keywords
    # ------------------------------------------------------------------

    def add_keyword(
        self,
        keyword: str,
        category_code: str,
        confidence: Optional[int] = None,
        description: Optional[str] = None
    ) -> CustomKeyword:
        """
        Add a keyword, or update it in place if the same keyword already
        maps to the same category.

        Raises:
            ValueError: If keyword or category_code is empty
        """
        text = normalize_text(keyword)
        if not text:
            raise ValueError("Keyword cannot be empty")
        if not category_code:
            raise ValueError("Category code is required")
        confidence = clamp_confidence(self.default_confidence if confidence is None else confidence)

        with self._lock:
            existing = next(
                (k for k in self._keywords.values()
                 if k.keyword == text and k.category_code == category_code),
                None,
            )
            if existing:
                saved = replace(
                    existing,
                    confidence=confidence,
                    description=description if description is not None else existing.description,
                    updated_at=utc_now(),
                )
            else:
                saved = CustomKeyword(
                    keyword_id=new_id("kw"),
                    keyword=text,
                    category_code=category_code,
                    confidence=confidence,
                    description=description,
                )
            self._keywords[saved.keyword_id] = saved

        if self.persistence is not None:
            self.persistence.save_custom_keyword(saved)
        logger.info(f"Saved custom keyword '{text}' -> {category_code}")
        self._notify("keyword", (text,))
        return saved

    def update_keyword(self, keyword_id: str, **changes) -> Optional[CustomKeyword]:
        """
        Update fields of a keyword (keyword, category_code, confidence, description).

        Returns:
            The updated keyword, or None if the id is unknown
        """
        with self._lock:
            existing = self._keywords.get(keyword_id)
            if existing is None:
                return None
            if "keyword" in changes:
                text = normalize_text(str(changes["keyword"]))
                if not text:
                    raise ValueError("Keyword cannot be empty")
                changes["keyword"] = text
            if "confidence" in changes:
                changes["confidence"] = clamp_confidence(changes["confidence"])
            allowed = {k: v for k, v in changes.items()
                       if k in ("keyword", "category_code", "confidence", "description")}
            updated = replace(existing, updated_at=utc_now(), **allowed)
            self._keywords[keyword_id] = updated

        if self.persistence is not None:
            self.persistence.save_custom_keyword(updated)
        self._notify("keyword", (existing.keyword, updated.keyword))
        return updated

    def remove_keyword(self, keyword_id: str) -> bool:
        with self._lock:
            removed = self._keywords.pop(keyword_id, None)
        if removed is None:
            return False
        if self.persistence is not None:
            self.persistence.delete_custom_keyword(keyword_id)
        logger.info(f"Removed custom keyword '{removed.keyword}'")
        self._notify("keyword", (removed.keyword,))
        return True

    def get_keywords(self) -> List[CustomKeyword]:
        """All keywords, sorted alphabetically."""
        with self._lock:
            return sorted(self._keywords.values(), key=lambda k: k.keyword)

    # ------------------------------------------------------------------
    # Keyword rules
    # ------------------------------------------------------------------

    def add_rule(
        self,
        keywords: Iterable[str],
        category_code: str,
        confidence: Optional[int] = None,
        description: Optional[str] = None
    ) -> CustomKeywordRule:
        """
        Add a keyword rule, or update the rule with the same keyword set
        and category in place.
        """
        normalized = normalize_keywords(keywords)
        if not normalized:
            raise ValueError("Keyword rule needs at least one keyword")
        if not category_code:
            raise ValueError("Category code is required")
        confidence = clamp_confidence(self.default_confidence if confidence is None else confidence)

        with self._lock:
            existing = next(
                (r for r in self._rules.values()
                 if r.keywords == normalized and r.category_code == category_code),
                None,
            )
            if existing:
                saved = replace(
                    existing,
                    confidence=confidence,
                    description=description if description is not None else existing.description,
                    updated_at=utc_now(),
                )
            else:
                saved = CustomKeywordRule(
                    rule_id=new_id("kwr"),
                    keywords=normalized,
                    category_code=category_code,
                    confidence=confidence,
                    description=description,
                )
            self._rules[saved.rule_id] = saved

        if self.persistence is not None:
            self.persistence.save_keyword_rule(saved)
        logger.info(f"Saved keyword rule {list(normalized)} -> {category_code}")
        self._notify("keyword", normalized)
        return saved

    def update_rule(self, rule_id: str, **changes) -> Optional[CustomKeywordRule]:
        with self._lock:
            existing = self._rules.get(rule_id)
            if existing is None:
                return None
            if "keywords" in changes:
                changes["keywords"] = normalize_keywords(changes["keywords"])
                if not changes["keywords"]:
                    raise ValueError("Keyword rule needs at least one keyword")
            if "confidence" in changes:
                changes["confidence"] = clamp_confidence(changes["confidence"])
            allowed = {k: v for k, v in changes.items()
                       if k in ("keywords", "category_code", "confidence", "description")}
            updated = replace(existing, updated_at=utc_now(), **allowed)
            self._rules[rule_id] = updated

        if self.persistence is not None:
            self.persistence.save_keyword_rule(updated)
        self._notify("keyword", existing.keywords + updated.keywords)
        return updated

    def remove_rule(self, rule_id: str) -> bool:
        with self._lock:
            removed = self._rules.pop(rule_id, None)
        if removed is None:
            return False
        if self.persistence is not None:
            self.persistence.delete_keyword_rule(rule_id)
        self._notify("keyword", removed.keywords)
        return True

    def get_rules(self) -> List[CustomKeywordRule]:
        """All keyword rules, sorted by category code."""
        with self._lock:
            return sorted(self._rules.values(), key=lambda r: (r.category_code, r.keywords))

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def find_match(self, description: str) -> Optional[KeywordMatch]:
        """
        Find a custom keyword or keyword rule matching a description.

        Args:
            description: Raw transaction description

        Returns:
            KeywordMatch or None
        """
        text = normalize_text(description)
        if not text:
            return None

        with self._lock:
            keywords = list(self._keywords.values())
            rules = list(self._rules.values())

        for keyword in keywords:
            if keyword.keyword in text:
                return KeywordMatch(
                    category_code=keyword.category_code,
                    confidence=keyword.confidence,
                    matched_keywords=(keyword.keyword,),
                    source_id=keyword.keyword_id,
                    description=keyword.description,
                )

        best: Optional[KeywordMatch] = None
        best_score = 0.0
        for rule in rules:
            matched = tuple(k for k in rule.keywords if k in text)
            if not matched:
                continue
            score = rule.confidence * len(matched) / len(rule.keywords)
            if score >= self.rule_threshold and score > best_score:
                best_score = score
                best = KeywordMatch(
                    category_code=rule.category_code,
                    confidence=int(round(score)),
                    matched_keywords=matched,
                    source_id=rule.rule_id,
                    is_rule=True,
                    description=rule.description,
                )
        return best

    # ------------------------------------------------------------------
    # Import / export and stats
    # ------------------------------------------------------------------

    def export_json(self) -> str:
        """Serialize all keywords and rules to a JSON document."""
        with self._lock:
            payload = {
                "keywords": [k.to_dict() for k in self._keywords.values()],
                "rules": [r.to_dict() for r in self._rules.values()],
                "exported_at": utc_now().isoformat(),
            }
        return json.dumps(payload, indent=2)

    def import_json(self, document: str) -> Tuple[int, int]:
        """
        Import keywords and rules exported by export_json().

        Entries are added through add_keyword/add_rule, so duplicates update
        in place. Malformed entries are skipped.

        Returns:
            Tuple of (keywords imported, rules imported)

        Raises:
            ValueError: If the document is not valid JSON of the expected shape
        """
        try:
            data = json.loads(document)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid keyword export: {e}") from e
        if not isinstance(data, dict):
            raise ValueError("Invalid keyword export: expected an object")

        keyword_count = 0
        for entry in data.get("keywords") or []:
            try:
                self.add_keyword(
                    entry["keyword"],
                    str(entry["category_code"]),
                    entry.get("confidence"),
                    entry.get("description"),
                )
                keyword_count += 1
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed keyword during import: {e}")

        rule_count = 0
        for entry in data.get("rules") or []:
            try:
                self.add_rule(
                    entry["keywords"],
                    str(entry["category_code"]),
                    entry.get("confidence"),
                    entry.get("description"),
                )
                rule_count += 1
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed keyword rule during import: {e}")

        logger.info(f"Imported {keyword_count} keywords and {rule_count} keyword rules")
        return keyword_count, rule_count

    def clear_all(self) -> None:
        """Remove every keyword and rule, including from persistence."""
        with self._lock:
            keyword_ids = list(self._keywords)
            rule_ids = list(self._rules)
            self._keywords.clear()
            self._rules.clear()
        if self.persistence is not None:
            for keyword_id in keyword_ids:
                self.persistence.delete_custom_keyword(keyword_id)
            for rule_id in rule_ids:
                self.persistence.delete_keyword_rule(rule_id)
        self._notify("clear", ())

    def get_stats(self) -> Dict:
        with self._lock:
            keywords = list(self._keywords.values())
            rules = list(self._rules.values())
        by_category: Dict[str, int] = {}
        for code in [k.category_code for k in keywords] + [r.category_code for r in rules]:
            by_category[code] = by_category.get(code, 0) + 1
        confidences = [k.confidence for k in keywords] + [r.confidence for r in rules]
        return {
            "total_keywords": len(keywords),
            "total_rules": len(rules),
            "by_category": by_category,
            "average_confidence": (sum(confidences) / len(confidences)) if confidences else 0.0,
        }
