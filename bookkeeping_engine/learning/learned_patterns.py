"""
Learned Pattern Store.

Normalized description keys learned from user corrections. Lookups try an
exact key first, then containment in either direction at a reduced
confidence. Usage counters only ever increase.
"""

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Tuple

from .models import LearnedPattern, clamp_confidence, utc_now
from ..categorisation.preprocess import create_pattern_key

if TYPE_CHECKING:
    from ..persistence.port import PersistencePort

logger = logging.getLogger(__name__)

Listener = Callable[[str, Tuple[str, ...]], None]


@dataclass(frozen=True)
class LearnedMatch:
    """A learned pattern that matched a description."""
    key: str
    category_code: str
    confidence: int
    exact: bool


class LearnedPatternStore:
    """Thread-safe in-memory learned pattern store."""

    def __init__(
        self,
        persistence: Optional["PersistencePort"] = None,
        learned_confidence: int = 90,
        partial_penalty: int = 10,
        partial_floor: int = 70,
        min_partial_key_length: int = 3
    ):
        self.persistence = persistence
        self.learned_confidence = learned_confidence
        self.partial_penalty = partial_penalty
        self.partial_floor = partial_floor
        self.min_partial_key_length = min_partial_key_length
        self._patterns: Dict[str, LearnedPattern] = {}
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self, kind: str, keys: Tuple[str, ...]) -> None:
        for listener in self._listeners:
            listener(kind, keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._patterns)

    def load(self, patterns: Iterable[LearnedPattern]) -> None:
        """Replace the store contents without writing to persistence."""
        with self._lock:
            self._patterns = {}
            for pattern in patterns:
                if not pattern.key.strip():
                    logger.warning("Skipping learned pattern with empty key")
                    continue
                self._patterns[pattern.key] = pattern
            count = len(self._patterns)
        logger.info(f"Loaded {count} learned patterns")
        self._notify("clear", ())

    def get(self, key: str) -> Optional[LearnedPattern]:
        with self._lock:
            return self._patterns.get(key)

    def all(self) -> List[LearnedPattern]:
        with self._lock:
            return list(self._patterns.values())

    def learn(
        self,
        description: str,
        category_code: str,
        confidence: Optional[int] = None
    ) -> Optional[LearnedPattern]:
        """
        Learn (or re-learn) the category for a description.

        Upserts the pattern for the description's normalized key: a new key
        starts with usage 1, an existing key takes the new category and
        confidence and its usage increases by one.

        Returns:
            The stored pattern, or None if the description normalizes to
            an empty key
        """
        key = create_pattern_key(description)
        if not key:
            logger.debug(f"Not learning from description with empty key: {description!r}")
            return None
        confidence = clamp_confidence(self.learned_confidence if confidence is None else confidence)

        with self._lock:
            now = utc_now()
            existing = self._patterns.get(key)
            if existing:
                existing.category_code = category_code
                existing.confidence = confidence
                existing.usage_count += 1
                existing.last_used_at = now
                pattern = existing
            else:
                pattern = LearnedPattern(
                    key=key,
                    category_code=category_code,
                    confidence=confidence,
                    usage_count=1,
                    last_used_at=now,
                    created_at=now,
                )
                self._patterns[key] = pattern

        if self.persistence is not None:
            self.persistence.save_learned_pattern(key, category_code, confidence)
        logger.info(f"Learned pattern '{key}' -> {category_code} ({confidence})")
        self._notify("pattern", (key,))
        return pattern

    def find_match(self, description: str, record_usage: bool = True) -> Optional[LearnedMatch]:
        """
        Find a learned pattern for a description.

        Exact key matches return the stored confidence. Otherwise the first
        key (in insertion order) that contains or is contained in the
        description key matches at max(floor, confidence - penalty).
        A hit increments the pattern's usage count unless record_usage
        is False.
        """
        key = create_pattern_key(description)
        if not key:
            return None

        with self._lock:
            pattern = self._patterns.get(key)
            exact = pattern is not None

            if pattern is None and len(key) >= self.min_partial_key_length:
                for stored_key, candidate in self._patterns.items():
                    if len(stored_key) < self.min_partial_key_length:
                        continue
                    if stored_key in key or key in stored_key:
                        pattern = candidate
                        break

            if pattern is None:
                return None

            if record_usage:
                pattern.usage_count += 1
                pattern.last_used_at = utc_now()

            if exact:
                confidence = pattern.confidence
            else:
                confidence = max(self.partial_floor, pattern.confidence - self.partial_penalty)
            return LearnedMatch(
                key=pattern.key,
                category_code=pattern.category_code,
                confidence=confidence,
                exact=exact,
            )

    def touch(self, key: str) -> bool:
        """Count a use of a stored pattern. Returns False for unknown keys."""
        with self._lock:
            pattern = self._patterns.get(key)
            if pattern is None:
                return False
            pattern.usage_count += 1
            pattern.last_used_at = utc_now()
            return True

    def learn_from_similar(
        self,
        source_description: str,
        category_code: str,
        similar_descriptions: Iterable[str]
    ) -> List[LearnedPattern]:
        """
        Apply one category to a group of similar descriptions.

        Returns:
            Patterns learned, source first
        """
        learned = []
        for description in [source_description, *similar_descriptions]:
            pattern = self.learn(description, category_code)
            if pattern is not None:
                learned.append(pattern)
        return learned

    def get_stats(self) -> Dict:
        with self._lock:
            patterns = list(self._patterns.values())
        by_category: Dict[str, int] = {}
        for pattern in patterns:
            by_category[pattern.category_code] = by_category.get(pattern.category_code, 0) + 1
        return {
            "total_patterns": len(patterns),
            "total_usage": sum(p.usage_count for p in patterns),
            "by_category": by_category,
        }
