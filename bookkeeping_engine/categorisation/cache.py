"""
Result cache for categorizations.

Entries are keyed by a fingerprint of the normalized description, the amount
and the rule catalog version, expire after a TTL and are evicted least
recently used first. Writes to the learning stores invalidate the entries
they could affect.
"""

import hashlib
import json
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Iterable, Optional

from .models import CategorizationResult
from .preprocess import create_pattern_key, normalize_text

logger = logging.getLogger(__name__)


def fingerprint(description: str, amount: Decimal, ruleset_version: str) -> str:
    """SHA-256 fingerprint of the inputs that determine a categorization."""
    payload = json.dumps(
        [normalize_text(description), str(amount), ruleset_version],
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass
class _CacheEntry:
    result: CategorizationResult
    expires_at: float
    text: str
    pattern_key: str


class ResultCache:
    """Thread-safe TTL + LRU cache of categorization results."""

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_entries: int = 2000,
        clock: Callable[[], float] = time.monotonic
    ):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, _CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, description: str, amount: Decimal, ruleset_version: str) -> Optional[CategorizationResult]:
        key = fingerprint(description, amount, ruleset_version)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return entry.result

    def put(
        self,
        description: str,
        amount: Decimal,
        ruleset_version: str,
        result: CategorizationResult
    ) -> None:
        key = fingerprint(description, amount, ruleset_version)
        entry = _CacheEntry(
            result=result,
            expires_at=self._clock() + self.ttl_seconds,
            text=normalize_text(description),
            pattern_key=create_pattern_key(description),
        )
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def invalidate_pattern(self, pattern_key: str) -> int:
        """
        Drop entries a learned pattern or correction could now match.

        An entry is affected when its pattern key equals, contains or is
        contained in the written key.

        Returns:
            Number of entries dropped
        """
        if not pattern_key:
            return 0
        return self._invalidate_where(
            lambda entry: entry.pattern_key and (
                pattern_key in entry.pattern_key or entry.pattern_key in pattern_key
            )
        )

    def invalidate_keywords(self, keywords: Iterable[str]) -> int:
        """Drop entries whose text contains any of the keywords."""
        needles = [k.lower() for k in keywords if k]
        if not needles:
            return 0
        return self._invalidate_where(
            lambda entry: any(needle in entry.text for needle in needles)
        )

    def _invalidate_where(self, predicate: Callable[[_CacheEntry], bool]) -> int:
        with self._lock:
            stale = [key for key, entry in self._entries.items() if predicate(entry)]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached result(s)")
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_stats(self) -> dict:
        with self._lock:
            size = len(self._entries)
        total = self.hits + self.misses
        return {
            "size": size,
            "max_entries": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": (self.hits / total) if total else 0.0,
        }
