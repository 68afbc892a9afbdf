"""
Correction Journal.

Append-only log of user corrections. The latest correction for a
description is consulted first by the cascade, and every correction is fed
to the Learned Pattern Store.
"""

import logging
import threading
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Tuple

from .learned_patterns import LearnedPatternStore
from .models import Correction
from ..categorisation.preprocess import create_pattern_key, normalize_text

if TYPE_CHECKING:
    from ..persistence.port import PersistencePort

logger = logging.getLogger(__name__)

Listener = Callable[[str, Tuple[str, ...]], None]


def correction_key(description: str) -> str:
    """
    Lookup key for corrections.

    Uses the same normalization as the result cache fingerprint, so two
    descriptions share a cached result only if they share a correction.
    """
    return normalize_text(description)


class CorrectionJournal:
    """Append-only journal of user corrections."""

    def __init__(
        self,
        learned_store: Optional[LearnedPatternStore] = None,
        persistence: Optional["PersistencePort"] = None
    ):
        self.learned_store = learned_store
        self.persistence = persistence
        self._entries: List[Correction] = []
        self._latest: Dict[str, Correction] = {}
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def load(self, corrections: Iterable[Correction]) -> None:
        """Rebuild the journal from stored corrections, oldest first."""
        with self._lock:
            self._entries = sorted(corrections, key=lambda c: c.timestamp)
            self._latest = {}
            for correction in self._entries:
                key = correction_key(correction.original_description)
                if key:
                    self._latest[key] = correction
            count = len(self._entries)
        logger.info(f"Loaded {count} corrections")

    def record(self, description: str, category_code: str) -> Correction:
        """
        Record a user correction.

        Appends to the journal, persists it, and teaches the Learned
        Pattern Store the description's key.

        Raises:
            ValueError: If description or category_code is empty
        """
        key = correction_key(description)
        if not key:
            raise ValueError("Correction description cannot be empty")
        if not category_code or not str(category_code).strip():
            raise ValueError("Correction category code is required")
        category_code = str(category_code).strip()

        correction = Correction(original_description=description, category_code=category_code)
        with self._lock:
            self._entries.append(correction)
            self._latest[key] = correction

        if self.persistence is not None:
            self.persistence.record_correction(description, category_code)
        logger.info(f"Recorded correction '{description}' -> {category_code}")

        if self.learned_store is not None:
            self.learned_store.learn(description, category_code)

        pattern_key = create_pattern_key(description)
        for listener in self._listeners:
            listener("pattern", (pattern_key,) if pattern_key else ())
        return correction

    def lookup(self, description: str) -> Optional[Correction]:
        key = correction_key(description)
        if not key:
            return None
        with self._lock:
            return self._latest.get(key)

    def entries(self) -> List[Correction]:
        with self._lock:
            return list(self._entries)
