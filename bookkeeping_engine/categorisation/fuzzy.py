"""
Fuzzy merchant matching.

Scores descriptions against known merchant labels with the mean of
Jaro-Winkler and normalized Levenshtein similarity (rapidfuzz).
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from rapidfuzz.distance import JaroWinkler, Levenshtein

from .preprocess import clean_merchant_text, tokenize

logger = logging.getLogger(__name__)


def jaro_winkler_similarity(a: str, b: str, prefix_weight: float = 0.1) -> float:
    """Jaro-Winkler similarity in [0, 1]; common prefixes of up to 4 chars are boosted."""
    if not a or not b:
        return 0.0
    return JaroWinkler.similarity(a, b, prefix_weight=prefix_weight)


def levenshtein_similarity(a: str, b: str) -> float:
    """1 - edit distance / length of the longer string."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / longest


def combined_similarity(a: str, b: str, prefix_weight: float = 0.1) -> float:
    return (jaro_winkler_similarity(a, b, prefix_weight) + levenshtein_similarity(a, b)) / 2


@dataclass(frozen=True)
class MerchantEntry:
    """A merchant label known to the fuzzy index."""
    label: str
    category_code: str
    cleaned: str
    token_count: int


@dataclass(frozen=True)
class FuzzyMatch:
    """Best fuzzy candidate for a description."""
    label: str
    category_code: str
    similarity: float
    compared_text: str

    @property
    def distance(self) -> float:
        return 1.0 - self.similarity


class FuzzyMerchantIndex:
    """Index of merchant labels for fuzzy lookup."""

    def __init__(
        self,
        entries: Iterable[Dict[str, str]] = (),
        min_label_length: int = 3,
        prefix_weight: float = 0.1
    ):
        """
        Initialize the index.

        Args:
            entries: Dicts with 'label' and 'category_code'; the first entry
                for a label wins
            min_label_length: Cleaned labels shorter than this are skipped
            prefix_weight: Jaro-Winkler prefix scaling factor
        """
        self.min_label_length = min_label_length
        self.prefix_weight = prefix_weight
        self._entries: List[MerchantEntry] = []
        seen = set()

        for entry in entries:
            label = entry.get("label")
            code = entry.get("category_code")
            if not label or not code:
                continue
            cleaned = clean_merchant_text(label)
            if len(cleaned) < min_label_length or cleaned in seen:
                continue
            seen.add(cleaned)
            self._entries.append(MerchantEntry(
                label=label,
                category_code=str(code),
                cleaned=cleaned,
                token_count=len(tokenize(cleaned)),
            ))

        logger.debug(f"Fuzzy merchant index built with {len(self._entries)} labels")

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def labels(self) -> List[str]:
        return [entry.label for entry in self._entries]

    def best_match(self, description: str) -> Optional[FuzzyMatch]:
        """
        Find the most similar merchant label.

        The description is compared whole and as its leading window with as
        many tokens as the label, keeping the better score. Ties keep the
        earlier label.

        Returns:
            Best FuzzyMatch, or None if the description has no usable text
        """
        cleaned = clean_merchant_text(description)
        if len(cleaned) < self.min_label_length:
            return None
        tokens = tokenize(cleaned)

        best: Optional[FuzzyMatch] = None
        for entry in self._entries:
            candidates = [cleaned]
            if len(tokens) > entry.token_count:
                candidates.append(" ".join(tokens[:entry.token_count]))

            for candidate in candidates:
                score = combined_similarity(candidate, entry.cleaned, self.prefix_weight)
                if best is None or score > best.similarity:
                    best = FuzzyMatch(
                        label=entry.label,
                        category_code=entry.category_code,
                        similarity=score,
                        compared_text=candidate,
                    )

        return best

    def find_match(self, description: str, max_distance: float = 0.3) -> Optional[FuzzyMatch]:
        """Return the best match only if its distance is below max_distance."""
        match = self.best_match(description)
        if match is None or match.distance >= max_distance:
            return None
        return match
