"""
Ambiguous transfer context analysis.

Person-to-person transfers (e-transfers, Interac, email money transfers)
carry no merchant, so their purpose is inferred from keywords in the memo.
Transfers with no purpose keyword are routed to manual review with a
confidence that grows with the amount.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from .pattern_matching import compile_patterns, find_word_start_hits, match_regex_patterns
from .preprocess import normalize_text
from ..patterns.transaction_patterns import (
    TRANSFER_SHAPE_PATTERNS,
    TRANSFER_CONTEXT_FAMILIES,
    TRANSFER_AMOUNT_TIERS,
)

logger = logging.getLogger(__name__)


_TRANSFER_SHAPES = compile_patterns(TRANSFER_SHAPE_PATTERNS)


def is_ambiguous_transfer(description: str) -> bool:
    """
    Check if a description has the shape of a person-to-person transfer.

    Fee lines ("E-TRANSFER FEE") do not count as transfers.
    """
    text = normalize_text(description)
    if not text:
        return False
    return match_regex_patterns(text, _TRANSFER_SHAPES) is not None


@dataclass(frozen=True)
class TransferContext:
    """Outcome of transfer context analysis."""
    category_code: str
    confidence: int
    family: Optional[str] = None
    description: str = ""
    matched_keywords: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_context(self) -> bool:
        return self.family is not None


class TransferContextAnalyzer:
    """Infers the purpose of an ambiguous transfer."""

    def __init__(
        self,
        families: Sequence[Dict] = TRANSFER_CONTEXT_FAMILIES,
        amount_tiers: Sequence[Tuple[int, int]] = TRANSFER_AMOUNT_TIERS,
        review_code: str = "877",
        family_bonus: int = 5,
        confidence_cap: int = 95
    ):
        self.families = list(families)
        self.amount_tiers = sorted(amount_tiers, key=lambda t: t[0], reverse=True)
        self.review_code = review_code
        self.family_bonus = family_bonus
        self.confidence_cap = confidence_cap

    @classmethod
    def from_config(cls, config: Dict) -> "TransferContextAnalyzer":
        settings = config.get("transfer_context", {})
        return cls(
            review_code=settings.get("review_code", "877"),
            family_bonus=settings.get("family_bonus", 5),
            confidence_cap=settings.get("confidence_cap", 95),
        )

    def analyze(self, description: str, amount: Decimal) -> TransferContext:
        """
        Analyze an ambiguous transfer.

        Args:
            description: Raw transaction description
            amount: Signed transaction amount

        Returns:
            TransferContext with the chosen category and confidence
        """
        text = normalize_text(description)

        matched: List[Tuple[Dict, List[str]]] = []
        for family in self.families:
            hits = find_word_start_hits(text, family["keywords"])
            if hits:
                matched.append((family, hits))

        if matched:
            # max() keeps the first family on equal base confidence
            winner, hits = max(matched, key=lambda item: item[0]["confidence"])
            bonus = self.family_bonus * (len(matched) - 1)
            confidence = min(self.confidence_cap, winner["confidence"] + bonus)
            logger.debug(
                f"Transfer context '{winner['name']}' for '{description}' "
                f"({len(matched)} families matched, confidence {confidence})"
            )
            return TransferContext(
                category_code=winner["category_code"],
                confidence=confidence,
                family=winner["name"],
                description=winner.get("description", winner["name"]),
                matched_keywords=tuple(hits),
            )

        confidence = self._tier_confidence(abs(amount))
        logger.debug(f"No transfer context for '{description}', amount tier confidence {confidence}")
        return TransferContext(
            category_code=self.review_code,
            confidence=confidence,
            description="Manual review",
        )

    def _tier_confidence(self, magnitude: Decimal) -> int:
        for minimum, confidence in self.amount_tiers:
            if magnitude >= minimum:
                return confidence
        return self.amount_tiers[-1][1] if self.amount_tiers else 0
