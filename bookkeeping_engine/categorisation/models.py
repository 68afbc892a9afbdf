"""
Data types shared by the categorization engine.
"""

from dataclasses import dataclass, asdict
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, Optional


class FlowDirection(Enum):
    """Cash-flow direction of a categorized transaction."""
    INFLOW = "inflow"
    OUTFLOW = "outflow"


class MatchSource(Enum):
    """Cascade step that produced a categorization."""
    CORRECTION = "correction"
    TRANSFER_CONTEXT = "transfer_context"
    CUSTOM_KEYWORD = "custom_keyword"
    LEARNED_PATTERN = "learned_pattern"
    RULE_CATALOG = "rule_catalog"
    FUZZY_MERCHANT = "fuzzy_merchant"
    FALLBACK = "fallback"


def to_decimal(value) -> Decimal:
    """
    Convert an amount to Decimal without float rounding noise.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid amount: {value!r}")
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount


@dataclass
class Transaction:
    """A bank transaction. Positive amounts are money in."""
    id: str
    date: str
    description: str
    amount: Decimal
    category_code: Optional[str] = None
    confidence: Optional[int] = None
    merchant_label: Optional[str] = None
    flow_direction: Optional[FlowDirection] = None

    @classmethod
    def from_dict(cls, data: Dict, index: int = 0) -> "Transaction":
        """
        Build a Transaction from a loosely shaped dict.

        Accepts 'description' or 'name' for the description text and any
        numeric representation for 'amount'.

        Raises:
            KeyError: If 'amount' is missing
            ValueError: If the amount is not numeric
        """
        description = data.get("description")
        if description is None:
            description = data.get("name", "")
        txn_id = data.get("id") or data.get("transaction_id") or f"txn-{index}"
        return cls(
            id=str(txn_id),
            date=str(data.get("date") or ""),
            description=str(description or ""),
            amount=to_decimal(data["amount"]),
            category_code=data.get("category_code"),
            confidence=data.get("confidence"),
        )

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["amount"] = str(self.amount)
        data["flow_direction"] = self.flow_direction.value if self.flow_direction else None
        return data


@dataclass(frozen=True)
class CategorizationResult:
    """Result of transaction categorization."""
    category_code: str
    confidence: int
    flow_direction: FlowDirection
    match_source: MatchSource
    merchant_label: Optional[str] = None
    category_name: Optional[str] = None
    needs_review: bool = False
    reasoning: str = ""
    # catalog rule id, custom keyword/rule id or learned pattern key
    rule_id: Optional[str] = None

    def __post_init__(self):
        # Clamp to the 0-100 scale whatever the producing step computed
        clamped = max(0, min(100, int(round(self.confidence))))
        object.__setattr__(self, "confidence", clamped)

    def to_dict(self) -> Dict:
        return {
            "category_code": self.category_code,
            "category_name": self.category_name,
            "merchant_label": self.merchant_label,
            "confidence": self.confidence,
            "flow_direction": self.flow_direction.value,
            "match_source": self.match_source.value,
            "needs_review": self.needs_review,
            "reasoning": self.reasoning,
            "rule_id": self.rule_id,
        }
