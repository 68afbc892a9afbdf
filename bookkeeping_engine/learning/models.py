"""
Records owned by the learning stores.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from ..categorisation.preprocess import normalize_text


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def clamp_confidence(value) -> int:
    return max(0, min(100, int(round(float(value)))))


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if value:
        return datetime.fromisoformat(str(value))
    return utc_now()


@dataclass
class CustomKeyword:
    """A user-defined literal keyword mapped to a category."""
    keyword_id: str
    keyword: str
    category_code: str
    confidence: int = 90
    description: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict:
        return {
            "id": self.keyword_id,
            "keyword": self.keyword,
            "category_code": self.category_code,
            "confidence": self.confidence,
            "description": self.description,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "CustomKeyword":
        """
        Raises:
            KeyError: If keyword or category_code is missing
            ValueError: If a field is malformed
        """
        keyword = normalize_text(str(data["keyword"]))
        if not keyword:
            raise ValueError("Keyword cannot be empty")
        return cls(
            keyword_id=str(data.get("id") or new_id("kw")),
            keyword=keyword,
            category_code=str(data["category_code"]),
            confidence=clamp_confidence(data.get("confidence", 90)),
            description=data.get("description"),
            created_at=_parse_timestamp(data.get("created_at")),
            updated_at=_parse_timestamp(data.get("updated_at")),
        )


@dataclass
class CustomKeywordRule:
    """A set of keywords that together suggest a category."""
    rule_id: str
    keywords: Tuple[str, ...]
    category_code: str
    confidence: int = 90
    description: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict:
        return {
            "id": self.rule_id,
            "keywords": list(self.keywords),
            "category_code": self.category_code,
            "confidence": self.confidence,
            "description": self.description,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "CustomKeywordRule":
        keywords = normalize_keywords(data["keywords"])
        if not keywords:
            raise ValueError("Keyword rule needs at least one keyword")
        return cls(
            rule_id=str(data.get("id") or new_id("kwr")),
            keywords=keywords,
            category_code=str(data["category_code"]),
            confidence=clamp_confidence(data.get("confidence", 90)),
            description=data.get("description"),
            created_at=_parse_timestamp(data.get("created_at")),
            updated_at=_parse_timestamp(data.get("updated_at")),
        )


def normalize_keywords(keywords) -> Tuple[str, ...]:
    """Normalize, dedupe and sort a keyword collection."""
    if isinstance(keywords, str):
        keywords = [keywords]
    cleaned = {normalize_text(str(k)) for k in keywords}
    cleaned.discard("")
    return tuple(sorted(cleaned))


@dataclass
class LearnedPattern:
    """A normalized description key learned from user feedback."""
    key: str
    category_code: str
    confidence: int = 90
    usage_count: int = 1
    last_used_at: datetime = field(default_factory=utc_now)
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict:
        return {
            "key": self.key,
            "category_code": self.category_code,
            "confidence": self.confidence,
            "usage_count": self.usage_count,
            "last_used_at": self.last_used_at.isoformat(),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "LearnedPattern":
        key = str(data["key"])
        if not key.strip():
            raise ValueError("Learned pattern key cannot be empty")
        usage = int(data.get("usage_count", 1))
        if usage < 0:
            raise ValueError(f"Negative usage count: {usage}")
        return cls(
            key=key,
            category_code=str(data["category_code"]),
            confidence=clamp_confidence(data.get("confidence", 90)),
            usage_count=usage,
            last_used_at=_parse_timestamp(data.get("last_used_at")),
            created_at=_parse_timestamp(data.get("created_at")),
        )


@dataclass(frozen=True)
class Correction:
    """A user's correction of a categorization."""
    original_description: str
    category_code: str
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict:
        return {
            "original_description": self.original_description,
            "category_code": self.category_code,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Correction":
        return cls(
            original_description=str(data["original_description"]),
            category_code=str(data["category_code"]),
            timestamp=_parse_timestamp(data.get("timestamp")),
        )
