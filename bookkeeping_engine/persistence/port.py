"""
Persistence Port.

Abstract interface between the categorization engine and durable storage.
"""

from abc import ABC, abstractmethod
from typing import Dict, List

from ..learning.models import Correction, CustomKeyword, CustomKeywordRule, LearnedPattern


class PersistenceError(Exception):
    """Raised when a persistence backend cannot complete an operation."""
    pass


class PersistencePort(ABC):
    """Storage operations the engine depends on."""

    @abstractmethod
    def load_rule_catalog(self) -> List[Dict]:
        """Return raw rule entries for the Rule Catalog."""

    @abstractmethod
    def load_custom_keywords(self) -> List[CustomKeyword]:
        pass

    @abstractmethod
    def save_custom_keyword(self, keyword: CustomKeyword) -> None:
        """Insert or update a keyword by id."""

    @abstractmethod
    def delete_custom_keyword(self, keyword_id: str) -> None:
        pass

    @abstractmethod
    def load_keyword_rules(self) -> List[CustomKeywordRule]:
        pass

    @abstractmethod
    def save_keyword_rule(self, rule: CustomKeywordRule) -> None:
        pass

    @abstractmethod
    def delete_keyword_rule(self, rule_id: str) -> None:
        pass

    @abstractmethod
    def load_learned_patterns(self) -> List[LearnedPattern]:
        pass

    @abstractmethod
    def save_learned_pattern(self, key: str, category_code: str, confidence: int) -> None:
        """
        Upsert a learned pattern.

        New keys start with usage 1; existing keys take the new category and
        confidence and their usage count increases by one.
        """

    @abstractmethod
    def record_correction(self, description: str, category_code: str) -> None:
        pass

    @abstractmethod
    def load_corrections(self) -> List[Correction]:
        pass

    @abstractmethod
    def clear_all(self) -> None:
        """Delete all keywords, rules, learned patterns and corrections."""

    def close(self) -> None:
        """Release resources. Backends without resources need not override."""
