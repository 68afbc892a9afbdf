"""
Generic Pattern Matching for Transaction Categorization.

Provides match predicates for catalog rules and reusable keyword and regex
matching helpers.
"""

import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence


class MatchPredicate(ABC):
    """A test applied to normalized transaction text."""

    @abstractmethod
    def matches(self, text: str) -> bool:
        """Return True if the predicate accepts the normalized text."""

    @property
    @abstractmethod
    def source(self) -> str:
        """Pattern source, used for serialization and debugging."""

    @property
    def match_type(self) -> str:
        return "regex"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source!r})"


class LiteralPredicate(MatchPredicate):
    """Case-insensitive substring match."""

    def __init__(self, literal: str):
        if not literal or not literal.strip():
            raise ValueError("Literal pattern must be a non-empty string")
        self._literal = literal
        self._needle = literal.lower()

    def matches(self, text: str) -> bool:
        return self._needle in text.lower()

    @property
    def source(self) -> str:
        return self._literal

    @property
    def match_type(self) -> str:
        return "literal"


class RegexPredicate(MatchPredicate):
    """Case-insensitive regular expression search."""

    def __init__(self, pattern: str):
        if not pattern:
            raise ValueError("Regex pattern must be a non-empty string")
        try:
            self._compiled = re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            raise ValueError(f"Invalid regex pattern {pattern!r}: {e}") from e
        self._pattern = pattern

    def matches(self, text: str) -> bool:
        return self._compiled.search(text) is not None

    @property
    def source(self) -> str:
        return self._pattern


class CompiledPredicate(MatchPredicate):
    """Wraps an already compiled pattern, keeping its own flags."""

    def __init__(self, compiled: re.Pattern):
        self._compiled = compiled

    def matches(self, text: str) -> bool:
        return self._compiled.search(text) is not None

    @property
    def source(self) -> str:
        return self._compiled.pattern


def build_predicate(pattern, match_type: str = "regex") -> MatchPredicate:
    """
    Build a predicate from a rule entry's pattern.

    Args:
        pattern: Pattern string, or an already compiled pattern
        match_type: 'regex' or 'literal'

    Returns:
        MatchPredicate instance

    Raises:
        ValueError: If the pattern is empty, fails to compile or the
            match type is unknown
    """
    if isinstance(pattern, re.Pattern):
        return CompiledPredicate(pattern)
    if not isinstance(pattern, str):
        raise ValueError(f"Pattern must be a string, got {type(pattern).__name__}")

    match_type = (match_type or "regex").lower()
    if match_type == "regex":
        return RegexPredicate(pattern)
    if match_type == "literal":
        return LiteralPredicate(pattern)
    raise ValueError(f"Unknown match type: {match_type}")


def match_keywords(text: str, keywords: Sequence[str]) -> Optional[str]:
    """
    Match text against a list of keywords.

    Args:
        text: Normalized text to match
        keywords: Keyword strings, checked in order

    Returns:
        The first keyword contained in the text, or None

    Example:
        >>> match_keywords("tim hortons #183", ["starbucks", "tim hortons"])
        "tim hortons"
    """
    for keyword in keywords:
        if keyword and keyword in text:
            return keyword
    return None


def find_word_start_hits(text: str, keywords: Sequence[str]) -> List[str]:
    """
    Find keywords that occur at the start of a word in the text.

    "rent" hits "rent" and "rental" but not "current".
    """
    hits = []
    for keyword in keywords:
        if re.search(r"\b" + re.escape(keyword), text):
            hits.append(keyword)
    return hits


def compile_patterns(patterns: Sequence[str]) -> List[re.Pattern]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


def match_regex_patterns(
    text: str,
    patterns: Sequence[re.Pattern]
) -> Optional[str]:
    """
    Match text against a list of compiled regex patterns.

    Args:
        text: Text to match
        patterns: Compiled patterns

    Returns:
        Source of the first matching pattern, or None
    """
    for pattern in patterns:
        if pattern.search(text):
            return pattern.pattern
    return None


def predicate_to_dict(predicate: MatchPredicate) -> Dict[str, str]:
    return {"pattern": predicate.source, "match_type": predicate.match_type}
