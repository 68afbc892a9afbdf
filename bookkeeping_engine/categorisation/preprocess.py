"""
Preprocessing utilities for transaction categorization.
Handles text normalization, learned pattern keys and merchant text cleaning.
"""

import re
from typing import List, Optional


_WHITESPACE_RE = re.compile(r"\s+")
_DIGITS_RE = re.compile(r"\d+")
_KEY_PUNCTUATION_RE = re.compile(r"[^\w\s#]")
_MERCHANT_NOISE_RE = re.compile(r"[^a-z&\s]")


def normalize_text(text: Optional[str]) -> str:
    """
    Normalize text for matching.

    Args:
        text: Raw text to normalize

    Returns:
        Lowercase text with whitespace collapsed and trimmed
    """
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text.lower()).strip()


def create_pattern_key(description: Optional[str]) -> str:
    """
    Build the normalized key used by learned patterns.

    Digit runs collapse to '#', so store numbers and reference codes
    do not split one merchant into many keys.

    Args:
        description: Raw transaction description

    Returns:
        Normalized key (may be empty)

    Example:
        >>> create_pattern_key("ACME WIDGETS 1234, TORONTO")
        "acme widgets # toronto"
    """
    if not description:
        return ""
    key = description.lower()
    key = _DIGITS_RE.sub("#", key)
    key = _KEY_PUNCTUATION_RE.sub("", key)
    return _WHITESPACE_RE.sub(" ", key).strip()


def clean_merchant_text(text: Optional[str]) -> str:
    """
    Clean text for fuzzy merchant comparison.

    Drops digits and punctuation (apostrophes are removed without a gap),
    keeping letters, '&' and single spaces.
    """
    if not text:
        return ""
    cleaned = text.lower().replace("'", "")
    cleaned = _MERCHANT_NOISE_RE.sub(" ", cleaned)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def tokenize(text: str) -> List[str]:
    return text.split() if text else []
