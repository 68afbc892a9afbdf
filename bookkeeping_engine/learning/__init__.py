"""
Learning Module for the categorization engine.

User feedback that improves future categorizations:
- Custom keywords and keyword rules
- Learned patterns (normalized description keys)
- Correction journal
"""

from .models import CustomKeyword, CustomKeywordRule, LearnedPattern, Correction
from .keywords import CustomKeywordStore, KeywordMatch
from .learned_patterns import LearnedPatternStore, LearnedMatch
from .corrections import CorrectionJournal, correction_key

__all__ = [
    "CustomKeyword",
    "CustomKeywordRule",
    "LearnedPattern",
    "Correction",
    "CustomKeywordStore",
    "KeywordMatch",
    "LearnedPatternStore",
    "LearnedMatch",
    "CorrectionJournal",
    "correction_key",
]
