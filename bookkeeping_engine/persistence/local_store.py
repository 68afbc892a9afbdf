"""
Local JSON persistence.

Keeps one JSON file per collection in a directory. Writes go to a ``.tmp``
file first and are moved into place with ``os.replace``.
"""

import contextlib
import copy
import json
import logging
import os
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, TypeVar

from .port import PersistenceError, PersistencePort
from ..config.rule_file_loader import load_rule_file
from ..learning.models import (
    Correction,
    CustomKeyword,
    CustomKeywordRule,
    LearnedPattern,
    clamp_confidence,
    utc_now,
)
from ..patterns.transaction_patterns import SYSTEM_RULES

logger = logging.getLogger(__name__)

T = TypeVar("T")

KEYWORDS_FILE = "custom_keywords.json"
KEYWORD_RULES_FILE = "keyword_rules.json"
LEARNED_PATTERNS_FILE = "learned_patterns.json"
CORRECTIONS_FILE = "corrections.json"


class LocalJsonStore(PersistencePort):
    """File-backed store in a local directory."""

    def __init__(self, directory: str, rules_path: Optional[str] = None):
        """
        Initialize the store.

        Args:
            directory: Directory holding the JSON files (created if missing)
            rules_path: Optional CSV or JSON rule file replacing the
                packaged rule catalog
        """
        self.directory = Path(directory)
        self.rules_path = rules_path
        self._lock = threading.RLock()
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot create store directory {directory}: {e}") from e

    # ------------------------------------------------------------------
    # File helpers
    # ------------------------------------------------------------------

    def _read(self, filename: str) -> List[Dict]:
        path = self.directory / filename
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Cannot read {path}: {e}") from e
        if not isinstance(data, list):
            raise PersistenceError(f"{path} does not contain a list")
        return data

    def _write(self, filename: str, records: List[Dict]) -> None:
        path = self.directory / filename
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            tmp.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
            raise PersistenceError(f"Cannot write {path}: {e}") from e

    @staticmethod
    def _parse_records(records: List[Dict], parser: Callable[[Dict], T], kind: str) -> List[T]:
        parsed = []
        for index, record in enumerate(records):
            try:
                parsed.append(parser(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed {kind} record {index}: {e}")
        return parsed

    def _upsert(self, filename: str, id_field: str, record: Dict) -> None:
        with self._lock:
            records = self._read(filename)
            for index, existing in enumerate(records):
                if existing.get(id_field) == record[id_field]:
                    records[index] = record
                    break
            else:
                records.append(record)
            self._write(filename, records)

    def _delete(self, filename: str, id_field: str, value: str) -> None:
        with self._lock:
            records = self._read(filename)
            remaining = [r for r in records if r.get(id_field) != value]
            if len(remaining) != len(records):
                self._write(filename, remaining)

    # ------------------------------------------------------------------
    # PersistencePort
    # ------------------------------------------------------------------

    def load_rule_catalog(self) -> List[Dict]:
        if self.rules_path:
            try:
                return load_rule_file(self.rules_path)
            except (OSError, ValueError) as e:
                raise PersistenceError(f"Cannot load rule file {self.rules_path}: {e}") from e
        return copy.deepcopy(SYSTEM_RULES)

    def load_custom_keywords(self) -> List[CustomKeyword]:
        with self._lock:
            records = self._read(KEYWORDS_FILE)
        return self._parse_records(records, CustomKeyword.from_dict, "custom keyword")

    def save_custom_keyword(self, keyword: CustomKeyword) -> None:
        self._upsert(KEYWORDS_FILE, "id", keyword.to_dict())

    def delete_custom_keyword(self, keyword_id: str) -> None:
        self._delete(KEYWORDS_FILE, "id", keyword_id)

    def load_keyword_rules(self) -> List[CustomKeywordRule]:
        with self._lock:
            records = self._read(KEYWORD_RULES_FILE)
        return self._parse_records(records, CustomKeywordRule.from_dict, "keyword rule")

    def save_keyword_rule(self, rule: CustomKeywordRule) -> None:
        self._upsert(KEYWORD_RULES_FILE, "id", rule.to_dict())

    def delete_keyword_rule(self, rule_id: str) -> None:
        self._delete(KEYWORD_RULES_FILE, "id", rule_id)

    def load_learned_patterns(self) -> List[LearnedPattern]:
        with self._lock:
            records = self._read(LEARNED_PATTERNS_FILE)
        return self._parse_records(records, LearnedPattern.from_dict, "learned pattern")

    def save_learned_pattern(self, key: str, category_code: str, confidence: int) -> None:
        with self._lock:
            records = self._read(LEARNED_PATTERNS_FILE)
            now = utc_now().isoformat()
            for record in records:
                if record.get("key") == key:
                    record["category_code"] = category_code
                    record["confidence"] = clamp_confidence(confidence)
                    record["usage_count"] = int(record.get("usage_count", 0)) + 1
                    record["last_used_at"] = now
                    break
            else:
                records.append(LearnedPattern(
                    key=key,
                    category_code=category_code,
                    confidence=clamp_confidence(confidence),
                ).to_dict())
            self._write(LEARNED_PATTERNS_FILE, records)

    def record_correction(self, description: str, category_code: str) -> None:
        with self._lock:
            records = self._read(CORRECTIONS_FILE)
            records.append(Correction(
                original_description=description,
                category_code=category_code,
            ).to_dict())
            self._write(CORRECTIONS_FILE, records)

    def load_corrections(self) -> List[Correction]:
        with self._lock:
            records = self._read(CORRECTIONS_FILE)
        return self._parse_records(records, Correction.from_dict, "correction")

    def clear_all(self) -> None:
        with self._lock:
            for filename in (KEYWORDS_FILE, KEYWORD_RULES_FILE, LEARNED_PATTERNS_FILE, CORRECTIONS_FILE):
                self._write(filename, [])
        logger.info(f"Cleared local store at {self.directory}")
