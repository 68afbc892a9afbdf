"""
Failover persistence.

Wraps a primary store (typically SQL) and a fallback store (typically local
JSON). Reads fall back on any error and degrade to empty results; writes run
on a single background worker so categorization never waits on storage.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Set

from .port import PersistencePort
from ..learning.models import Correction, CustomKeyword, CustomKeywordRule, LearnedPattern

logger = logging.getLogger(__name__)


class FailoverPersistence(PersistencePort):
    """Primary store with a fallback, and fire-and-forget writes."""

    def __init__(
        self,
        primary: Optional[PersistencePort],
        fallback: Optional[PersistencePort] = None,
        asynchronous_writes: bool = True
    ):
        """
        Initialize the wrapper.

        Args:
            primary: Preferred store (may be None when unavailable)
            fallback: Store used when the primary fails
            asynchronous_writes: Run writes on a background worker; set
                False to write inline (still with failover)
        """
        self.primary = primary
        self.fallback = fallback
        self.asynchronous_writes = asynchronous_writes
        self._executor: Optional[ThreadPoolExecutor] = None
        if asynchronous_writes:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="bookkeeping-persist")
        self._pending: Set[Future] = set()
        self._pending_lock = threading.Lock()
        self.failed_writes = 0

    def _stores(self) -> List[PersistencePort]:
        return [store for store in (self.primary, self.fallback) if store is not None]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _read(self, operation: str, empty: Any) -> Any:
        stores = self._stores()
        for index, store in enumerate(stores):
            try:
                return getattr(store, operation)()
            except Exception as e:
                if index + 1 < len(stores):
                    logger.warning(
                        f"{operation} failed on {type(store).__name__}, "
                        f"falling back to {type(stores[index + 1]).__name__}: {e}"
                    )
                else:
                    logger.error(f"{operation} failed on {type(store).__name__}: {e}")
        if stores:
            logger.error(f"{operation} failed on all stores, continuing with empty data")
        return empty

    def load_rule_catalog(self) -> List[Dict]:
        return self._read("load_rule_catalog", [])

    def load_custom_keywords(self) -> List[CustomKeyword]:
        return self._read("load_custom_keywords", [])

    def load_keyword_rules(self) -> List[CustomKeywordRule]:
        return self._read("load_keyword_rules", [])

    def load_learned_patterns(self) -> List[LearnedPattern]:
        return self._read("load_learned_patterns", [])

    def load_corrections(self) -> List[Correction]:
        return self._read("load_corrections", [])

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _write_now(self, operation: str, *args: Any) -> bool:
        stores = self._stores()
        for index, store in enumerate(stores):
            try:
                getattr(store, operation)(*args)
                return True
            except Exception as e:
                if index + 1 < len(stores):
                    logger.warning(
                        f"{operation} failed on {type(store).__name__}, "
                        f"writing to {type(stores[index + 1]).__name__}: {e}"
                    )
                else:
                    logger.error(f"{operation} failed on {type(store).__name__}: {e}")
        self.failed_writes += 1
        return False

    def _submit(self, operation: str, *args: Any) -> None:
        if self._executor is None:
            self._write_now(operation, *args)
            return
        future = self._executor.submit(self._write_now, operation, *args)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def save_custom_keyword(self, keyword: CustomKeyword) -> None:
        self._submit("save_custom_keyword", keyword)

    def delete_custom_keyword(self, keyword_id: str) -> None:
        self._submit("delete_custom_keyword", keyword_id)

    def save_keyword_rule(self, rule: CustomKeywordRule) -> None:
        self._submit("save_keyword_rule", rule)

    def delete_keyword_rule(self, rule_id: str) -> None:
        self._submit("delete_keyword_rule", rule_id)

    def save_learned_pattern(self, key: str, category_code: str, confidence: int) -> None:
        self._submit("save_learned_pattern", key, category_code, confidence)

    def record_correction(self, description: str, category_code: str) -> None:
        self._submit("record_correction", description, category_code)

    def clear_all(self) -> None:
        self._submit("clear_all")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for queued writes to finish.

        Returns:
            True if every pending write completed within the timeout
        """
        with self._pending_lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        for store in self._stores():
            try:
                store.close()
            except Exception as e:
                logger.warning(f"Error closing {type(store).__name__}: {e}")

