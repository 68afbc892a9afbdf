"""
Persistence Module for the categorization engine.

Backends:
- SqlStore: relational database through SQLAlchemy
- LocalJsonStore: JSON files in a local directory
- FailoverPersistence: primary + fallback with background writes
"""

import logging
import os
from typing import Optional

from .port import PersistencePort, PersistenceError
from .local_store import LocalJsonStore
from .sql_store import SqlStore
from .failover import FailoverPersistence

logger = logging.getLogger(__name__)

DATABASE_URL_ENV = "BOOKKEEPING_DATABASE_URL"
STORE_DIR_ENV = "BOOKKEEPING_STORE_DIR"
RULES_PATH_ENV = "BOOKKEEPING_RULES_PATH"
DEFAULT_STORE_DIR = ".bookkeeping_store"


def build_persistence(
    database_url: Optional[str] = None,
    store_dir: Optional[str] = None,
    rules_path: Optional[str] = None,
    asynchronous_writes: bool = True
) -> FailoverPersistence:
    """
    Build the engine's persistence from arguments or environment.

    Args:
        database_url: SQLAlchemy URL (default: BOOKKEEPING_DATABASE_URL)
        store_dir: Local store directory (default: BOOKKEEPING_STORE_DIR,
            then .bookkeeping_store)
        rules_path: Rule file for the local store (default: BOOKKEEPING_RULES_PATH)
        asynchronous_writes: Run writes on a background worker

    Returns:
        FailoverPersistence with the SQL store as primary when configured
        and reachable, and the local store as fallback
    """
    database_url = database_url or os.getenv(DATABASE_URL_ENV)
    store_dir = store_dir or os.getenv(STORE_DIR_ENV) or DEFAULT_STORE_DIR
    rules_path = rules_path or os.getenv(RULES_PATH_ENV)

    local = None
    try:
        local = LocalJsonStore(store_dir, rules_path=rules_path)
    except PersistenceError as e:
        logger.error(f"Local store unavailable: {e}")

    primary = None
    if database_url:
        try:
            primary = SqlStore(database_url)
        except PersistenceError as e:
            logger.warning(f"SQL store unavailable, using local store only: {e}")

    if primary is None:
        return FailoverPersistence(local, None, asynchronous_writes=asynchronous_writes)
    return FailoverPersistence(primary, local, asynchronous_writes=asynchronous_writes)


__all__ = [
    "PersistencePort",
    "PersistenceError",
    "LocalJsonStore",
    "SqlStore",
    "FailoverPersistence",
    "build_persistence",
]
