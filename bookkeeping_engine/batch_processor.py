"""
Categorizes transactions from many statement files at once.

Accepts JSON statement files. A file that cannot be read or validated is
recorded as a ProcessingError and the batch carries on.
"""

import argparse
import json
import logging
import traceback
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd

from .categorisation.engine import CascadeResolver
from .categorisation.models import CategorizationResult, Transaction
from .reporting.summary import results_to_dataframe

logger = logging.getLogger(__name__)


class InvalidJsonStructureError(Exception):
    """Raised when JSON structure cannot be normalized to a transaction list."""
    pass


@dataclass
class ProcessingError:
    """A statement file that could not be categorized."""
    file_name: str
    error_type: str
    error_message: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))


@dataclass
class FileResult:
    """Categorized transactions from one file."""
    file_name: str
    categorized: List[Tuple[Transaction, CategorizationResult]]

    @property
    def transaction_count(self) -> int:
        return len(self.categorized)


@dataclass
class BatchStats:
    """Running totals for a batch."""
    total_files: int = 0
    processed: int = 0
    successful: int = 0
    failed: int = 0

    # Transaction counts
    total_transactions: int = 0
    auto_accepted: int = 0
    needs_review: int = 0
    by_match_source: Dict[str, int] = field(default_factory=dict)

    # Confidence
    total_confidence: float = 0.0

    # Timing
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def average_confidence(self) -> float:
        """Mean confidence across categorized transactions."""
        if self.total_transactions == 0:
            return 0.0
        return self.total_confidence / self.total_transactions

    @property
    def processing_time(self) -> float:
        """Seconds between start and end, 0 while running."""
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    @property
    def success_rate(self) -> float:
        """Percentage of files categorized without error."""
        if not self.total_files:
            return 0.0
        return 100.0 * self.successful / self.total_files


@dataclass
class BatchResult:
    """Categorized files, failures and stats for one batch."""
    stats: BatchStats
    results: List[FileResult]
    errors: List[ProcessingError]
    error_summary: Dict[str, int] = field(default_factory=dict)

    @property
    def categorized(self) -> List[Tuple[Transaction, CategorizationResult]]:
        """All categorized pairs across files, in file order."""
        pairs = []
        for file_result in self.results:
            pairs.extend(file_result.categorized)
        return pairs


class TransactionBatchProcessor:
    """Batch processor for bank statement files."""

    def __init__(
        self,
        resolver: CascadeResolver,
        max_workers: Optional[int] = None
    ):
        """
        Create a processor around an existing resolver.

        Args:
            resolver: Cascade resolver used for every file
            max_workers: Worker threads per file (default from resolver config)
        """
        self.resolver = resolver
        self.max_workers = max_workers
        self.auto_accept_threshold = resolver.config["thresholds"]["auto_accept"]

        logger.info(
            f"Initialized batch processor: auto-accept at {self.auto_accept_threshold}, "
            f"workers={max_workers or resolver.config['batch']['max_workers']}"
        )

    def process_batch(
        self,
        files: List[Tuple[str, bytes]],
        progress_callback: Optional[Callable[[int, int, str], None]] = None
    ) -> BatchResult:
        """
        Categorize every transaction in a list of statement files.

        Args:
            files: (file name, raw bytes) pairs, e.g. from load_files()
            progress_callback: Called as callback(current, total, message)
                before each file

        Returns:
            BatchResult; failed files appear in errors, never as exceptions
        """
        total = len(files)
        stats = BatchStats(total_files=total, start_time=datetime.now())
        results: List[FileResult] = []
        errors: List[ProcessingError] = []
        error_types: Dict[str, int] = {}

        logger.info(f"Categorizing {total} statement file(s)")

        for position, (filename, content) in enumerate(files, start=1):
            if progress_callback:
                progress_callback(position, total, f"Categorizing {filename}")
            logger.debug(f"[{position}/{total}] {filename}")

            try:
                file_result = self._process_single_file(filename, content)
            except json.JSONDecodeError as e:
                self._record_error(errors, error_types, stats, filename, "JSON_PARSE_ERROR", f"Invalid JSON: {e}")
                logger.error(f"{filename} is not valid JSON: {e}")
            except KeyError as e:
                self._record_error(errors, error_types, stats, filename, "MISSING_DATA", f"Missing field: {e}")
                logger.error(f"{filename} is missing field {e}")
            except ValueError as e:
                self._record_error(errors, error_types, stats, filename, "DATA_VALIDATION_ERROR", str(e))
                logger.error(f"{filename} failed validation: {e}")
            except InvalidJsonStructureError as e:
                self._record_error(errors, error_types, stats, filename, "INVALID_JSON_STRUCTURE", str(e))
                logger.error(f"{filename} has no transaction list: {e}")
            except Exception as e:
                self._record_error(
                    errors, error_types, stats, filename,
                    "PROCESSING_ERROR", f"{type(e).__name__}: {e}"
                )
                logger.error(f"Unexpected failure on {filename}\n{traceback.format_exc()}")
            else:
                results.append(file_result)
                stats.processed += 1
                stats.successful += 1
                self._update_stats(stats, file_result)

        stats.end_time = datetime.now()
        logger.info(
            f"Categorized {stats.total_transactions} transactions from "
            f"{stats.successful}/{total} file(s) in {stats.processing_time:.1f}s; "
            f"{stats.needs_review} flagged for review, {stats.failed} file(s) failed"
        )

        return BatchResult(stats=stats, results=results, errors=errors, error_summary=error_types)

    def _record_error(
        self,
        errors: List[ProcessingError],
        error_types: Dict[str, int],
        stats: BatchStats,
        filename: str,
        error_type: str,
        message: str
    ) -> None:
        errors.append(ProcessingError(file_name=filename, error_type=error_type, error_message=message))
        error_types[error_type] = error_types.get(error_type, 0) + 1
        stats.processed += 1
        stats.failed += 1

    def _update_stats(self, stats: BatchStats, file_result: FileResult) -> None:
        for _, result in file_result.categorized:
            stats.total_transactions += 1
            stats.total_confidence += result.confidence
            if result.needs_review:
                stats.needs_review += 1
            elif result.confidence >= self.auto_accept_threshold:
                stats.auto_accepted += 1
            source = result.match_source.value
            stats.by_match_source[source] = stats.by_match_source.get(source, 0) + 1

    @staticmethod
    def _decode(content: bytes) -> str:
        # cp1252 covers Windows exports; latin-1 maps every byte
        for encoding in ("utf-8", "cp1252"):
            try:
                return content.decode(encoding)
            except UnicodeDecodeError:
                continue
        return content.decode("latin-1")

    def _process_single_file(self, filename: str, content: bytes) -> FileResult:
        raw_transactions = self._normalize_json_structure(json.loads(self._decode(content)), filename)
        self._validate_transactions(raw_transactions)

        stem = Path(filename).stem
        transactions = []
        for idx, raw in enumerate(raw_transactions):
            txn = Transaction.from_dict(raw, index=idx)
            if not (raw.get("id") or raw.get("transaction_id")):
                txn.id = f"{stem}-{idx}"
            transactions.append(txn)

        categorized = self.resolver.categorize_transactions(transactions, max_workers=self.max_workers)
        return FileResult(file_name=filename, categorized=categorized)

    def _validate_transactions(self, transactions: List[Dict]) -> None:
        """Every entry must be an object with an amount and a description."""
        if not transactions:
            raise ValueError("File contains no transactions")

        for idx, txn in enumerate(transactions):
            if not isinstance(txn, dict):
                raise ValueError(f"Entry {idx} is {type(txn).__name__}, expected an object")
            if "amount" not in txn:
                raise ValueError(f"Entry {idx} has no 'amount'")
            if "description" not in txn and "name" not in txn:
                raise ValueError(f"Entry {idx} has no 'description' or 'name'")

    def _normalize_json_structure(self, data, filename: str) -> List[Dict]:
        """
        Flatten the supported statement layouts to one transaction list.

        Supported layouts:
        - a list of transactions
        - {"transactions": [...]}
        - {"accounts": [{"transactions": [...]}, ...]}

        Raises:
            InvalidJsonStructureError: For an empty list or any other layout
        """
        if isinstance(data, list):
            if not data:
                raise InvalidJsonStructureError(f"{filename} holds an empty list")
            return data

        if not isinstance(data, dict):
            raise InvalidJsonStructureError(
                f"{filename} has a {type(data).__name__} at the top level, expected a list or object"
            )

        if isinstance(data.get("transactions"), list):
            return data["transactions"]

        accounts = data.get("accounts")
        if isinstance(accounts, list):
            flattened = [
                txn
                for account in accounts
                if isinstance(account, dict) and isinstance(account.get("transactions"), list)
                for txn in account["transactions"]
            ]
            logger.debug(f"{filename}: {len(flattened)} transactions across {len(accounts)} accounts")
            return flattened

        raise InvalidJsonStructureError(
            f"{filename} has neither 'transactions' nor 'accounts' (keys: {', '.join(sorted(data))})"
        )

    def load_files(self, paths: List[str]) -> List[Tuple[str, bytes]]:
        """
        Read JSON statement files from disk.

        Files without a .json suffix are skipped with a warning.

        Returns:
            (file name, raw bytes) pairs ready for process_batch()
        """
        loaded: List[Tuple[str, bytes]] = []

        for path in map(Path, paths):
            if path.suffix.lower() == ".json":
                loaded.append((path.name, path.read_bytes()))
            else:
                logger.warning(f"Ignoring {path.name}: only .json is supported")

        logger.info(f"Loaded {len(loaded)} statement file(s)")
        return loaded

    def results_to_dataframe(self, batch_result: BatchResult) -> pd.DataFrame:
        """
        One row per categorized transaction, prefixed with its file name.

        Args:
            batch_result: Result of process_batch

        Returns:
            pandas DataFrame with a leading 'File Name' column
        """
        frames = []
        for file_result in batch_result.results:
            df = results_to_dataframe(file_result.categorized)
            df.insert(0, "File Name", file_result.file_name)
            frames.append(df)

        if not frames:
            return pd.DataFrame(columns=["File Name"])
        return pd.concat(frames, ignore_index=True)

    def errors_to_dataframe(self, errors: List[ProcessingError]) -> pd.DataFrame:
        """Failed files as a DataFrame, one row per file."""
        columns = {
            "file_name": "File Name",
            "error_type": "Error Type",
            "error_message": "Error Message",
            "timestamp": "Timestamp",
        }
        df = pd.DataFrame([asdict(error) for error in errors], columns=list(columns))
        return df.rename(columns=columns)


def main(argv: Optional[List[str]] = None) -> int:
    """Categorize statement files from the command line."""
    from .persistence import build_persistence

    parser = argparse.ArgumentParser(description="Categorize bank transactions in JSON statement files")
    parser.add_argument("paths", nargs="+", help="JSON statement files")
    parser.add_argument("-o", "--output", help="Write categorized transactions to this CSV file")
    parser.add_argument("--errors", help="Write processing errors to this CSV file")
    parser.add_argument("--store-dir", help="Local store directory")
    parser.add_argument("--database-url", help="SQLAlchemy database URL")
    parser.add_argument("--workers", type=int, default=None, help="Worker threads per file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    persistence = build_persistence(database_url=args.database_url, store_dir=args.store_dir)
    try:
        resolver = CascadeResolver.from_persistence(persistence)
        processor = TransactionBatchProcessor(resolver, max_workers=args.workers)
        batch_result = processor.process_batch(processor.load_files(args.paths))

        results_df = processor.results_to_dataframe(batch_result)
        if args.output:
            results_df.to_csv(args.output, index=False)
            logger.info(f"Wrote {len(results_df)} categorized transactions to {args.output}")
        else:
            print(results_df.to_string(index=False))

        if args.errors and batch_result.errors:
            processor.errors_to_dataframe(batch_result.errors).to_csv(args.errors, index=False)
    finally:
        persistence.flush(timeout=10)
        persistence.close()

    return 0 if batch_result.stats.failed == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
