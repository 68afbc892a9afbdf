"""
Test suite for the transaction batch processor.

Tests file parsing, error classification, statistics and DataFrame export.
"""

import json
import os
import shutil
import tempfile
import unittest

from bookkeeping_engine.batch_processor import TransactionBatchProcessor, main
from bookkeeping_engine.categorisation import CascadeResolver, RuleCatalog
from bookkeeping_engine.learning import CustomKeywordStore, LearnedPatternStore
from bookkeeping_engine.patterns import SYSTEM_RULES


STATEMENT = [
    {"date": "2025-01-15", "description": "TIM HORTONS #183", "amount": -12.47},
    {"date": "2025-01-31", "description": "MONTHLY SERVICE CHARGE", "amount": -16.95},
    {"date": "2025-02-01", "description": "SEND E-TFR", "amount": -500},
    {"date": "2025-02-02", "name": "ZZQXJ UNKNOWN MERCHANT", "amount": 100},
]


def encode(data):
    return json.dumps(data).encode("utf-8")


class TestBatchProcessing(unittest.TestCase):
    """process_batch() across good and bad files."""

    def setUp(self):
        """Set up test fixtures."""
        resolver = CascadeResolver(
            RuleCatalog.from_entries(SYSTEM_RULES),
            CustomKeywordStore(),
            LearnedPatternStore(),
        )
        self.processor = TransactionBatchProcessor(resolver)

    def test_successful_file(self):
        """A list of transactions is categorized with stats."""
        result = self.processor.process_batch([("january.json", encode(STATEMENT))])

        self.assertEqual(result.stats.successful, 1)
        self.assertEqual(result.stats.total_transactions, 4)
        self.assertEqual(result.stats.needs_review, 2)
        self.assertEqual(result.stats.auto_accepted, 2)
        self.assertEqual(result.stats.by_match_source["fallback"], 1)
        self.assertEqual(result.errors, [])

        categorized = result.categorized
        self.assertEqual(categorized[0][0].id, "january-0")
        self.assertEqual(categorized[0][1].category_code, "420")
        self.assertEqual(categorized[3][0].description, "ZZQXJ UNKNOWN MERCHANT")

    def test_supported_layouts(self):
        """Transactions may sit at the root, under 'transactions' or inside accounts."""
        files = [
            ("list.json", encode(STATEMENT)),
            ("object.json", encode({"transactions": STATEMENT})),
            ("accounts.json", encode({"accounts": [
                {"account_id": "chq", "transactions": STATEMENT[:2]},
                {"account_id": "sav", "transactions": STATEMENT[2:]},
            ]})),
        ]

        result = self.processor.process_batch(files)

        self.assertEqual(result.stats.successful, 3)
        self.assertEqual([r.transaction_count for r in result.results], [4, 4, 4])

    def test_error_classification(self):
        """Each failure kind is recorded with its error type."""
        files = [
            ("broken.json", b"{not json"),
            ("no_amount.json", encode([{"date": "2025-01-01", "description": "TIM HORTONS"}])),
            ("bad_amount.json", encode([{"description": "TIM HORTONS", "amount": "abc"}])),
            ("shape.json", encode({"something": "else"})),
            ("empty.json", encode([])),
        ]

        result = self.processor.process_batch(files)

        self.assertEqual(result.stats.failed, 5)
        self.assertEqual(result.stats.success_rate, 0.0)
        self.assertEqual(result.error_summary, {
            "JSON_PARSE_ERROR": 1,
            "DATA_VALIDATION_ERROR": 2,
            "INVALID_JSON_STRUCTURE": 2,
        })

    def test_cp1252_content(self):
        """Windows-encoded files are decoded with a fallback."""
        content = '[{"description": "CAFÉ œUVRE", "amount": -4.5}]'.encode("cp1252")

        result = self.processor.process_batch([("cafe.json", content)])

        self.assertEqual(result.stats.successful, 1)
        self.assertEqual(result.categorized[0][0].description, "CAFÉ œUVRE")

    def test_progress_callback(self):
        """The callback sees every file."""
        calls = []
        self.processor.process_batch(
            [("a.json", encode(STATEMENT)), ("b.json", encode(STATEMENT))],
            progress_callback=lambda current, total, message: calls.append((current, total)),
        )
        self.assertEqual(calls, [(1, 2), (2, 2)])

    def test_dataframes(self):
        """Results and errors convert to pandas DataFrames."""
        result = self.processor.process_batch([
            ("january.json", encode(STATEMENT)),
            ("broken.json", b"{not json"),
        ])

        results_df = self.processor.results_to_dataframe(result)
        errors_df = self.processor.errors_to_dataframe(result.errors)

        self.assertEqual(len(results_df), 4)
        self.assertEqual(list(results_df["File Name"].unique()), ["january.json"])
        self.assertEqual(results_df.loc[0, "Category Code"], "420")
        self.assertEqual(errors_df.loc[0, "Error Type"], "JSON_PARSE_ERROR")


class TestLoadFiles(unittest.TestCase):
    """Loading statement files from disk."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        resolver = CascadeResolver(
            RuleCatalog.from_entries(SYSTEM_RULES),
            CustomKeywordStore(),
            LearnedPatternStore(),
        )
        self.processor = TransactionBatchProcessor(resolver)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_json_loaded_and_others_skipped(self):
        """JSON files are read, archives and other files are skipped."""
        json_path = os.path.join(self.temp_dir, "one.json")
        with open(json_path, "wb") as f:
            f.write(encode(STATEMENT))

        zip_path = os.path.join(self.temp_dir, "bundle.zip")
        with open(zip_path, "wb") as f:
            f.write(b"PK\x03\x04")

        txt_path = os.path.join(self.temp_dir, "notes.txt")
        with open(txt_path, "w", encoding="utf-8") as f:
            f.write("skip")

        files = self.processor.load_files([json_path, zip_path, txt_path])

        self.assertEqual([name for name, _ in files], ["one.json"])

    def test_command_line(self):
        """The command line writes categorized rows to CSV."""
        json_path = os.path.join(self.temp_dir, "one.json")
        with open(json_path, "wb") as f:
            f.write(encode(STATEMENT))
        output = os.path.join(self.temp_dir, "out.csv")

        exit_code = main([
            json_path,
            "--output", output,
            "--store-dir", os.path.join(self.temp_dir, "store"),
        ])

        self.assertEqual(exit_code, 0)
        with open(output, encoding="utf-8") as f:
            lines = f.read().splitlines()
        self.assertEqual(len(lines), 5)
        self.assertTrue(lines[0].startswith("File Name,Transaction ID"))


if __name__ == "__main__":
    unittest.main()
