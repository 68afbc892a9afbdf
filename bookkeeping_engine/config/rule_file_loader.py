"""
Rule file loader.
Loads CSV or JSON files containing categorization rule entries.
"""

import csv
import json
from typing import Dict, List, Union
from pathlib import Path


RULE_FILE_COLUMNS = (
    "id",
    "pattern",
    "match_type",
    "merchant",
    "category_code",
    "confidence",
    "priority",
    "rule_class",
)


def _coerce_number(value: str) -> Union[int, float, str]:
    """Convert a numeric CSV cell to int or float, leaving anything else untouched."""
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def load_rule_csv(csv_path: str) -> List[Dict]:
    """
    Load rule entries from a CSV file.

    Args:
        csv_path: Path to CSV file containing rule entries

    Returns:
        List of raw rule entry dicts, in file order

    Example CSV format:
        id,pattern,match_type,merchant,category_code,confidence,priority,rule_class
        tim-hortons,tim\\s*hortons?,regex,Tim Hortons,420,96,110,merchant
        nsf-fee,nsf fee,literal,,404,98,100,bank
    """
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise FileNotFoundError(f"Rule file not found: {csv_path}")

    entries = []
    with open(csv_path, 'r', encoding='utf-8', newline='') as f:
        reader = csv.DictReader(f)
        for row in reader:
            pattern = (row.get('pattern') or '').strip()
            if not pattern:
                continue
            entries.append({
                'id': (row.get('id') or '').strip() or None,
                'pattern': pattern,
                'match_type': (row.get('match_type') or 'regex').strip(),
                'merchant': (row.get('merchant') or '').strip() or None,
                'category_code': (row.get('category_code') or '').strip(),
                'confidence': _coerce_number(row.get('confidence') or ''),
                'priority': _coerce_number(row['priority']) if (row.get('priority') or '').strip() else None,
                'rule_class': (row.get('rule_class') or '').strip(),
            })

    return entries


def load_rule_json(json_path: str) -> List[Dict]:
    """
    Load rule entries from a JSON file.

    Accepts either a list of entries or an object with a 'rules' key.
    """
    json_file = Path(json_path)
    if not json_file.exists():
        raise FileNotFoundError(f"Rule file not found: {json_path}")

    with open(json_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('rules', [])
    if not isinstance(data, list):
        raise ValueError(f"Rule file {json_path} must contain a list of rules")

    return [entry for entry in data if isinstance(entry, dict)]


def load_rule_file(path: str) -> List[Dict]:
    """
    Load rule entries from a CSV or JSON file, chosen by extension.

    Args:
        path: Path to a .csv or .json rule file

    Returns:
        List of raw rule entry dicts
    """
    suffix = Path(path).suffix.lower()
    if suffix == '.csv':
        return load_rule_csv(path)
    if suffix == '.json':
        return load_rule_json(path)
    raise ValueError(f"Unsupported rule file type: {suffix or path}")
