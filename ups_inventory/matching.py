"""
Match keys: fingerprints that tell whether two import rows denote the same item.

Numbered identifiers already carry a per-batch product number, so batch, product,
name and category are enough. Legacy identifiers carry nothing item-specific and
fall back to the full descriptive tuple.
"""

import unicodedata
from collections import Counter
from typing import Any

from .schemas import InventoryRecord

KEY_SEPARATOR = "|"

# String literals that leak in from upstream storage for missing values.
_NULL_LITERALS = {"undefined", "null"}


def normalize_field(value: Any) -> str:
    if value is None:
        return ""
    text = unicodedata.normalize("NFC", str(value).strip().lower())
    if text in _NULL_LITERALS:
        return ""
    return text


def derive_key(record: InventoryRecord) -> str:
    batch_number = normalize_field(record.batch_number)
    name = normalize_field(record.name)
    category = normalize_field(record.category)

    if record.product_sequence is not None:
        parts = [batch_number, str(record.product_sequence), name, category]
    else:
        parts = [
            batch_number,
            name,
            category,
            normalize_field(record.brand),
            normalize_field(record.color),
            normalize_field(record.size),
        ]
    return KEY_SEPARATOR.join(parts)


class KeyOccurrences:
    """How many times each match key has been seen during one import run."""

    def __init__(self):
        self._counts: Counter = Counter()

    def seen(self, key: str) -> int:
        return self._counts[key]

    def register(self, key: str) -> int:
        """Counts one more occurrence and returns how many were seen before it."""
        previous = self._counts[key]
        self._counts[key] = previous + 1
        return previous

    def duplicates(self) -> dict[str, int]:
        return {key: count for key, count in self._counts.items() if count > 1}

    def __len__(self) -> int:
        return len(self._counts)
