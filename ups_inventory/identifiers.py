"""
UPS identifier parsing and scan-code generation.

Two identifier schemes coexist in the spreadsheets:
- Legacy (drops 7-19): a single batch number, e.g. "15".
- Numbered (drops 20+): "product/batch", e.g. "001/20" is product 1 of batch 20.

Generated codes (printed as QR/barcodes) keep the two schemes apart:
- Numbered: "{batch padded to 4}-{product}", e.g. "0020-1".
- Legacy:   "D{batch}-{import sequence padded to 4}", e.g. "D15-0042".
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from . import settings
from .schemas import IdentifierFormat, InventoryRecord, ParsedIdentifier

# First number is the PRODUCT, second number is the BATCH.
# re.ASCII: only 0-9 count as digits, other scripts' numerals fall through.
NUMBERED_FORMAT_REGEX = re.compile(r"^(\d+)\s*[/\\-]\s*(\d+)$", re.ASCII)
LEGACY_FORMAT_REGEX = re.compile(r"^\d+$", re.ASCII)
NON_DIGITS_REGEX = re.compile(r"[^0-9]")

LEGACY_CODE_REGEX = re.compile(
    rf"^{settings.LEGACY_CODE_PREFIX}(\d+)-(\d+)$", re.IGNORECASE | re.ASCII
)
NUMBERED_CODE_REGEX = re.compile(r"^(\d+)-(\d+)$", re.ASCII)


def _as_text(value: Any) -> str:
    """Stringifies a raw cell, rendering integral floats (15.0) as integers."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    try:
        return str(value).strip()
    except ValueError:
        # ints past the interpreter's digit limit cannot be rendered
        return ""


def _to_int(digits: str) -> Optional[int]:
    """int() of a digit string, or None past the interpreter's digit limit."""
    try:
        return int(digits)
    except ValueError:
        return None


def parse(value: Any) -> ParsedIdentifier:
    """
    Parses a raw UPS value into a ParsedIdentifier.
    Never raises: unrecognised input falls back to a legacy batch built from
    its digits, or batch "0" when there are none.
    """
    raw = _as_text(value)
    if not raw:
        return ParsedIdentifier()

    numbered_match = NUMBERED_FORMAT_REGEX.match(raw)
    if numbered_match:
        product_sequence = _to_int(numbered_match.group(1))
        if product_sequence is not None:
            return ParsedIdentifier(
                raw=raw,
                format=IdentifierFormat.NUMBERED,
                batch_number=numbered_match.group(2),
                product_sequence=product_sequence,
            )

    if LEGACY_FORMAT_REGEX.match(raw):
        return ParsedIdentifier(raw=raw, batch_number=raw)

    digits_only = NON_DIGITS_REGEX.sub("", raw)
    return ParsedIdentifier(raw=raw, batch_number=digits_only or "0")


def is_numbered_format(value: Any) -> bool:
    text = _as_text(value)
    return bool(text) and NUMBERED_FORMAT_REGEX.match(text) is not None


def is_legacy_format(value: Any) -> bool:
    text = _as_text(value)
    if not text:
        return False
    return LEGACY_FORMAT_REGEX.match(text) is not None and not is_numbered_format(text)


def format_identifier(parsed: ParsedIdentifier) -> str:
    """Renders "product/batch" for numbered identifiers, the batch alone otherwise."""
    if parsed.is_numbered:
        return f"{parsed.product_sequence}/{parsed.batch_number}"
    return parsed.batch_number


def to_ups_batch(value: Any) -> int:
    """Integer batch number, kept on records for older consumers."""
    return _to_int(parse(value).batch_number) or 0


# --- Generated codes ---


@dataclass(frozen=True)
class ParsedCode:
    format: IdentifierFormat
    batch_number: str
    number: int  # product sequence (numbered) or import sequence (legacy)


def numbered_code(batch_number: str, product_sequence: int) -> str:
    return f"{batch_number.zfill(settings.NUMBERED_BATCH_PAD)}-{product_sequence}"


def legacy_code(batch_number: str, import_sequence: int) -> str:
    padded = str(import_sequence).zfill(settings.LEGACY_SEQUENCE_PAD)
    return f"{settings.LEGACY_CODE_PREFIX}{batch_number}-{padded}"


def generate_code(parsed: ParsedIdentifier, import_sequence: int) -> str:
    """
    Deterministic scan code for an item.
    Numbered identifiers use their embedded product number so the code survives
    re-imports; legacy identifiers have none and use the import sequence.
    """
    if parsed.is_numbered:
        return numbered_code(parsed.batch_number, parsed.product_sequence)
    return legacy_code(parsed.batch_number, import_sequence)


def parse_code(code: Optional[str]) -> Optional[ParsedCode]:
    """Recovers the batch and number from a scanned code; None if unrecognised."""
    if not code:
        return None
    text = code.strip()

    legacy_match = LEGACY_CODE_REGEX.match(text)
    if legacy_match:
        number = _to_int(legacy_match.group(2))
        if number is None:
            return None
        return ParsedCode(
            format=IdentifierFormat.LEGACY,
            batch_number=legacy_match.group(1),
            number=number,
        )

    numbered_match = NUMBERED_CODE_REGEX.match(text)
    if numbered_match:
        number = _to_int(numbered_match.group(2))
        if number is None:
            return None
        return ParsedCode(
            format=IdentifierFormat.NUMBERED,
            batch_number=numbered_match.group(1).lstrip("0") or "0",  # drop padding
            number=number,
        )

    return None


def is_valid_code(code: Optional[str]) -> bool:
    return parse_code(code) is not None


def next_sequence(existing_codes: Iterable[str]) -> int:
    """One past the highest legacy sequence among the given codes."""
    highest = 0
    for code in existing_codes:
        parsed = parse_code(code)
        if parsed and parsed.format == IdentifierFormat.LEGACY:
            highest = max(highest, parsed.number)
    return highest + 1


def code_matches_identifier(code: str, value: Any) -> bool:
    """True when the code's format, batch and (numbered) product agree with the UPS value."""
    code_data = parse_code(code)
    if code_data is None:
        return False

    identifier = parse(value)
    if code_data.format != identifier.format:
        return False
    if code_data.batch_number != identifier.batch_number:
        return False
    if identifier.is_numbered:
        return code_data.number == identifier.product_sequence
    return True


def candidate_codes(batch_number: str, number: int) -> list[str]:
    """Both code shapes for a batch/number pair, numbered first."""
    return [numbered_code(batch_number, number), legacy_code(batch_number, number)]


def find_by_code(
    records: Iterable[InventoryRecord], code: str
) -> Optional[InventoryRecord]:
    """
    Looks a scanned code up among records.
    Tries the exact code first, then the other code shape for the same batch and
    number, since items of numbered batches may still carry legacy labels.
    """
    by_code = {record.generated_code: record for record in records}
    text = (code or "").strip()
    if text in by_code:
        return by_code[text]

    parsed = parse_code(text)
    if parsed is None:
        return None
    for candidate in candidate_codes(parsed.batch_number, parsed.number):
        if candidate in by_code:
            return by_code[candidate]
    return None
