"""
Heuristics over the free-text "Observaciones" column.

The column is written by hand ("Vendido a Juan", "Donado a la escuela",
"Vendedor: Ana, Cliente: Pedro") and is the only place the spreadsheets record
an item's fate. Status and attribution are inferred from ordered pattern tables
where the first hit wins.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .schemas import ProductStatus

# Priority order: sold is checked first because notes often mention several
# keywords ("vendido, estaba reservado").
STATUS_RULES: list[tuple[re.Pattern, ProductStatus]] = [
    (re.compile(r"vendid[ao]s?", re.IGNORECASE), ProductStatus.SOLD),
    (re.compile(r"donad[ao]s?", re.IGNORECASE), ProductStatus.DONATED),
    (re.compile(r"reservad[ao]s?", re.IGNORECASE), ProductStatus.RESERVED),
    (re.compile(r"promoci[oó]n", re.IGNORECASE), ProductStatus.PROMOTIONAL),
    (re.compile(r"revis(?:ar|i[oó]n)", re.IGNORECASE), ProductStatus.REVIEW),
    (
        re.compile(r"vencid[ao]s?|caducad[ao]s?|expirad[ao]s?", re.IGNORECASE),
        ProductStatus.EXPIRED,
    ),
    (re.compile(r"extraviad[ao]s?|perdid[ao]s?", re.IGNORECASE), ProductStatus.LOST),
]

# A name ends at punctuation, end of text, or where the other party's clause starts.
_NAME = r"([^,;\n]+?)(?=\s+(?:a|por)\s|\s*[,;\n]|\s*$)"

SOLD_BY_PATTERNS: list[re.Pattern] = [
    re.compile(rf"\bvendedora?[:\s]+{_NAME}", re.IGNORECASE),
    re.compile(rf"\bvendid[ao]s?\s+por[:\s]+{_NAME}", re.IGNORECASE),
    re.compile(rf"\bpor[:\s]+{_NAME}", re.IGNORECASE),
]

SOLD_TO_PATTERNS: list[re.Pattern] = [
    re.compile(rf"\bcliente[:\s]+{_NAME}", re.IGNORECASE),
    re.compile(rf"\bvendid[ao]s?\s+a[:\s]+{_NAME}", re.IGNORECASE),
    re.compile(rf"\ba[:\s]+{_NAME}", re.IGNORECASE),
]

# Which breakdown field receives the row quantity for each status.
QUANTITY_BUCKETS: dict[ProductStatus, Optional[str]] = {
    ProductStatus.AVAILABLE: "available_qty",
    ProductStatus.RESERVED: "available_qty",
    ProductStatus.PROMOTIONAL: "available_qty",
    ProductStatus.SOLD: "sold_qty",
    ProductStatus.DONATED: "donated_qty",
    ProductStatus.LOST: "lost_qty",
    ProductStatus.EXPIRED: "expired_qty",
    ProductStatus.REVIEW: None,  # held back until someone resolves it
}

BREAKDOWN_FIELDS = ("available_qty", "sold_qty", "donated_qty", "lost_qty", "expired_qty")


@dataclass(frozen=True)
class Attribution:
    sold_by: Optional[str] = None
    sold_to: Optional[str] = None


def infer_status(text: Optional[str]) -> ProductStatus:
    if not text or not text.strip():
        return ProductStatus.AVAILABLE
    for pattern, status in STATUS_RULES:
        if pattern.search(text):
            return status
    return ProductStatus.AVAILABLE


def _first_name(text: str, patterns: list[re.Pattern]) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            name = match.group(1).strip()
            if name:
                return name
    return None


def extract_attribution(text: Optional[str]) -> Attribution:
    """Pulls "sold by" / "sold to" names out of an annotation; missing names stay None."""
    if not text or not text.strip():
        return Attribution()
    return Attribution(
        sold_by=_first_name(text, SOLD_BY_PATTERNS),
        sold_to=_first_name(text, SOLD_TO_PATTERNS),
    )


def quantity_breakdown(status: ProductStatus, quantity: int) -> dict[str, int]:
    """Places the whole row quantity in the bucket matching the status."""
    breakdown = {field: 0 for field in BREAKDOWN_FIELDS}
    bucket = QUANTITY_BUCKETS[status]
    if bucket is not None:
        breakdown[bucket] = quantity
    return breakdown
