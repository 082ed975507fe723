"""
Shared fixtures: spreadsheet-style rows and ready-made inventory records.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ups_inventory.schemas import IdentifierFormat, InventoryRecord

FIXED_NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def make_row():
    """Builds an "Inventario" sheet row with the workbook's Spanish headers."""

    def _make_row(ups="15", name="Blusa", quantity=1, price=100, category="BLS", **extra):
        row = {
            "UPS": ups,
            "Artículo": name,
            "Cantidad": quantity,
            "Precio unitario": price,
            "Categoría": category,
        }
        row.update(extra)
        return row

    return _make_row


@pytest.fixture
def make_record():
    def _make_record(**overrides):
        fields = dict(
            id="rec-1",
            name="Blusa",
            format=IdentifierFormat.LEGACY,
            batch_number="15",
            product_sequence=None,
            import_sequence=1,
            generated_code="D15-0001",
            quantity=1,
            unit_price=Decimal("100"),
            category="BLS",
            created_at=FIXED_NOW,
            updated_at=FIXED_NOW,
        )
        fields.update(overrides)
        return InventoryRecord(**fields)

    return _make_record
