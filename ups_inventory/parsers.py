import numbers
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

import pandas as pd

from . import settings
from .schemas import PaymentMethod


def is_blank(value: Any) -> bool:
    """None, NaN/NaT (empty pandas cells) and whitespace-only strings are blank."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return bool(pd.api.types.is_scalar(value) and pd.isna(value))


def cell_value(row: Mapping[str, Any], *aliases: str) -> Any:
    """Returns the first non-blank cell among the column aliases, or None."""
    for alias in aliases:
        value = row.get(alias)
        if not is_blank(value):
            return value
    return None


def cell_text(row: Mapping[str, Any], *aliases: str) -> Optional[str]:
    value = cell_value(row, *aliases)
    if value is None:
        return None
    # Numeric cells such as sizes come back as floats (32.0) when the column has blanks.
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def parse_quantity(value: Any) -> int:
    """
    Whole-unit quantity from a cell. Blank cells count as 0; anything that is not
    a whole number raises ValueError so the row gets reported.
    """
    if is_blank(value):
        return 0
    if isinstance(value, bool):
        raise ValueError(f"invalid quantity {value!r}")
    if isinstance(value, numbers.Integral):
        return int(value)

    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"invalid quantity {value!r}") from None

    if not number.is_finite() or number != number.to_integral_value():
        raise ValueError(f"quantity must be a whole number, got {value!r}")
    return int(number)


def parse_currency(value: Any) -> Decimal:
    """Money from a cell such as 150, 99.5 or "$1,250.00". Unreadable values count as 0."""
    if is_blank(value) or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, numbers.Integral):
        return Decimal(int(value))
    if isinstance(value, float):
        return Decimal(str(value))

    cleaned = "".join(str(value).replace("$", "").replace(",", "").split())
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")
    return amount if amount.is_finite() else Decimal("0")


@dataclass
class RowFields:
    """
    Cell values of one sheet row, coerced to their working types. The quantity
    stays raw until the row has taken its place in the batch sequence.
    """

    identifier: Any
    name: str
    quantity: Any
    unit_price: Decimal
    category: str
    brand: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    annotation_text: Optional[str] = None
    user_notes: Optional[str] = None
    low_stock_threshold: int = settings.DEFAULT_LOW_STOCK_THRESHOLD


def read_inventory_row(row: Mapping[str, Any]) -> RowFields:
    """Reads a row of the general "Inventario" sheet."""
    return RowFields(
        identifier=cell_value(row, *settings.IDENTIFIER_COLUMNS),
        name=cell_text(row, *settings.NAME_COLUMNS) or "",
        quantity=cell_value(row, *settings.QUANTITY_COLUMNS),
        unit_price=parse_currency(cell_value(row, *settings.UNIT_PRICE_COLUMNS)),
        category=cell_text(row, *settings.CATEGORY_COLUMNS) or settings.DEFAULT_CATEGORY,
        brand=cell_text(row, *settings.BRAND_COLUMNS),
        color=cell_text(row, *settings.COLOR_COLUMNS),
        size=cell_text(row, *settings.SIZE_COLUMNS),
        annotation_text=cell_text(row, *settings.ANNOTATION_COLUMNS),
        user_notes=cell_text(row, *settings.USER_NOTES_COLUMNS),
    )


def electronics_category(article: Optional[str]) -> str:
    article = (article or "").lower()
    if "celular" in article:
        return "CEL"
    if "compu" in article:
        return "COMP"
    return "EL"


def read_electronics_row(row: Mapping[str, Any]) -> RowFields:
    """
    Reads a row of the "Inventario Comp Y Cel" sheet.
    Each row is a single device; the name is built from brand, model and color,
    and the storage capacity stands in for the size.
    """
    brand = cell_text(row, *settings.BRAND_COLUMNS)
    model = cell_text(row, *settings.MODEL_COLUMNS)
    color = cell_text(row, *settings.COLOR_COLUMNS)
    name = " ".join(part for part in (brand, model, color) if part)

    return RowFields(
        identifier=cell_value(row, *settings.ELECTRONICS_IDENTIFIER_COLUMNS),
        name=name,
        quantity=1,
        unit_price=parse_currency(cell_value(row, *settings.UNIT_PRICE_COLUMNS)),
        category=electronics_category(cell_text(row, *settings.NAME_COLUMNS)),
        brand=brand,
        color=color,
        size=cell_text(row, *settings.CAPACITY_COLUMNS),
        annotation_text=cell_text(row, *settings.ANNOTATION_COLUMNS),
        user_notes=cell_text(row, *settings.USER_NOTES_COLUMNS),
        low_stock_threshold=settings.ELECTRONICS_LOW_STOCK_THRESHOLD,
    )


# --- "Pagos" sheet ---

EXCEL_EPOCH = "1899-12-30"


def parse_sheet_date(value: Any, default: datetime) -> datetime:
    """
    Date from a cell: a datetime, an Excel serial day number or a date string.
    Blank or unreadable cells give `default`; naive dates are taken as UTC.
    """
    if is_blank(value) or isinstance(value, bool):
        return default
    try:
        if isinstance(value, numbers.Number):
            parsed = pd.to_datetime(float(value), unit="D", origin=EXCEL_EPOCH)
        else:
            parsed = pd.to_datetime(value, errors="coerce")
    except (ValueError, TypeError, OverflowError, pd.errors.OutOfBoundsDatetime):
        return default
    if pd.isna(parsed):
        return default

    parsed = parsed.to_pydatetime()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def classify_payment(cash: Decimal, transfer: Decimal, card: Decimal) -> PaymentMethod:
    """A single paid channel names the method; several make it mixed, none is credit."""
    paid = [method for method, amount in (
        (PaymentMethod.CASH, cash),
        (PaymentMethod.TRANSFER, transfer),
        (PaymentMethod.CARD, card),
    ) if amount > 0]
    if len(paid) == 1:
        return paid[0]
    if paid:
        return PaymentMethod.MIXED
    return PaymentMethod.CREDIT


@dataclass
class PaymentFields:
    customer_name: str
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    category: str
    cash_amount: Decimal
    transfer_amount: Decimal
    card_amount: Decimal
    actual_card_amount: Optional[Decimal] = None
    brand: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    notes: Optional[str] = None
    sale_date: Any = None
    payment_date: Any = None


def read_payment_row(row: Mapping[str, Any]) -> PaymentFields:
    """
    Reads a row of the "Pagos" sheet. A missing or zero quantity counts as one
    unit and a missing total is quantity times unit price.
    """
    quantity = parse_quantity(cell_value(row, *settings.QUANTITY_COLUMNS)) or 1
    unit_price = parse_currency(cell_value(row, *settings.PAYMENT_UNIT_PRICE_COLUMNS))
    total_price = parse_currency(cell_value(row, *settings.TOTAL_PRICE_COLUMNS))
    if not total_price:
        total_price = quantity * unit_price

    actual_card = cell_value(row, *settings.ACTUAL_CARD_COLUMNS)
    return PaymentFields(
        customer_name=cell_text(row, *settings.CUSTOMER_COLUMNS) or "",
        product_name=cell_text(row, *settings.NAME_COLUMNS) or "",
        quantity=quantity,
        unit_price=unit_price,
        total_price=total_price,
        category=cell_text(row, *settings.CATEGORY_COLUMNS) or "",
        cash_amount=parse_currency(cell_value(row, *settings.CASH_COLUMNS)),
        transfer_amount=parse_currency(cell_value(row, *settings.TRANSFER_COLUMNS)),
        card_amount=parse_currency(cell_value(row, *settings.CARD_COLUMNS)),
        actual_card_amount=None if actual_card is None else parse_currency(actual_card),
        brand=cell_text(row, *settings.BRAND_COLUMNS),
        color=cell_text(row, *settings.COLOR_COLUMNS),
        size=cell_text(row, *settings.SIZE_COLUMNS),
        notes=cell_text(row, *settings.ANNOTATION_COLUMNS),
        sale_date=cell_value(row, *settings.SALE_DATE_COLUMNS),
        payment_date=cell_value(row, *settings.PAYMENT_DATE_COLUMNS),
    )
