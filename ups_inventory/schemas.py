from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class IdentifierFormat(str, Enum):
    """The two UPS identifier schemes found in the spreadsheets."""

    LEGACY = "legacy"  # "15": batch only (drops 7-19)
    NUMBERED = "numbered"  # "001/20": product 1 of batch 20 (drops 20+)


class ProductStatus(str, Enum):
    AVAILABLE = "available"
    SOLD = "sold"
    DONATED = "donated"
    RESERVED = "reserved"
    PROMOTIONAL = "promotional"
    REVIEW = "review"
    EXPIRED = "expired"
    LOST = "lost"


class BatchStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class PaymentMethod(str, Enum):
    CASH = "cash"
    TRANSFER = "transfer"
    CARD = "card"
    MIXED = "mixed"
    CREDIT = "credit"  # nothing paid yet


class TransactionType(str, Enum):
    SALE = "sale"
    RETURN = "return"
    ADJUSTMENT = "adjustment"
    INSTALLMENT_PAYMENT = "installment_payment"


class ParsedIdentifier(BaseModel):
    """
    Structured form of a raw UPS cell.
    `product_sequence` is set if and only if the format is numbered.
    """

    raw: str = ""
    format: IdentifierFormat = IdentifierFormat.LEGACY
    batch_number: str = Field(default="0", pattern=r"^[0-9]+$", alias="batchNumber")
    product_sequence: Optional[int] = Field(default=None, ge=0, alias="productSequence")

    class Config:
        populate_by_name = True
        frozen = True

    @model_validator(mode="after")
    def _sequence_matches_format(self):
        is_numbered = self.format == IdentifierFormat.NUMBERED
        if is_numbered != (self.product_sequence is not None):
            raise ValueError(
                "productSequence must be present exactly when the format is numbered"
            )
        return self

    @property
    def is_numbered(self) -> bool:
        return self.format == IdentifierFormat.NUMBERED


class InventoryRecord(BaseModel):
    """
    One inventory item produced from a spreadsheet row.
    Aliases follow the camelCase contract of the downstream store.
    """

    id: str
    name: str = Field(..., min_length=1)
    sku: str = ""

    # UPS identifier
    ups_raw: str = Field(default="", alias="upsRaw")
    format: IdentifierFormat = Field(..., alias="identifierType")
    batch_number: str = Field(..., alias="batchNumber")
    product_sequence: Optional[int] = Field(default=None, alias="productSequence")
    import_sequence: int = Field(..., ge=1, alias="importSequence")
    ups_batch: int = Field(default=0, ge=0, alias="upsBatch")
    generated_code: str = Field(..., alias="generatedCode")

    quantity: int = Field(default=0, ge=0)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0, alias="unitPrice")
    category: str
    brand: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    annotation_text: Optional[str] = Field(default=None, alias="annotationText")
    user_notes: Optional[str] = Field(default=None, alias="userNotes")

    # Quantity per disposition
    available_qty: int = Field(default=0, ge=0, alias="availableQty")
    sold_qty: int = Field(default=0, ge=0, alias="soldQty")
    donated_qty: int = Field(default=0, ge=0, alias="donatedQty")
    lost_qty: int = Field(default=0, ge=0, alias="lostQty")
    expired_qty: int = Field(default=0, ge=0, alias="expiredQty")

    status: ProductStatus = ProductStatus.AVAILABLE
    sold_by: Optional[str] = Field(default=None, alias="soldBy")
    sold_to: Optional[str] = Field(default=None, alias="soldTo")
    low_stock_threshold: int = Field(default=5, ge=0, alias="lowStockThreshold")

    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    class Config:
        populate_by_name = True

    @property
    def review_qty(self) -> int:
        """Units not yet assigned to any disposition bucket."""
        assigned = (
            self.available_qty
            + self.sold_qty
            + self.donated_qty
            + self.lost_qty
            + self.expired_qty
        )
        return max(0, self.quantity - assigned)


class BatchAggregate(BaseModel):
    """Per-batch (drop) statistics, recomputed from the emitted records."""

    id: str
    batch_number: str = Field(..., alias="batchNumber")
    status: BatchStatus = BatchStatus.ACTIVE
    arrival_date: datetime = Field(..., alias="arrivalDate")
    total_records: int = Field(default=0, ge=0, alias="totalRecords")
    total_units: int = Field(default=0, ge=0, alias="totalUnits")
    total_value: Decimal = Field(default=Decimal("0"), ge=0, alias="totalValue")
    sold_units: int = Field(default=0, ge=0, alias="soldUnits")
    available_units: int = Field(default=0, ge=0, alias="availableUnits")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    class Config:
        populate_by_name = True


class StaffMember(BaseModel):
    """A seller name found in the annotation column."""

    id: str
    name: str
    is_active: bool = Field(default=True, alias="isActive")
    created_at: datetime = Field(..., alias="createdAt")

    class Config:
        populate_by_name = True


class Customer(BaseModel):
    """A buyer from the "Cliente" column of the payments sheet."""

    id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    balance: Decimal = Decimal("0")
    total_purchases: Decimal = Field(default=Decimal("0"), ge=0, alias="totalPurchases")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    class Config:
        populate_by_name = True


class TransactionItem(BaseModel):
    product_id: str = Field(default="", alias="productId")  # linked after import
    product_name: str = Field(default="", alias="productName")
    quantity: int = Field(default=1, ge=0)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0, alias="unitPrice")
    total_price: Decimal = Field(default=Decimal("0"), ge=0, alias="totalPrice")
    category: Optional[str] = None
    brand: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None

    class Config:
        populate_by_name = True


class Transaction(BaseModel):
    """One sale from the payments sheet, with how it was paid."""

    id: str
    customer_id: Optional[str] = Field(default=None, alias="customerId")
    customer_name: str = Field(..., alias="customerName")
    items: list[TransactionItem] = Field(default_factory=list)
    subtotal: Decimal = Field(default=Decimal("0"), ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    total: Decimal = Field(default=Decimal("0"), ge=0)

    payment_method: PaymentMethod = Field(..., alias="paymentMethod")
    cash_amount: Decimal = Field(default=Decimal("0"), ge=0, alias="cashAmount")
    transfer_amount: Decimal = Field(default=Decimal("0"), ge=0, alias="transferAmount")
    card_amount: Decimal = Field(default=Decimal("0"), ge=0, alias="cardAmount")
    actual_card_amount: Optional[Decimal] = Field(default=None, alias="actualCardAmount")
    is_installment: bool = Field(default=False, alias="isInstallment")

    sold_by: Optional[str] = Field(default=None, alias="soldBy")
    notes: Optional[str] = None
    date: datetime
    payment_date: Optional[datetime] = Field(default=None, alias="paymentDate")
    type: TransactionType = TransactionType.SALE
    created_at: datetime = Field(..., alias="createdAt")

    class Config:
        populate_by_name = True


class ImportResult(BaseModel):
    records: list[InventoryRecord] = Field(default_factory=list)
    aggregates: list[BatchAggregate] = Field(default_factory=list)
    staff: list[StaffMember] = Field(default_factory=list)
    customers: list[Customer] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    skipped_rows: int = Field(default=0, ge=0, alias="skippedRows")

    class Config:
        populate_by_name = True

    def aggregate_for(self, batch_number: str) -> Optional[BatchAggregate]:
        for aggregate in self.aggregates:
            if aggregate.batch_number == batch_number:
                return aggregate
        return None

    def summary(self) -> dict:
        return {
            "records": len(self.records),
            "batches": len(self.aggregates),
            "staff": len(self.staff),
            "customers": len(self.customers),
            "transactions": len(self.transactions),
            "errors": len(self.errors),
            "skipped_rows": self.skipped_rows,
        }
