"""
Row-by-row reconciliation of an inventory spreadsheet into typed records.

An ImportRun owns all mutable state of a single import: per-batch sequence
counters, the match-key occurrence counter, the batch aggregates and the error
list. Build a fresh ImportRun for every import; never share one between imports.
"""

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional

import pandas as pd

from . import annotations, categories, identifiers, parsers, settings
from .matching import KeyOccurrences, derive_key
from .schemas import (
    BatchAggregate,
    Customer,
    ImportResult,
    InventoryRecord,
    StaffMember,
    Transaction,
    TransactionItem,
)

logger = logging.getLogger(__name__)

RowReader = Callable[[Mapping[str, Any]], parsers.RowFields]


class RunState(str, Enum):
    IDLE = "idle"
    PARSING_ROWS = "parsing_rows"
    ROLLING_UP = "rolling_up"
    DONE = "done"


class ImportRunError(RuntimeError):
    """Raised when rows are fed to, or a result is requested from, a finished run."""


def _new_id() -> str:
    return str(uuid.uuid4())


class ImportRun:
    def __init__(
        self,
        now: Optional[datetime] = None,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.now = now or datetime.now(timezone.utc)
        self._new_id = id_factory
        self.state = RunState.IDLE

        self.records: list[InventoryRecord] = []
        self.errors: list[str] = []
        self.skipped_rows = 0

        self._sequences: dict[str, int] = {}
        self._occurrences = KeyOccurrences()
        self._aggregates: dict[str, BatchAggregate] = {}
        self._staff: dict[str, StaffMember] = {}
        self._customers: dict[str, Customer] = {}
        self.transactions: list[Transaction] = []

    # --- Per-run registries ---

    def next_sequence(self, batch_number: str) -> int:
        """1-based counter per batch, in row-encounter order."""
        sequence = self._sequences.get(batch_number, 0) + 1
        self._sequences[batch_number] = sequence
        return sequence

    def ensure_batch(self, batch_number: str) -> BatchAggregate:
        aggregate = self._aggregates.get(batch_number)
        if aggregate is None:
            aggregate = BatchAggregate(
                id=self._new_id(),
                batch_number=batch_number,
                arrival_date=self.now,
                created_at=self.now,
                updated_at=self.now,
            )
            self._aggregates[batch_number] = aggregate
            logger.debug(f"  > New batch {batch_number}")
        return aggregate

    def ensure_staff(self, name: str) -> StaffMember:
        key = name.strip().lower()
        member = self._staff.get(key)
        if member is None:
            member = StaffMember(id=self._new_id(), name=name.strip(), created_at=self.now)
            self._staff[key] = member
        return member

    def ensure_customer(self, name: str) -> Customer:
        key = name.strip().lower()
        customer = self._customers.get(key)
        if customer is None:
            customer = Customer(
                id=self._new_id(),
                name=name.strip(),
                created_at=self.now,
                updated_at=self.now,
            )
            self._customers[key] = customer
        return customer

    # --- Row processing ---

    def process_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        sheet: str = settings.INVENTORY_SHEET,
        row_reader: RowReader = parsers.read_inventory_row,
    ) -> int:
        """Processes every row of one sheet; returns how many records it emitted."""
        emitted_before = len(self.records)
        for index, row in enumerate(rows):
            self.process_row(row, index, sheet, row_reader)
        emitted = len(self.records) - emitted_before
        logger.info(f"  > {sheet}: {emitted} records")
        return emitted

    def process_row(
        self,
        row: Mapping[str, Any],
        index: int,
        sheet: str = settings.INVENTORY_SHEET,
        row_reader: RowReader = parsers.read_inventory_row,
    ) -> Optional[InventoryRecord]:
        """
        Turns one row into a record. Failures are recorded in `errors` with the
        spreadsheet row number (header is row 1) and never abort the run.
        """
        if self.state in (RunState.ROLLING_UP, RunState.DONE):
            raise ImportRunError("This import run is already finished.")
        self.state = RunState.PARSING_ROWS

        try:
            record = self._build_record(row, row_reader)
        except Exception as e:
            message = f"Row {index + 2} in {sheet}: {e}"
            self.errors.append(message)
            logger.warning(f"  > ⚠️  {message}")
            return None

        if record is None:
            self.skipped_rows += 1
            logger.debug(f"  > Row {index + 2} in {sheet} is blank or has no article name, skipped.")
            return None

        self.records.append(record)
        return record

    def _build_record(
        self, row: Mapping[str, Any], row_reader: RowReader
    ) -> Optional[InventoryRecord]:
        if all(parsers.is_blank(value) for value in row.values()):
            return None

        fields = row_reader(row)
        parsed = identifiers.parse(fields.identifier)
        self.ensure_batch(parsed.batch_number)
        import_sequence = self.next_sequence(parsed.batch_number)
        code = identifiers.generate_code(parsed, import_sequence)

        # Nameless rows still hold their place in the batch sequence.
        if not fields.name:
            return None
        quantity = parsers.parse_quantity(fields.quantity)

        category = categories.normalize_category(fields.category)
        status = annotations.infer_status(fields.annotation_text)
        attribution = annotations.extract_attribution(fields.annotation_text)
        breakdown = annotations.quantity_breakdown(status, quantity)

        record_id = self._new_id()
        ups_batch = identifiers.to_ups_batch(fields.identifier)
        record = InventoryRecord(
            id=record_id,
            name=fields.name,
            sku=f"{category}-{ups_batch}-{record_id[-6:].upper()}",
            ups_raw=parsed.raw,
            format=parsed.format,
            batch_number=parsed.batch_number,
            product_sequence=parsed.product_sequence,
            import_sequence=import_sequence,
            ups_batch=ups_batch,
            generated_code=code,
            quantity=quantity,
            unit_price=fields.unit_price,
            category=category,
            brand=fields.brand,
            color=fields.color,
            size=fields.size,
            annotation_text=fields.annotation_text,
            user_notes=fields.user_notes,
            status=status,
            sold_by=attribution.sold_by,
            sold_to=attribution.sold_to,
            low_stock_threshold=fields.low_stock_threshold,
            created_at=self.now,
            updated_at=self.now,
            **breakdown,
        )

        # The key is taken from the unsuffixed name; only the displayed name changes.
        previous = self._occurrences.register(derive_key(record))
        if previous:
            record = record.model_copy(update={"name": f"{record.name} ({previous})"})

        if attribution.sold_by:
            self.ensure_staff(attribution.sold_by)
        return record

    # --- Payments sheet ---

    def process_payment_rows(
        self, rows: Iterable[Mapping[str, Any]], sheet: str = settings.PAYMENTS_SHEET
    ) -> int:
        """Processes every sale row of the payments sheet; returns how many it recorded."""
        recorded_before = len(self.transactions)
        for index, row in enumerate(rows):
            self.process_payment_row(row, index, sheet)
        recorded = len(self.transactions) - recorded_before
        logger.info(f"  > {sheet}: {recorded} transactions")
        return recorded

    def process_payment_row(
        self, row: Mapping[str, Any], index: int, sheet: str = settings.PAYMENTS_SHEET
    ) -> Optional[Transaction]:
        """
        Turns one sale row into a transaction and adds its total to the customer.
        Rows without a customer are ignored; failures go to `errors` like inventory rows.
        """
        if self.state in (RunState.ROLLING_UP, RunState.DONE):
            raise ImportRunError("This import run is already finished.")
        self.state = RunState.PARSING_ROWS

        try:
            transaction = self._build_transaction(row)
        except Exception as e:
            message = f"Row {index + 2} in {sheet}: {e}"
            self.errors.append(message)
            logger.warning(f"  > ⚠️  {message}")
            return None

        if transaction is not None:
            self.transactions.append(transaction)
        return transaction

    def _build_transaction(self, row: Mapping[str, Any]) -> Optional[Transaction]:
        fields = parsers.read_payment_row(row)
        if not fields.customer_name:
            return None

        item = TransactionItem(
            product_name=fields.product_name,
            quantity=fields.quantity,
            unit_price=fields.unit_price,
            total_price=fields.total_price,
            category=categories.normalize_category(fields.category),
            brand=fields.brand,
            color=fields.color,
            size=fields.size,
        )
        payment_method = parsers.classify_payment(
            fields.cash_amount, fields.transfer_amount, fields.card_amount
        )
        sold_by = annotations.extract_attribution(fields.notes).sold_by
        payment_date = (
            None
            if parsers.is_blank(fields.payment_date)
            else parsers.parse_sheet_date(fields.payment_date, self.now)
        )

        customer = self.ensure_customer(fields.customer_name)
        transaction = Transaction(
            id=self._new_id(),
            customer_id=customer.id,
            customer_name=customer.name,
            items=[item],
            subtotal=fields.total_price,
            total=fields.total_price,
            payment_method=payment_method,
            cash_amount=fields.cash_amount,
            transfer_amount=fields.transfer_amount,
            card_amount=fields.card_amount,
            actual_card_amount=fields.actual_card_amount,
            sold_by=sold_by,
            notes=fields.notes,
            date=parsers.parse_sheet_date(fields.sale_date, self.now),
            payment_date=payment_date,
            created_at=self.now,
        )

        customer.total_purchases += fields.total_price
        customer.updated_at = self.now
        if sold_by:
            self.ensure_staff(sold_by)
        return transaction

    # --- Roll-up ---

    def _roll_up(self):
        """Recomputes every batch aggregate from the emitted records."""
        for aggregate in self._aggregates.values():
            aggregate.total_records = 0
            aggregate.total_units = 0
            aggregate.total_value = Decimal("0")
            aggregate.sold_units = 0
            aggregate.available_units = 0
            aggregate.updated_at = self.now

        if not self.records:
            return

        df = pd.DataFrame(
            [
                {
                    "batch_number": record.batch_number,
                    "quantity": record.quantity,
                    "line_value": record.quantity * record.unit_price,
                    "sold_qty": record.sold_qty,
                    "available_qty": record.available_qty,
                }
                for record in self.records
            ]
        )
        totals = df.groupby("batch_number", sort=False).agg(
            total_records=("quantity", "count"),
            total_units=("quantity", "sum"),
            total_value=("line_value", lambda values: sum(values, Decimal("0"))),
            sold_units=("sold_qty", "sum"),
            available_units=("available_qty", "sum"),
        )

        for batch_number, row in totals.iterrows():
            aggregate = self.ensure_batch(batch_number)
            aggregate.total_records = int(row["total_records"])
            aggregate.total_units = int(row["total_units"])
            aggregate.total_value = Decimal(row["total_value"])
            aggregate.sold_units = int(row["sold_units"])
            aggregate.available_units = int(row["available_units"])

    def finish(self) -> ImportResult:
        if self.state in (RunState.ROLLING_UP, RunState.DONE):
            raise ImportRunError("This import run is already finished.")

        self.state = RunState.ROLLING_UP
        self._roll_up()
        self.state = RunState.DONE

        duplicates = self._occurrences.duplicates()
        if duplicates:
            logger.warning(
                f"⚠️  {len(duplicates)} match keys appear more than once; later rows were renamed."
            )
            for key, count in list(duplicates.items())[:10]:
                logger.debug(f"    - '{key}' x{count}")

        result = ImportResult(
            records=list(self.records),
            aggregates=list(self._aggregates.values()),
            staff=list(self._staff.values()),
            customers=list(self._customers.values()),
            transactions=list(self.transactions),
            errors=list(self.errors),
            skipped_rows=self.skipped_rows,
        )
        logger.info(f"✅ Import finished: {result.summary()}")
        return result


def reconcile_rows(
    rows: Iterable[Mapping[str, Any]],
    sheet: str = settings.INVENTORY_SHEET,
    row_reader: RowReader = parsers.read_inventory_row,
    now: Optional[datetime] = None,
) -> ImportResult:
    """Runs a fresh ImportRun over a single sheet's rows."""
    run = ImportRun(now=now)
    run.process_rows(rows, sheet=sheet, row_reader=row_reader)
    return run.finish()
