import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from ups_inventory import parsers, settings, utils
from ups_inventory.pipeline import DataPipeline
from ups_inventory.reconciliation import ImportRun
from ups_inventory.schemas import ImportResult

logger = logging.getLogger(__name__)


class InventoryImportPipeline(DataPipeline):
    def __init__(self, workbook_path: Optional[Path] = None, test_mode: bool = False):
        # Sheets processed in this order; "kind" picks the row handler
        self.SHEET_REGISTRY = [
            {
                "sheet_name": settings.INVENTORY_SHEET,
                "kind": "inventory",
                "row_reader": parsers.read_inventory_row,
            },
            {
                "sheet_name": settings.ELECTRONICS_SHEET,
                "kind": "inventory",
                "row_reader": parsers.read_electronics_row,
            },
            {
                "sheet_name": settings.PAYMENTS_SHEET,
                "kind": "payments",
            },
        ]
        super().__init__(
            "inventory_import",
            sheets=[entry["sheet_name"] for entry in self.SHEET_REGISTRY],
            test_mode=test_mode,
        )
        self.workbook_path = workbook_path
        self.report_date = None

    def extract(self) -> Optional[dict[str, pd.DataFrame]]:
        logger.info("--- Starting Inventory Import ---")

        if self.workbook_path is not None:
            path = Path(self.workbook_path)
            self.report_date = utils.report_date_from_filename(path) if path.exists() else None
        else:
            found = utils.find_latest_report(settings.INPUT_DIR, settings.WORKBOOK_FILENAME_PREFIX)
            if not found:
                logger.error(
                    f"  > ERROR: No workbook starting with '{settings.WORKBOOK_FILENAME_PREFIX}' "
                    f"in {settings.INPUT_DIR}"
                )
                return None
            path, self.report_date = found

        logger.info(f"  > Found: {path.name} (Date: {self.report_date})")

        # An unreadable workbook is fatal: WorkbookReadError propagates to the caller.
        workbook = utils.load_workbook(path)

        frames = {}
        for entry in self.SHEET_REGISTRY:
            sheet_name = entry["sheet_name"]
            df = workbook.get(sheet_name)
            if df is None:
                logger.warning(f"  > ⚠️  Sheet '{sheet_name}' missing. Skipping.")
                self.status_summary[sheet_name] = None
                continue
            frames[sheet_name] = df
            self.status_summary[sheet_name] = len(df)
            logger.info(f"  > Sheet '{sheet_name}': {len(df)} rows")

        return frames or None

    def transform(self, frames: dict[str, pd.DataFrame]) -> ImportResult:
        logger.info("\n--- Reconciling Rows ---")

        # One run for the whole workbook: batch sequences continue across sheets.
        run = ImportRun()
        for entry in self.SHEET_REGISTRY:
            df = frames.get(entry["sheet_name"])
            if df is None:
                continue
            rows = df.to_dict("records")
            if entry["kind"] == "payments":
                run.process_payment_rows(rows, sheet=entry["sheet_name"])
            else:
                run.process_rows(
                    rows,
                    sheet=entry["sheet_name"],
                    row_reader=entry["row_reader"],
                )
        return run.finish()
