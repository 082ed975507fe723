import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from ups_inventory import data_handler
from ups_inventory.schemas import ImportResult

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for import pipelines.
    Follows an Extract -> Transform -> Load (ETL) pattern.
    """

    def __init__(self, report_type: str, sheets: Optional[list[str]] = None, test_mode: bool = False):
        self.report_type = report_type
        self.sheets = sheets or []
        self.test_mode = test_mode
        # Rows read per sheet; None when the sheet was missing
        self.status_summary: dict[str, Optional[int]] = {sheet: None for sheet in self.sheets}

    def run(self) -> ImportResult:
        """
        Orchestrates the pipeline execution and returns the transformed result.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()}")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()
        if not raw_data:
            logger.warning(f"⚠️ No data extracted for {self.report_type}.")
            result = ImportResult()
            self.load(result)
            return result

        # --- 2. TRANSFORM ---
        result = self.transform(raw_data)

        # --- 3. LOAD ---
        self.load(result)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return result

    @abstractmethod
    def extract(self) -> Optional[dict[str, Any]]:
        """
        Finds the source, reads it, and returns raw data keyed by sheet name.
        Should also populate self.status_summary as it reads sheets.
        """

    @abstractmethod
    def transform(self, raw_data: dict[str, Any]) -> ImportResult:
        """
        Turns the raw sheets into validated records and batch aggregates.
        """

    def load(self, result: ImportResult):
        """
        Reports the run, saves data to disk and posts to webhook.
        """
        # 1. Sheet summary
        if self.sheets:
            logger.info("\n--- Sheet Summary ---")
            for sheet in self.sheets:
                rows = self.status_summary.get(sheet)
                logger.info(f"{sheet}: {rows if rows is not None else 'Not found'} rows")

        # 2. Row errors never fail the import; surface them as warnings.
        if result.errors:
            logger.warning(f"⚠️ {len(result.errors)} rows could not be imported:")
            for error in result.errors:
                logger.warning(f"  - {error}")

        # 3. Save outputs (CSV/JSON)
        if result.records:
            data_handler.save_outputs(result, self.report_type)
        else:
            logger.warning("No records to save to disk.")

        # 4. Post to Webhook
        if not self.test_mode:
            data_handler.post_to_webhook(
                result=result,
                sheet_summary=self.status_summary,
                report_type=self.report_type,
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")
