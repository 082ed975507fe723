import json
import logging
from pathlib import Path
from typing import Optional

import pandas as pd
import requests

from . import settings
from . import utils
from .schemas import ImportResult

logger = logging.getLogger(__name__)


def save_outputs(result: ImportResult, report_name: str) -> dict[str, Path]:
    """Saves records and batch aggregates to dated CSVs, and the whole result to JSON."""
    settings.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()
    saved: dict[str, Path] = {}

    records_path = settings.OUTPUT_DIR / f"{report_name}_records_{date_suffix}.csv"
    pd.DataFrame(
        [record.model_dump(mode="json", by_alias=True) for record in result.records]
    ).to_csv(records_path, index=False)
    saved["records"] = records_path
    logger.info(f"✅ Records saved to: {records_path}")

    aggregates_path = settings.OUTPUT_DIR / f"{report_name}_batches_{date_suffix}.csv"
    pd.DataFrame(
        [aggregate.model_dump(mode="json", by_alias=True) for aggregate in result.aggregates]
    ).to_csv(aggregates_path, index=False)
    saved["aggregates"] = aggregates_path
    logger.info(f"✅ Batch summary saved to: {aggregates_path}")

    if settings.SAVE_JSON_OUTPUT:
        json_path = settings.OUTPUT_DIR / f"{report_name}_{date_suffix}.json"
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(
                result.model_dump(mode="json", by_alias=True),
                f,
                indent=2,
                ensure_ascii=False,
            )
        saved["json"] = json_path
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.info("INFO: Skipping JSON file save as per configuration.")

    return saved


def post_to_webhook(
    result: ImportResult,
    sheet_summary: dict[str, Optional[int]],
    report_type: str = "inventory_import",
) -> bool:
    """
    Posts the import result and the per-sheet row summary to the webhook.
    Returns True when the webhook accepted the payload.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return False

    logger.info(f"🚀 Posting {report_type} to webhook: {settings.WEBHOOK_URL}")

    payload = {
        "reportType": report_type,
        "records": [r.model_dump(mode="json", by_alias=True) for r in result.records],
        "batches": [a.model_dump(mode="json", by_alias=True) for a in result.aggregates],
        "staff": [s.model_dump(mode="json", by_alias=True) for s in result.staff],
        "customers": [c.model_dump(mode="json", by_alias=True) for c in result.customers],
        "transactions": [t.model_dump(mode="json", by_alias=True) for t in result.transactions],
        "errors": result.errors,
        "sheetSummary": sheet_summary,
    }

    try:
        response = requests.post(
            settings.WEBHOOK_URL, json=payload, timeout=settings.WEBHOOK_TIMEOUT
        )
        response.raise_for_status()
        logger.info("✅ Import successfully posted to webhook.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False
