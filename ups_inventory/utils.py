import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from . import settings

logger = logging.getLogger(__name__)

# Workbooks are exported as e.g. "inventario_2024-06-30.xlsx".
FILENAME_DATE_REGEX = re.compile(r"(\d{4}-\d{2}-\d{2})")


class WorkbookReadError(Exception):
    """The workbook could not be opened or parsed at all."""


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def report_date_from_filename(path: Path) -> date:
    """Date embedded in the filename, falling back to the file's modification date."""
    match = FILENAME_DATE_REGEX.search(path.stem)
    if match:
        try:
            return datetime.strptime(match.group(1), "%Y-%m-%d").date()
        except ValueError:
            pass
    return date.fromtimestamp(path.stat().st_mtime)


def find_latest_report(
    directory: Path,
    prefix: str,
    extensions: Sequence[str] = settings.WORKBOOK_EXTENSIONS,
) -> Optional[tuple[Path, date]]:
    """
    Finds the newest file in `directory` whose name starts with `prefix`.
    Returns (path, report_date), or None when nothing matches.
    """
    if not directory.exists():
        return None

    candidates = [
        path
        for path in directory.iterdir()
        if path.is_file()
        and path.name.startswith(prefix)
        and path.suffix.lower() in extensions
        and not path.name.startswith("~$")  # Excel lock files
    ]
    if not candidates:
        return None

    latest = max(
        candidates,
        key=lambda path: (report_date_from_filename(path), path.stat().st_mtime),
    )
    return latest, report_date_from_filename(latest)


def load_workbook(file_path: Path) -> dict[str, pd.DataFrame]:
    """
    Reads every sheet of a workbook into DataFrames keyed by sheet name.
    Header cells are trimmed since hand-edited exports often carry stray spaces.
    """
    try:
        sheets = pd.read_excel(file_path, sheet_name=None)
    except FileNotFoundError:
        raise WorkbookReadError(f"Workbook not found: {file_path}") from None
    except Exception as e:
        raise WorkbookReadError(f"Could not read {file_path.name}. Reason: {e}") from e

    for name, df in sheets.items():
        df.columns = [str(column).strip() for column in df.columns]
        logger.debug(f"  > Sheet '{name}': {len(df)} rows")
    return sheets
