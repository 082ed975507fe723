import sys
from pathlib import Path

from ups_inventory.logger import setup_logger
from ups_inventory.pipelines.inventory import InventoryImportPipeline
from ups_inventory.utils import WorkbookReadError


def run_import(argv: list[str]) -> int:
    """
    Imports the given workbook, or the newest one in INPUT_DIR.
    Usage: python import_inventory.py [workbook.xlsx] [--test]
    """
    logger = setup_logger()

    test_mode = "--test" in argv
    paths = [arg for arg in argv if not arg.startswith("--")]
    workbook_path = Path(paths[0]) if paths else None

    pipeline = InventoryImportPipeline(workbook_path=workbook_path, test_mode=test_mode)
    try:
        result = pipeline.run()
    except WorkbookReadError as e:
        logger.error(f"❌ {e}")
        return 1

    imported = len(result.records) + len(result.transactions)
    if result.errors and not imported:
        logger.error("❌ Every row failed to import.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(run_import(sys.argv[1:]))
