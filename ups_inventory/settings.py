import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")

# --- Filename Configuration ---
WORKBOOK_FILENAME_PREFIX = os.getenv("WORKBOOK_FILENAME_PREFIX", "inventario_")
WORKBOOK_EXTENSIONS = (".xlsx", ".xlsm")
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "true").lower() in ("1", "true", "yes")

# --- Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
WEBHOOK_TIMEOUT = int(os.getenv("WEBHOOK_TIMEOUT", "15"))

# --- Logging ---
def _log_level(name: str) -> int:
    """Numeric level for a level name; unknown names fall back to INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


LOG_LEVEL = _log_level(os.getenv("LOG_LEVEL", "INFO"))

# --- Workbook Layout ---
INVENTORY_SHEET = "Inventario"
ELECTRONICS_SHEET = "Inventario Comp Y Cel"
PAYMENTS_SHEET = "Pagos"

# Column aliases, first non-blank cell wins.
IDENTIFIER_COLUMNS = ("UPS", "UPS No.")
ELECTRONICS_IDENTIFIER_COLUMNS = ("UPS No.", "UPS")
NAME_COLUMNS = ("Artículo", "Articulo")
QUANTITY_COLUMNS = ("Cantidad",)
UNIT_PRICE_COLUMNS = ("Precio unitario", "Precio Unitario")
CATEGORY_COLUMNS = ("Categoría", "Categoria")
BRAND_COLUMNS = ("Marca",)
MODEL_COLUMNS = ("Modelo",)
COLOR_COLUMNS = ("Color",)
SIZE_COLUMNS = ("Talla",)
CAPACITY_COLUMNS = ("Cap",)
ANNOTATION_COLUMNS = ("Observaciones",)
USER_NOTES_COLUMNS = ("Notas", "Notes")

# "Pagos" sheet. "Precio Unitariio" is how the exported header is spelled.
CUSTOMER_COLUMNS = ("Cliente",)
PAYMENT_UNIT_PRICE_COLUMNS = ("Precio Unitariio", "Precio Unitario", "Precio unitario")
TOTAL_PRICE_COLUMNS = ("Precio Total",)
CASH_COLUMNS = ("Pagos en Efectivo",)
TRANSFER_COLUMNS = ("Pagos Transferencia",)
CARD_COLUMNS = ("Pago Tarjeta",)
ACTUAL_CARD_COLUMNS = ("Pago Real de tarjeta",)
SALE_DATE_COLUMNS = ("Fecha",)
PAYMENT_DATE_COLUMNS = ("Fecha de Pago",)

# --- Shared Business Logic ---
DEFAULT_CATEGORY = "VIB"
DEFAULT_LOW_STOCK_THRESHOLD = 5
ELECTRONICS_LOW_STOCK_THRESHOLD = 1

# Generated code layout: numbered "0020-7", legacy "D15-0042".
NUMBERED_BATCH_PAD = 4
LEGACY_SEQUENCE_PAD = 4
LEGACY_CODE_PREFIX = "D"
