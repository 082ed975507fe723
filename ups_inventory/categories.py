"""
Canonical category codes and the alias table used to normalize spreadsheet labels.

Spreadsheet categories are typed by hand: abbreviations, English words, missing
accents and trailing spaces all show up. Unknown labels fall back to VIB (Varios)
instead of failing the import.
"""

from typing import Optional

from . import settings

CATEGORY_LABELS: dict[str, str] = {
    "HG": "Hogar",
    "DAM": "Damas",
    "CAB": "Caballeros",
    "ZPT": "Zapatos",
    "EL": "Electrónica",
    "BLLZ": "Belleza",
    "ACC": "Accesorios",
    "BLS": "Blusas",
    "DEP": "Deportes",
    "REL": "Relojes",
    "FERR": "Ferretería",
    "RI": "Ropa Interior",
    "JY": "Joyería",
    "BB": "Bebé",
    "JUG": "Juguetes",
    "SAL": "Salud",
    "N": "Niños",
    "MOCH": "Mochilas",
    "VIB": "Varios",
    "LD": "Libros",
    "LT": "Lentes",
    "MASC": "Mascotas",
    "CEL": "Celulares",
    "COMP": "Computadoras",
    "AUTO": "Automóvil",
    "BL": "Blancos",
    "DOC": "Médico",
    "COC": "Cocina",
    "JAR": "Jardín",
    "DEC": "Decoración",
    "MUE": "Muebles",
    "PAP": "Papelería",
    "MUS": "Música",
    "TOOL": "Herramientas",
}

CATEGORY_CODES = list(CATEGORY_LABELS)

# Insertion order matters: the prefix fallback in normalize_category scans
# this table top to bottom and the first hit wins.
CATEGORY_ALIASES: dict[str, str] = {
    # Hogar
    "HOGAR": "HG",
    "HOG": "HG",
    "HOME": "HG",
    # Damas
    "DAMAS": "DAM",
    "MUJER": "DAM",
    "MUJERES": "DAM",
    "FEMENINO": "DAM",
    "FEM": "DAM",
    "D": "DAM",
    # Caballeros
    "CABALLEROS": "CAB",
    "CABALLERO": "CAB",
    "HOMBRE": "CAB",
    "HOMBRES": "CAB",
    "MASCULINO": "CAB",
    "MASC ": "CAB",  # 'MASC' without the space is Mascotas
    # Zapatos
    "ZAPATOS": "ZPT",
    "ZAPATO": "ZPT",
    "CALZADO": "ZPT",
    "SHOES": "ZPT",
    "ZAP": "ZPT",
    # Electrónica
    "ELECTRONICA": "EL",
    "ELECTRÓNICA": "EL",
    "ELECTR": "EL",
    "ELEC": "EL",
    # Belleza
    "BELLEZA": "BLLZ",
    "BEAUTY": "BLLZ",
    "BEL": "BLLZ",
    "BZ": "BLLZ",
    # Accesorios
    "ACCESORIOS": "ACC",
    "ACCESORIO": "ACC",
    "ACCS": "ACC",
    # Blusas
    "BLUSAS": "BLS",
    "BLUSA": "BLS",
    # Deportes
    "DEPORTES": "DEP",
    "DEPORTE": "DEP",
    "SPORT": "DEP",
    "SPORTS": "DEP",
    "DP": "DEP",
    "DEPOR": "DEP",
    # Relojes
    "RELOJES": "REL",
    "RELOJ": "REL",
    "WATCH": "REL",
    "WATCHES": "REL",
    # Ferretería
    "FERRETERIA": "FERR",
    "FERRETERÍA": "FERR",
    "FER": "FERR",
    "HARDWARE": "FERR",
    # Ropa Interior
    "ROPA INTERIOR": "RI",
    "INTERIOR": "RI",
    "UNDERWEAR": "RI",
    # Joyería
    "JOYERIA": "JY",
    "JOYERÍA": "JY",
    "JOY": "JY",
    "JEWELRY": "JY",
    "JY ": "JY",
    # Bebé
    "BEBE": "BB",
    "BEBÉ": "BB",
    "BABY": "BB",
    "BEBES": "BB",
    # Juguetes
    "JUGUETES": "JUG",
    "JUGUETE": "JUG",
    "TOYS": "JUG",
    "TOY": "JUG",
    "JGT": "JUG",
    "JUGS": "JUG",
    # Salud
    "SALUD": "SAL",
    "HEALTH": "SAL",
    # Niños
    "NIÑOS": "N",
    "NINOS": "N",
    "KIDS": "N",
    "CHILDREN": "N",
    "INFANTIL": "N",
    # Mochilas
    "MOCHILAS": "MOCH",
    "MOCHILA": "MOCH",
    "MCH": "MOCH",
    "BACKPACK": "MOCH",
    # Varios
    "VARIOS": "VIB",
    "VARIO": "VIB",
    "V ": "VIB",
    "V": "VIB",
    "MISC": "VIB",
    "OTHER": "VIB",
    "OTROS": "VIB",
    # Libros
    "LIBROS": "LD",
    "LIBRO": "LD",
    "BOOKS": "LD",
    "LIB": "LD",
    # Lentes
    "LENTES": "LT",
    "LENTE": "LT",
    "GLASSES": "LT",
    "ANTEOJOS": "LT",
    # Mascotas
    "MASCOTAS": "MASC",
    "MASCOTA": "MASC",
    "PET": "MASC",
    "PETS": "MASC",
    "MAS": "MASC",
    # Celulares
    "CELULARES": "CEL",
    "CELULAR": "CEL",
    "TELEFONO": "CEL",
    "TELEFONOS": "CEL",
    "PHONE": "CEL",
    "PHONES": "CEL",
    "CELL": "CEL",
    # Computadoras
    "COMPUTADORAS": "COMP",
    "COMPUTADORA": "COMP",
    "COMPUTER": "COMP",
    "COMPUTERS": "COMP",
    "PC": "COMP",
    "LAPTOP": "COMP",
    # Automóvil
    "AUTOMOVIL": "AUTO",
    "AUTOMÓVIL": "AUTO",
    "AUTOS": "AUTO",
    "CAR": "AUTO",
    "CARS": "AUTO",
    "CARRO": "AUTO",
    "CARROS": "AUTO",
    # Blancos
    "BLANCOS": "BL",
    "BLANCO": "BL",
    "BL ": "BL",
    # Médico
    "MEDICO": "DOC",
    "MÉDICO": "DOC",
    "DOCTOR": "DOC",
    "MEDICAL": "DOC",
    # Cocina
    "COCINA": "COC",
    "KITCHEN": "COC",
    "COOK": "COC",
    # Jardín
    "JARDIN": "JAR",
    "JARDÍN": "JAR",
    "GARDEN": "JAR",
    # Decoración
    "DECORACION": "DEC",
    "DECORACIÓN": "DEC",
    "DECOR": "DEC",
    # Muebles
    "MUEBLES": "MUE",
    "MUEBLE": "MUE",
    "FURNITURE": "MUE",
    # Papelería
    "PAPELERIA": "PAP",
    "PAPELERÍA": "PAP",
    "OFFICE": "PAP",
    "STATIONERY": "PAP",
    # Música
    "MUSICA": "MUS",
    "MÚSICA": "MUS",
    "MUSIC": "MUS",
    # Herramientas
    "HERRAMIENTAS": "TOOL",
    "HERRAMIENTA": "TOOL",
    "TOOLS": "TOOL",
}

CATEGORY_GROUPS: dict[str, list[str]] = {
    "Ropa": ["DAM", "CAB", "BLS", "RI", "N"],
    "Calzado y Accesorios": ["ZPT", "ACC", "MOCH", "REL", "JY", "LT"],
    "Tecnología": ["EL", "CEL", "COMP"],
    "Hogar": ["HG", "COC", "JAR", "DEC", "MUE", "BL"],
    "Salud y Belleza": ["BLLZ", "SAL", "DOC"],
    "Entretenimiento": ["JUG", "LD", "MUS"],
    "Otros": ["DEP", "FERR", "MASC", "AUTO", "PAP", "TOOL", "BB", "VIB"],
}


def normalize_category(value: Optional[str]) -> str:
    """
    Maps a free-text category label to a canonical code.

    Lookup order: canonical code, exact alias, then a linear scan of the alias
    table where an alias matches if it equals the trimmed input or the input
    starts with it. Anything else is VIB.
    """
    if value is None:
        return settings.DEFAULT_CATEGORY

    normalized = str(value).strip().upper()
    if not normalized:
        return settings.DEFAULT_CATEGORY

    if normalized in CATEGORY_LABELS:
        return normalized

    if normalized in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[normalized]

    # NOTE: short aliases ("D", "V", "PC") also match as prefixes of unrelated
    # labels, e.g. "DESCONOCIDO" -> DAM. Kept so categorization stays stable.
    for alias, code in CATEGORY_ALIASES.items():
        if normalized == alias.strip() or normalized.startswith(alias):
            return code

    return settings.DEFAULT_CATEGORY


def category_label(code: str) -> str:
    return CATEGORY_LABELS.get(code, code)


def is_valid_category(code: str) -> bool:
    return code in CATEGORY_LABELS
