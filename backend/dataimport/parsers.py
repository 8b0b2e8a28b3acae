# dataimport/parsers.py
"""
File parsers for legacy data import.

Parsers convert uploaded files (CSV, XLSX) into lists of dicts, one per
row, keyed by the header row. Cell values come back as stripped strings.
"""

import csv
import io
from typing import Any, Dict, List, Tuple

import openpyxl


SUPPORTED_EXTENSIONS = ("csv", "xlsx")


def _read(file):
    if hasattr(file, "read"):
        content = file.read()
        if hasattr(file, "seek"):
            file.seek(0)
        return content
    return file


def parse_csv(file) -> List[Dict[str, Any]]:
    """
    Parse a CSV file into a list of dicts.

    Args:
        file: File-like object (binary or text) or raw bytes/str

    Returns:
        List of dicts, one per non-empty row
    """
    content = _read(file)
    if isinstance(content, bytes):
        content = content.decode("utf-8-sig")  # Handle BOM

    reader = csv.DictReader(io.StringIO(content))
    records = []
    for row in reader:
        cleaned = {
            key.strip().lstrip("\ufeff"): value.strip() if isinstance(value, str) else ""
            for key, value in row.items()
            if key is not None
        }
        if any(cleaned.values()):
            records.append(cleaned)
    return records


def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if hasattr(value, "date") and callable(value.date):
        return value.date().isoformat()
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value).strip()


def parse_xlsx(file) -> List[Dict[str, Any]]:
    """
    Parse the active sheet of an Excel workbook. The first row is the header.
    """
    content = _read(file)
    workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        sheet = workbook.active
        if sheet is None:
            return []

        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if not header:
            return []
        headers = [str(h).strip() if h is not None else f"column_{i}" for i, h in enumerate(header)]

        records = []
        for row in rows:
            values = [_cell_text(cell) for cell in row]
            if not any(values):
                continue  # Skip empty rows
            records.append(dict(zip(headers, values)))
        return records
    finally:
        workbook.close()


def detect_and_parse(file, filename: str) -> Tuple[str, List[Dict[str, Any]]]:
    """
    Detect file type from extension and parse accordingly.

    Returns:
        Tuple of (file_type, records)

    Raises:
        ValueError: unsupported extension
    """
    extension = filename.lower().rsplit(".", 1)[-1] if "." in filename else ""

    if extension == "csv":
        return "csv", parse_csv(file)
    if extension == "xlsx":
        return "xlsx", parse_xlsx(file)
    raise ValueError(
        f"Unsupported file type: {extension or 'none'}. Supported: {', '.join(SUPPORTED_EXTENSIONS)}"
    )
