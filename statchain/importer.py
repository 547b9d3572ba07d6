"""
importer.py - Read sample batches from external CSV or JSON files.
"""

import csv
import json
import logging
from pathlib import Path, PurePath
from typing import List, Union

from .exceptions import InvalidInput, IOFailure

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("csv", "json")


def _to_float(value, row: int, col: int) -> float:
    if isinstance(value, bool):
        raise InvalidInput(f"Row {row}, column {col}: not a number: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidInput(f"Row {row}, column {col}: not a number: {value!r}") from None


def _read_csv(path: Path) -> List[List[float]]:
    batches = []
    with open(path, newline="", encoding="utf-8") as f:
        for row_no, row in enumerate(csv.reader(f)):
            if not row:
                continue
            batches.append([_to_float(cell.strip(), row_no, col) for col, cell in enumerate(row)])
    return batches


def _read_json(path: Path) -> List[List[float]]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise InvalidInput("JSON data must be an array of arrays of numbers.")
    batches = []
    for row_no, row in enumerate(data):
        if not isinstance(row, list):
            raise InvalidInput(f"Row {row_no} is not an array.")
        batches.append([_to_float(v, row_no, col) for col, v in enumerate(row)])
    return batches


def read_batches(path: Union[str, PurePath], fmt: str = "csv") -> List[List[float]]:
    """
    Read sample batches from a CSV or JSON file.

    Parameters:
        path: File to read. CSV files hold one batch per row; JSON files hold an
            array of arrays of numbers.
        fmt: Either "csv" or "json".

    Returns:
        One list of floats per batch, in file order.

    Raises:
        InvalidInput: For an unknown format or a non-numeric value.
        IOFailure: If the file cannot be opened or parsed.
    """
    fmt = fmt.lower()
    if fmt not in SUPPORTED_FORMATS:
        raise InvalidInput(f"Unsupported data format: {fmt}")
    file_path = Path(path)
    logger.info("Reading %s batches from '%s'", fmt, file_path)
    try:
        if fmt == "csv":
            batches = _read_csv(file_path)
        else:
            batches = _read_json(file_path)
    # ValueError covers decode errors and oversized JSON integer literals
    except (OSError, csv.Error, ValueError) as e:
        raise IOFailure(f"Could not read '{file_path}': {e}") from e
    logger.info("Read %d batches from '%s'", len(batches), file_path)
    return batches
