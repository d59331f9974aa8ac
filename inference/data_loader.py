# data_loader.py — Result sheet parsing
# Reads the first sheet of a CSV/Excel export into row records
"""
data_loader.py — Result Sheet Loading

Production implementation for safe sheet loading with:
- CSV encoding fallbacks
- Excel support (first sheet only)
- Size limits
- Row-record conversion (empty cells → "", numpy scalars → Python values)

Loading never raises; failures come back as an error string.
"""

from __future__ import annotations

import io
import logging
from typing import Any, BinaryIO

import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

MAX_FILE_SIZE_MB = 25
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024
SUPPORTED_ENCODINGS = ["utf-8", "latin-1", "cp1252"]
# Reader engine per Excel extension
EXCEL_ENGINES = {".xlsx": "openpyxl", ".xls": "xlrd"}
MAX_ROWS = 100_000


# =============================================================================
# RECORD CONVERSION
# =============================================================================

def _native_cell(value: Any) -> Any:
    """Convert one DataFrame cell to a plain Python cell value."""
    if value is None:
        return ""
    if isinstance(value, float) and np.isnan(value):
        return ""
    if value is pd.NaT:
        return ""
    if isinstance(value, np.generic):
        value = value.item()
        if isinstance(value, float) and np.isnan(value):
            return ""
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    return value


def records_from_dataframe(df: pd.DataFrame) -> list[dict[str, Any]]:
    """
    Convert a DataFrame into ordered row records.

    Headers are kept verbatim (as strings); empty cells become "".
    """
    if df is None or df.empty:
        return []

    columns = [str(c) for c in df.columns]
    records = []
    for values in df.itertuples(index=False, name=None):
        records.append({
            col: _native_cell(value) for col, value in zip(columns, values)
        })
    return records


# =============================================================================
# DATA LOADING
# =============================================================================

def _extension(filename: str) -> str:
    return "." + filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def _read_csv(raw_bytes: bytes) -> tuple[pd.DataFrame | None, str | None]:
    last_error = None

    for encoding in SUPPORTED_ENCODINGS:
        try:
            text_io = io.StringIO(raw_bytes.decode(encoding))
            df = pd.read_csv(
                text_io,
                dtype=object,
                keep_default_na=False,
                on_bad_lines="warn",
                nrows=MAX_ROWS,
            )
            return df, None
        except UnicodeDecodeError:
            last_error = f"Encoding {encoding} failed"
            continue
        except pd.errors.EmptyDataError:
            return None, "Sheet contains no data"
        except pd.errors.ParserError as e:
            last_error = f"CSV parsing error: {str(e)}"
            continue
        except Exception as e:
            last_error = f"Unexpected error: {str(e)}"
            continue

    return None, last_error or "Failed to parse CSV with any supported encoding"


def _read_excel(raw_bytes: bytes, engine: str) -> tuple[pd.DataFrame | None, str | None]:
    # Cells keep their stored type; "N/A" or "null" stay text
    try:
        df = pd.read_excel(
            io.BytesIO(raw_bytes),
            sheet_name=0,
            engine=engine,
            dtype=object,
            keep_default_na=False,
            na_values=[],
            nrows=MAX_ROWS,
        )
    except Exception as e:
        return None, f"Excel parsing error: {str(e)}"
    return df, None


def load_records(
    file: BinaryIO | bytes | str,
    filename: str = "result.xlsx",
) -> tuple[list[dict[str, Any]] | None, str | None]:
    """
    Safely load the first sheet of a result file as row records.

    Args:
        file: File-like object, bytes, or file path
        filename: Original filename (its extension picks the parser)

    Returns:
        Tuple of (records or None, error_message or None)
        - On success: (records, None)
        - On failure: (None, error_string)
    """
    try:
        if isinstance(file, str):
            with open(file, "rb") as f:
                raw_bytes = f.read()
        elif isinstance(file, bytes):
            raw_bytes = file
        else:
            raw_bytes = file.read()
            if hasattr(file, "seek"):
                file.seek(0)
    except OSError as e:
        return None, f"Failed to read file: {str(e)}"

    if len(raw_bytes) > MAX_FILE_SIZE_BYTES:
        return None, f"File exceeds {MAX_FILE_SIZE_MB}MB limit ({len(raw_bytes) / 1024 / 1024:.1f}MB)"

    if len(raw_bytes) == 0:
        return None, "File is empty"

    engine = EXCEL_ENGINES.get(_extension(filename))
    if engine:
        df, error = _read_excel(raw_bytes, engine)
    else:
        df, error = _read_csv(raw_bytes)

    if error:
        logger.warning("Could not load %s: %s", filename, error)
        return None, error

    records = records_from_dataframe(df)
    logger.info("Loaded %d records from %s", len(records), filename)
    return records, None
