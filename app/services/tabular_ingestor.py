"""Tabular file ingestion for drug imports.

Decodes an uploaded CSV or XLSX payload into dictionaries keyed by the
header row. CSV values stay raw strings; XLSX cells keep the type the
workbook stores (numbers stay numeric, dates become timestamps). Blank
cells become None.

Every CSV data row must fit the header. A single-column file whose lines
hold unquoted commas is rejected with a ParseError, since pandas would
read the surplus values as an index.
"""
import io
from pathlib import PurePath
from typing import Any, Iterator

import pandas as pd
from loguru import logger

from app.core.exceptions import ParseError
from app.utils.helpers import is_blank

SUPPORTED_FORMATS = ("csv", "xlsx")
CSV_CHUNK_SIZE = 500


def detect_format(filename: str | None, explicit: str | None = None) -> str:
    """Resolve the format hint from an explicit value or the file extension.

    Args:
        filename: Uploaded file name, used when no explicit format is given
        explicit: Format requested by the caller (``"csv"`` or ``"xlsx"``)

    Returns:
        ``"csv"`` or ``"xlsx"``

    Raises:
        ParseError: If the format is missing or unsupported
    """
    file_format = (explicit or "").strip().lower().lstrip(".")
    if not file_format and filename:
        file_format = PurePath(filename).suffix.lower().lstrip(".")

    if file_format not in SUPPORTED_FORMATS:
        raise ParseError(
            file_format or "unknown",
            f"unsupported file format {file_format!r}; expected one of {', '.join(SUPPORTED_FORMATS)}",
        )
    return file_format


def iter_rows(content: bytes, file_format: str) -> Iterator[dict[str, Any]]:
    """Yield the rows of an uploaded file as header-keyed dictionaries.

    The generator is lazy and single-use. Decoding errors surface as
    ``ParseError`` while iterating, so callers should consume it fully
    before writing anything.

    Args:
        content: Raw file bytes
        file_format: ``"csv"`` or ``"xlsx"``

    Yields:
        One dictionary per data row
    """
    if file_format == "csv":
        yield from _iter_csv(content)
    elif file_format == "xlsx":
        yield from _iter_xlsx(content)
    else:
        raise ParseError(file_format, "unsupported file format")


def _iter_csv(content: bytes) -> Iterator[dict[str, Any]]:
    if not content.strip():
        raise ParseError("csv", "file is empty")

    try:
        reader = pd.read_csv(
            io.BytesIO(content),
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
            chunksize=CSV_CHUNK_SIZE,
        )
        for chunk in reader:
            # pandas turns the surplus leading values of an over-long first row
            # into an implicit index instead of failing
            if len(chunk) and not isinstance(chunk.index, pd.RangeIndex):
                raise ParseError(
                    "csv",
                    "data rows have more values than the header; "
                    "quote single-column lines that contain commas",
                )
            for record in chunk.to_dict("records"):
                yield _clean_row(record)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        logger.warning(f"CSV parsing failed: {e}")
        raise ParseError("csv", str(e)) from e


def _iter_xlsx(content: bytes) -> Iterator[dict[str, Any]]:
    try:
        frame = pd.read_excel(io.BytesIO(content), sheet_name=0, engine="openpyxl")
    except Exception as e:
        logger.warning(f"XLSX parsing failed: {e}")
        raise ParseError("xlsx", str(e)) from e

    logger.debug(f"Read first sheet: {len(frame)} rows, columns={list(frame.columns)}")
    for record in frame.to_dict("records"):
        yield _clean_row(record)


def _clean_row(record: dict[Any, Any]) -> dict[str, Any]:
    return {
        str(key).strip(): (None if is_blank(value) else value)
        for key, value in record.items()
    }
