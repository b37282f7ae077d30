"""Row normalization for drug imports.

Import files come in two layouts:

- keyed: one column per field, named like the ``DrugImportRecord`` aliases
  (``name``, ``purchasePrice``, ``unitName``...);
- single column: every row holds one text cell with eleven comma-separated
  values in ``LEGACY_COLUMNS`` order.

Both are turned into ``DrugImportRecord`` instances.
"""
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ValidationError
from app.schemas.drug import DrugImportRecord
from app.utils.helpers import clean_text, to_utc_datetime

LAYOUT_AUTO = "auto"
LAYOUT_KEYED = "keyed"
LAYOUT_SINGLE_COLUMN = "single_column"
LAYOUTS = (LAYOUT_AUTO, LAYOUT_KEYED, LAYOUT_SINGLE_COLUMN)


def _parse_float(value: str) -> float | None:
    text = clean_text(value)
    return float(text) if text is not None else None


def _parse_int(value: str) -> int | None:
    text = clean_text(value)
    return int(text) if text is not None else None


@dataclass(frozen=True)
class PositionalField:
    """One field of the single-column layout."""

    name: str
    parse: Callable[[str], Any]


LEGACY_COLUMNS: tuple[PositionalField, ...] = (
    PositionalField("name", clean_text),
    PositionalField("description", clean_text),
    PositionalField("category", clean_text),
    PositionalField("purchasePrice", _parse_float),
    PositionalField("tax", _parse_float),
    PositionalField("quantity", _parse_int),
    PositionalField("unitName", clean_text),
    PositionalField("margin", _parse_float),
    PositionalField("batchNo", clean_text),
    PositionalField("expiredDate", to_utc_datetime),
    PositionalField("supplierName", clean_text),
)


def detect_layout(rows: list[dict[str, Any]]) -> str:
    """Guess the layout from the first row: keyed if it has a non-empty ``name``."""
    if rows and clean_text(rows[0].get("name")):
        return LAYOUT_KEYED
    return LAYOUT_SINGLE_COLUMN


def normalize_rows(
    rows: Iterable[dict[str, Any]],
    layout: str = LAYOUT_AUTO,
    strict_columns: bool = True,
) -> list[DrugImportRecord]:
    """
    Convert raw rows into canonical import records.

    Args:
        rows: Raw rows from the tabular ingestor
        layout: ``"auto"``, ``"keyed"`` or ``"single_column"``
        strict_columns: Reject single-column rows without exactly
            ``len(LEGACY_COLUMNS)`` values

    Returns:
        Records in input order

    Raises:
        ValidationError: If a value cannot be coerced or a single-column
            row has the wrong number of fields
    """
    if layout not in LAYOUTS:
        raise ValueError(f"Unknown layout {layout!r}; expected one of {', '.join(LAYOUTS)}")

    rows = list(rows)
    if layout == LAYOUT_AUTO:
        layout = detect_layout(rows)
    logger.debug(f"Normalizing {len(rows)} rows using {layout} layout")

    if layout == LAYOUT_KEYED:
        return [_from_keyed(row, position) for position, row in enumerate(rows, start=1)]
    return [
        _from_single_column(row, position, strict_columns)
        for position, row in enumerate(rows, start=1)
    ]


def _from_keyed(row: dict[str, Any], position: int) -> DrugImportRecord:
    try:
        return DrugImportRecord.model_validate(row)
    except PydanticValidationError as e:
        raise _coercion_error(e, row, position) from e


def _from_single_column(
    row: dict[str, Any], position: int, strict_columns: bool
) -> DrugImportRecord:
    cell = next(iter(row.values()), None)
    line = "" if cell is None else str(cell)
    values = line.split(",")

    if len(values) != len(LEGACY_COLUMNS):
        if strict_columns:
            raise ValidationError(
                "columns",
                f"Row {position} has {len(values)} comma-separated values, "
                f"expected {len(LEGACY_COLUMNS)}: {line!r}",
                record={"line": line},
                row=position,
            )
        values = (values + [""] * len(LEGACY_COLUMNS))[: len(LEGACY_COLUMNS)]

    data: dict[str, Any] = {}
    for descriptor, raw in zip(LEGACY_COLUMNS, values):
        try:
            data[descriptor.name] = descriptor.parse(raw)
        except ValueError as e:
            raise ValidationError(
                descriptor.name,
                f'"{descriptor.name}" has an invalid value {raw.strip()!r} in row {position}',
                record={"line": line},
                row=position,
            ) from e

    try:
        return DrugImportRecord.model_validate(data)
    except PydanticValidationError as e:
        raise _coercion_error(e, data, position) from e


def _coercion_error(
    error: PydanticValidationError, row: dict[str, Any], position: int
) -> ValidationError:
    first = error.errors()[0]
    field = str(first["loc"][0]) if first["loc"] else "row"
    return ValidationError(
        field,
        f'"{field}" has an invalid value in row {position}: {first["msg"]}',
        record={key: (None if value is None else str(value)) for key, value in row.items()},
        row=position,
    )
