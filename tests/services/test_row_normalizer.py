"""Tests for import row normalization."""
from datetime import datetime, timezone

import pytest

from app.core.exceptions import ValidationError
from app.services.row_normalizer import (
    LAYOUT_KEYED,
    LAYOUT_SINGLE_COLUMN,
    detect_layout,
    normalize_rows,
)

KEYED_ROW = {
    "name": "Paracetamol",
    "category": "Analgesic",
    "purchasePrice": 1000,
    "tax": 10,
    "margin": 20,
    "unitName": "box",
    "supplierName": "PT Kimia",
    "batchNo": "B1",
    "quantity": 5,
    "expiredDate": "2026-01-01",
}
LEGACY_LINE = "Paracetamol,Pain relief,Analgesic,1000,10,5,box,20,B1,2026-01-01,PT Kimia"


def test_keyed_rows_pass_through():
    """Test that keyed rows keep their values field for field."""
    # When
    [record] = normalize_rows([KEYED_ROW])

    # Then
    assert record.name == "Paracetamol"
    assert record.category == "Analgesic"
    assert record.purchase_price == 1000
    assert record.tax == 10
    assert record.margin == 20
    assert record.unit_name == "box"
    assert record.supplier_name == "PT Kimia"
    assert record.batch_no == "B1"
    assert record.quantity == 5
    assert record.expired_date == datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_keyed_csv_strings_are_coerced():
    """Test raw CSV strings become numbers on the canonical record."""
    row = {key: str(value) for key, value in KEYED_ROW.items()}

    [record] = normalize_rows([row])

    assert record.purchase_price == 1000.0
    assert record.quantity == 5


def test_single_column_row_matches_keyed_record():
    """Test the legacy comma-separated layout yields the same canonical fields."""
    # Given
    rows = [{"drugs": LEGACY_LINE}]

    # When
    [legacy] = normalize_rows(rows)
    [keyed] = normalize_rows([KEYED_ROW])

    # Then
    assert legacy.description == "Pain relief"
    assert legacy.model_dump(exclude={"description"}) == keyed.model_dump(exclude={"description"})


def test_single_column_values_are_trimmed():
    line = " Paracetamol , Pain relief ,Analgesic, 1000 ,10,5, box ,20,B1,2026-01-01, PT Kimia "

    [record] = normalize_rows([{"drugs": line}])

    assert record.name == "Paracetamol"
    assert record.unit_name == "box"
    assert record.supplier_name == "PT Kimia"
    assert record.purchase_price == 1000.0


def test_detect_layout_uses_first_row_name():
    assert detect_layout([KEYED_ROW]) == LAYOUT_KEYED
    assert detect_layout([{"drugs": LEGACY_LINE}]) == LAYOUT_SINGLE_COLUMN
    assert detect_layout([{"name": "", "category": "Analgesic"}]) == LAYOUT_SINGLE_COLUMN


def test_explicit_keyed_layout_skips_detection():
    """Test that a keyed row missing its name is not treated as single-column."""
    row = dict(KEYED_ROW, name=None)

    [record] = normalize_rows([row], layout=LAYOUT_KEYED)

    assert record.name is None
    assert record.category == "Analgesic"


def test_single_column_field_count_mismatch_is_rejected():
    """Test that a short legacy row fails instead of shifting fields."""
    rows = [{"drugs": LEGACY_LINE}, {"drugs": "Ibuprofen,Analgesic,500"}]

    with pytest.raises(ValidationError) as exc_info:
        normalize_rows(rows)

    assert exc_info.value.field == "columns"
    assert exc_info.value.row == 2


def test_single_column_mismatch_is_padded_when_not_strict():
    [record] = normalize_rows(
        [{"drugs": "Ibuprofen,Anti-inflammatory,Analgesic,500"}], strict_columns=False
    )

    assert record.name == "Ibuprofen"
    assert record.purchase_price == 500.0
    assert record.unit_name is None
    assert record.supplier_name is None


def test_invalid_number_names_the_field():
    line = LEGACY_LINE.replace(",1000,", ",abc,")

    with pytest.raises(ValidationError) as exc_info:
        normalize_rows([{"drugs": line}])

    assert exc_info.value.field == "purchasePrice"
    assert exc_info.value.row == 1


def test_invalid_keyed_date_names_the_field():
    row = dict(KEYED_ROW, expiredDate="not a date")

    with pytest.raises(ValidationError) as exc_info:
        normalize_rows([row])

    assert exc_info.value.field == "expiredDate"


def test_empty_input_gives_no_records():
    assert normalize_rows([]) == []


def test_unknown_layout_is_rejected():
    with pytest.raises(ValueError):
        normalize_rows([KEYED_ROW], layout="columns")


def test_negative_single_column_quantity_is_rejected():
    line = LEGACY_LINE.replace(",10,5,box,", ",10,-5,box,")

    with pytest.raises(ValidationError) as exc_info:
        normalize_rows([{"drugs": line}])

    assert exc_info.value.field == "quantity"
    assert exc_info.value.row == 1


@pytest.mark.parametrize("column", ["purchasePrice", "tax", "margin", "quantity"])
def test_negative_keyed_numbers_are_rejected(column):
    rows = [KEYED_ROW, dict(KEYED_ROW, name="Ibuprofen", **{column: -1})]

    with pytest.raises(ValidationError) as exc_info:
        normalize_rows(rows)

    assert exc_info.value.field == column
    assert exc_info.value.row == 2


def test_zero_price_and_quantity_are_accepted():
    [record] = normalize_rows([dict(KEYED_ROW, purchasePrice=0, quantity=0)])

    assert record.purchase_price == 0
    assert record.quantity == 0
