"""Domain exceptions for the inventory service.

Every error carries a human-readable message and the HTTP status the API
layer maps it to. The import pipeline raises the ``DrugImportError`` family;
each one aborts the remaining rows of the batch.
"""
from typing import Any


class InventoryError(Exception):
    """Base class for all inventory errors."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": type(self).__name__, "message": self.message}


class NotFoundError(InventoryError):
    status_code = 404


class InsufficientStockError(InventoryError):
    status_code = 409


class DrugImportError(InventoryError):
    """Base class for errors raised while importing a batch of drugs.

    Attributes:
        row: 1-based position of the failing row in the batch, if known.
    """

    def __init__(self, message: str, row: int | None = None):
        super().__init__(message)
        self.row = row

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.row is not None:
            data["row"] = self.row
        return data


class ParseError(DrugImportError):
    """Uploaded file content could not be decoded.

    Attributes:
        stage: Parser that failed, ``"csv"`` or ``"xlsx"``.
    """

    status_code = 400

    def __init__(self, stage: str, message: str):
        super().__init__(f"Failed to parse {stage} file: {message}")
        self.stage = stage

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["stage"] = self.stage
        return data


class ValidationError(DrugImportError):
    """A record is missing a mandatory field or holds an unusable value."""

    status_code = 422

    def __init__(
        self,
        field: str,
        message: str,
        record: dict[str, Any] | None = None,
        row: int | None = None,
    ):
        super().__init__(message, row=row)
        self.field = field
        self.record = record

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        if self.record is not None:
            data["record"] = self.record
        return data


class ResolutionError(DrugImportError):
    """A category, unit or supplier could not be looked up or created."""

    status_code = 422

    def __init__(self, entity: str, name: str, message: str, row: int | None = None):
        super().__init__(message, row=row)
        self.entity = entity
        self.name = name

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({"entity": self.entity, "name": self.name})
        return data


class PersistenceError(DrugImportError):
    """The store rejected a drug record, e.g. a duplicate name."""

    status_code = 409
