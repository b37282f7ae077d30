"""
Bulk drug import.

Pipeline for one uploaded file (a batch):

    ingest -> normalize -> per row: validate -> resolve -> price -> persist

Rows are processed one at a time in file order and the first failure stops
the batch. With ``atomic=False`` every row is committed as soon as it is
saved, so rows before a failure stay in the database; with ``atomic=True``
the batch is committed once at the end and a failure rolls back every row.
"""

from typing import Any, Iterable

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.exceptions import DrugImportError, PersistenceError, ValidationError
from app.models import Drug
from app.schemas.drug import DrugImportRecord
from app.services.drug_service import DrugService
from app.services.row_normalizer import LAYOUT_AUTO, normalize_rows
from app.services.tabular_ingestor import detect_format, iter_rows

# (record attribute, file column) in the order they are checked
REQUIRED_FIELDS = (
    ("name", "name"),
    ("category", "category"),
    ("purchase_price", "purchasePrice"),
    ("unit_name", "unitName"),
    ("supplier_name", "supplierName"),
)


def validate_import_record(record: DrugImportRecord, position: int) -> None:
    """
    Check that a record carries every mandatory field.

    Text fields must be non-empty; ``purchase_price`` must be present but
    may be zero.

    Raises:
        ValidationError: Naming the first missing field
    """
    for attribute, column in REQUIRED_FIELDS:
        value = getattr(record, attribute)
        if value is None or (isinstance(value, str) and not value):
            raise ValidationError(
                column,
                f'"{column}" column cannot be empty in row {position}',
                record=record.echo(),
                row=position,
            )


class DrugImportService:
    """
    Runs import batches against an injected session.

    The session is owned by the caller; this service commits or rolls it
    back according to the transaction policy.
    """

    def __init__(
        self,
        session: AsyncSession,
        drug_service: DrugService,
        settings: Settings | None = None,
    ):
        """
        Initialize the import service.

        Args:
            session: Session without automatic commit
            drug_service: Service used to persist each drug
            settings: Application settings; defaults to the cached instance
        """
        self.session = session
        self.drug_service = drug_service
        self.settings = settings or get_settings()

    async def import_file(
        self,
        content: bytes,
        filename: str | None = None,
        file_format: str | None = None,
        layout: str = LAYOUT_AUTO,
        atomic: bool | None = None,
    ) -> list[Drug]:
        """
        Import every row of an uploaded CSV or XLSX file.

        The file is fully parsed before the first row is written, so a
        malformed file leaves the database untouched.

        Args:
            content: Raw file bytes
            filename: Original file name, used to infer the format
            file_format: Explicit ``"csv"`` or ``"xlsx"``
            layout: ``"auto"``, ``"keyed"`` or ``"single_column"``
            atomic: Override of the ``import_atomic`` setting

        Returns:
            Created drugs in file order

        Raises:
            ParseError, ValidationError, ResolutionError, PersistenceError
        """
        resolved_format = detect_format(filename, file_format)
        logger.info(
            f"Import started: file={filename!r}, format={resolved_format}, "
            f"size={len(content)} bytes"
        )
        rows = list(iter_rows(content, resolved_format))
        logger.debug(f"Ingested {len(rows)} rows")
        return await self.import_rows(rows, layout=layout, atomic=atomic)

    async def import_rows(
        self,
        rows: Iterable[dict[str, Any]],
        layout: str = LAYOUT_AUTO,
        atomic: bool | None = None,
    ) -> list[Drug]:
        """
        Normalize and persist already-decoded rows.

        Args:
            rows: Raw rows (keyed dictionaries or single text cells)
            layout: ``"auto"``, ``"keyed"`` or ``"single_column"``
            atomic: Override of the ``import_atomic`` setting

        Returns:
            Created drugs in input order
        """
        atomic = self.settings.import_atomic if atomic is None else atomic
        records = normalize_rows(
            rows, layout=layout, strict_columns=self.settings.import_strict_columns
        )

        created: list[Drug] = []
        position = 0
        try:
            for position, record in enumerate(records, start=1):
                drug = await self._import_record(record, position)
                if not atomic:
                    await self._commit(position)
                created.append(drug)
            if atomic and created:
                await self._commit(position)
        except DrugImportError as e:
            await self.session.rollback()
            if e.row is None:
                e.row = position
            logger.error(
                f"Import failed at row {e.row} ({type(e).__name__}): {e.message}; "
                f"{0 if atomic else len(created)} rows kept"
            )
            raise
        except Exception:
            await self.session.rollback()
            logger.exception(f"Unexpected error while importing row {position}")
            raise

        logger.success(f"Import completed: {len(created)} drugs created (atomic={atomic})")
        return created

    async def _import_record(self, record: DrugImportRecord, position: int) -> Drug:
        validate_import_record(record, position)
        return await self.drug_service.add_drug(
            name=record.name,
            description=record.description,
            category=record.category,
            unit_name=record.unit_name,
            supplier_name=record.supplier_name,
            purchase_price=record.purchase_price,
            tax=record.tax,
            margin=record.margin,
            quantity=record.quantity,
            batch_no=record.batch_no,
            expired_date=record.expired_date,
        )

    async def _commit(self, position: int) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Commit failed at row {position}: {e}", row=position) from e
