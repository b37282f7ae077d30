"""Drug inventory API endpoints.

Provides CRUD endpoints for drug records, inventory listings and statistics,
and bulk import of drugs from CSV/XLSX files.
"""
from typing import Literal

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from loguru import logger

from app.api.deps import get_drug_import_service, get_drug_service
from app.core.config import Settings, get_settings
from app.core.exceptions import DrugImportError
from app.schemas import (
    AlmostExpiredDrug,
    ApiResponse,
    DrugCreate,
    DrugPage,
    DrugResponse,
    DrugStatistics,
    DrugUpdate,
    ImportResult,
)
from app.services.drug_import_service import DrugImportService
from app.services.drug_service import DrugService

router = APIRouter(prefix="/drugs", tags=["drugs"])


def _many(drugs) -> list[DrugResponse]:
    return [DrugResponse.model_validate(drug) for drug in drugs]


@router.post(
    "",
    response_model=ApiResponse[DrugResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create Drug",
)
async def add_drug(payload: DrugCreate, drug_service: DrugService = Depends(get_drug_service)):
    """Create a drug; prices after tax and margin are computed server-side."""
    drug = await drug_service.create_drug(payload)
    logger.info(f"Created drug '{drug.name}'")
    return ApiResponse(status_code=201, data=DrugResponse.model_validate(drug))


@router.get("", response_model=ApiResponse[DrugPage], summary="List Drugs")
async def get_drugs_with_filters(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    name: str | None = None,
    category_name: str | None = None,
    unit_name: str | None = None,
    drug_service: DrugService = Depends(get_drug_service),
):
    """List drugs one page at a time, filtered by name, category or unit."""
    result = await drug_service.list_drugs(
        page=page, limit=limit, name=name, category_name=category_name, unit_name=unit_name
    )
    return ApiResponse(data=result)


@router.get("/all", response_model=ApiResponse[list[DrugResponse]], summary="List All Drugs")
async def get_all_drugs(drug_service: DrugService = Depends(get_drug_service)):
    return ApiResponse(data=_many(await drug_service.list_all()))


@router.get(
    "/almost-expired",
    response_model=ApiResponse[list[AlmostExpiredDrug]],
    summary="Drugs Closest To Expiry",
)
async def get_almost_expired_drugs(
    limit: int | None = Query(None, ge=1, le=100),
    drug_service: DrugService = Depends(get_drug_service),
):
    drugs = await drug_service.list_almost_expired(limit)
    return ApiResponse(data=[AlmostExpiredDrug.model_validate(drug) for drug in drugs])


@router.get("/expired", response_model=ApiResponse[list[DrugResponse]], summary="Expired Drugs")
async def get_expired_drugs(drug_service: DrugService = Depends(get_drug_service)):
    return ApiResponse(data=_many(await drug_service.list_expired()))


@router.get(
    "/out-of-stock", response_model=ApiResponse[list[DrugResponse]], summary="Out Of Stock Drugs"
)
async def get_out_of_stock_drugs(drug_service: DrugService = Depends(get_drug_service)):
    return ApiResponse(data=_many(await drug_service.list_out_of_stock()))


@router.get(
    "/drug-statistics", response_model=ApiResponse[DrugStatistics], summary="Inventory Statistics"
)
async def get_drug_statistics(drug_service: DrugService = Depends(get_drug_service)):
    """Total drugs, total quantity, expired and out-of-stock counts."""
    return ApiResponse(data=await drug_service.statistics())


@router.post(
    "/upload-drugs",
    response_model=ApiResponse[ImportResult],
    status_code=status.HTTP_201_CREATED,
    summary="Import Drugs From File",
    description="Creates one drug per row of an uploaded CSV or XLSX file",
)
async def upload_drugs(
    file: UploadFile = File(...),
    file_format: Literal["csv", "xlsx"] | None = Form(None),
    layout: Literal["auto", "keyed", "single_column"] = Form("auto"),
    atomic: bool | None = Form(None),
    import_service: DrugImportService = Depends(get_drug_import_service),
    settings: Settings = Depends(get_settings),
):
    """Import drugs from an uploaded file.

    Args:
        file: CSV or XLSX file; the first row holds the column names.
        file_format: Explicit format; inferred from the file extension when omitted.
        layout: ``keyed`` (one column per field), ``single_column`` (eleven
            comma-separated values per row) or ``auto`` to detect from the first row.
        atomic: Roll back the whole file on the first failing row. Defaults
            to the ``IMPORT_ATOMIC`` setting.
        import_service: Injected import service.

    Returns:
        ApiResponse[ImportResult]: Created drugs in file order.

    Raises:
        HTTPException: 400 for unreadable files, 413 for oversized files,
            409/422 for rows that cannot be saved.
    """
    max_file_size = settings.import_max_file_size_mb * 1024 * 1024
    file.file.seek(0, 2)
    file_size = file.file.tell()
    file.file.seek(0)
    if file_size > max_file_size:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.import_max_file_size_mb}MB.",
        )

    logger.info(f"Drug import request: file={file.filename!r}, layout={layout}, atomic={atomic}")
    try:
        content = await file.read()
        drugs = await import_service.import_file(
            content,
            filename=file.filename,
            file_format=file_format,
            layout=layout,
            atomic=atomic,
        )
    except DrugImportError as e:
        logger.warning(f"Drug import rejected: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.to_dict()) from e
    except Exception as e:
        logger.error(f"Drug import failed: {str(e)}")
        logger.exception("Full traceback:")
        raise HTTPException(status_code=500, detail=f"Drug import failed: {str(e)}") from e
    finally:
        await file.close()

    resolved_atomic = settings.import_atomic if atomic is None else atomic
    return ApiResponse(
        status_code=201,
        data=ImportResult(count=len(drugs), atomic=resolved_atomic, data=_many(drugs)),
    )


@router.get("/{drug_id}", response_model=ApiResponse[DrugResponse], summary="Get Drug")
async def get_drug(drug_id: str, drug_service: DrugService = Depends(get_drug_service)):
    return ApiResponse(data=DrugResponse.model_validate(await drug_service.get_drug(drug_id)))


@router.put("/{drug_id}", response_model=ApiResponse[DrugResponse], summary="Update Drug")
async def update_drug(
    drug_id: str,
    payload: DrugUpdate,
    drug_service: DrugService = Depends(get_drug_service),
):
    """Partially update a drug; derived prices follow price, tax and margin changes."""
    drug = await drug_service.update_drug(drug_id, payload)
    return ApiResponse(data=DrugResponse.model_validate(drug))


@router.delete("/{drug_id}", response_model=ApiResponse[dict], summary="Delete Drug")
async def delete_drug(drug_id: str, drug_service: DrugService = Depends(get_drug_service)):
    await drug_service.delete_drug(drug_id)
    return ApiResponse(data={"id": drug_id, "deleted": True})


__all__ = ["router"]
