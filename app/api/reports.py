"""Financial report and sales API endpoints."""
from fastapi import APIRouter, Depends, Response, status
from loguru import logger

from app.api.deps import get_report_service, get_sales_service
from app.schemas import (
    ApiResponse,
    MonthRecap,
    NetIncomeEstimation,
    NetIncomeRequest,
    RevenueAndCogs,
    SaleCreate,
    SaleResponse,
)
from app.services.report_service import ReportService
from app.services.sales_service import SalesService

router = APIRouter(prefix="/reports", tags=["reports"])
sales_router = APIRouter(prefix="/sales", tags=["sales"])


@sales_router.post(
    "",
    response_model=ApiResponse[SaleResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Record Sale",
)
async def record_sale(payload: SaleCreate, sales_service: SalesService = Depends(get_sales_service)):
    sale = await sales_service.record_sale(payload)
    return ApiResponse(status_code=201, data=SaleResponse.model_validate(sale))


@router.get("/current-month-recap", response_model=ApiResponse[MonthRecap])
async def get_current_month_recap(report_service: ReportService = Depends(get_report_service)):
    recap = await report_service.current_month_recap()
    logger.info("Success get current month recap data: totalRevenue, totalCOGS, totalGrossProfitLoss")
    return ApiResponse(data=recap)


@router.get("/revenue-cogs", response_model=ApiResponse[RevenueAndCogs])
async def get_revenue_and_cogs(report_service: ReportService = Depends(get_report_service)):
    data = await report_service.revenue_and_cogs()
    logger.info("Success get monthly and yearly revenue and COGS data")
    return ApiResponse(data=data)


@router.post("/net-income-estimation", response_model=ApiResponse[NetIncomeEstimation])
async def calculate_net_income(
    payload: NetIncomeRequest, report_service: ReportService = Depends(get_report_service)
):
    data = await report_service.net_income_estimation(payload)
    logger.info("Success calculate net income estimation")
    return ApiResponse(data=data)


@router.get("/financial-report", response_class=Response)
async def generate_financial_report(report_service: ReportService = Depends(get_report_service)):
    """Download the financial report as a PDF attachment."""
    pdf = await report_service.financial_report_pdf()
    logger.info(f"Generated financial report PDF ({len(pdf)} bytes)")
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": "attachment; filename=net-income-estimation.pdf"},
    )


__all__ = ["router", "sales_router"]
