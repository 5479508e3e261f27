from fastapi import APIRouter

from app.dependencies import StockReportServiceDep
from app.prediction.schemas import PredictRequest
from app.report.schemas import StockReport

router = APIRouter()


@router.post("/stock-report", response_model=StockReport)
async def get_stock_report(request: PredictRequest, service: StockReportServiceDep) -> StockReport:
    return await service.build(request.ticker, request.chart_days)
