from fastapi import APIRouter

from app.dependencies import PredictionServiceDep
from app.prediction.schemas import PredictionResponse, PredictRequest

router = APIRouter()


@router.post("/predict-stock", response_model=PredictionResponse)
async def predict_stock(
    request: PredictRequest, service: PredictionServiceDep
) -> PredictionResponse:
    return await service.predict(request.ticker, request.chart_days)
