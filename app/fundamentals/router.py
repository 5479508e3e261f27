from fastapi import APIRouter

from app.dependencies import FundamentalsServiceDep
from app.fundamentals.schemas import FundamentalsReport
from app.schemas import TickerRequest, UnavailableResponse

router = APIRouter()


@router.post("/stock-fundamentals", response_model=FundamentalsReport | UnavailableResponse)
async def get_fundamentals(
    request: TickerRequest, service: FundamentalsServiceDep
) -> FundamentalsReport | UnavailableResponse:
    return await service.get_fundamentals(request.ticker)
