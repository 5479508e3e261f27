from fastapi import APIRouter

from app.dependencies import FinancialsServiceDep
from app.financials.schemas import CompanyFinancials
from app.schemas import TickerRequest, UnavailableResponse

router = APIRouter()


@router.post("/company-financials", response_model=CompanyFinancials | UnavailableResponse)
async def get_financials(
    request: TickerRequest, service: FinancialsServiceDep
) -> CompanyFinancials | UnavailableResponse:
    return await service.get_financials(request.ticker)
