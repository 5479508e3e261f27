from fastapi import APIRouter

from app.dependencies import OwnershipServiceDep
from app.ownership.schemas import OwnershipReport
from app.schemas import TickerRequest, UnavailableResponse

router = APIRouter()


@router.post("/stock-ownership", response_model=OwnershipReport | UnavailableResponse)
async def get_ownership(
    request: TickerRequest, service: OwnershipServiceDep
) -> OwnershipReport | UnavailableResponse:
    return await service.get_ownership(request.ticker)
