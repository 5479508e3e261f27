from fastapi import APIRouter

from app.dependencies import NewsServiceDep
from app.news.schemas import NewsReport
from app.schemas import TickerRequest

router = APIRouter()


@router.post("/stock-news", response_model=NewsReport)
async def get_news(request: TickerRequest, service: NewsServiceDep) -> NewsReport:
    return await service.get_news(request.ticker)
