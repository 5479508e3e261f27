from functools import lru_cache
from typing import Annotated

import structlog
from fastapi import Depends
from langchain_core.language_models import BaseChatModel

from app.config import settings
from app.exceptions import AppError
from app.financials.service import FinancialsService
from app.fundamentals.service import FundamentalsService
from app.llm.config import LLMConfig
from app.llm.factory import LLMFactory
from app.market.providers.base import MarketDataProvider
from app.market.providers.yahoo_finance import YahooFinanceProvider
from app.news.service import NewsService
from app.ownership.service import OwnershipService
from app.prediction.service import PredictionService
from app.report.service import StockReportService

logger = structlog.get_logger()


def get_market_provider() -> MarketDataProvider:
    return YahooFinanceProvider()


@lru_cache
def get_llm() -> BaseChatModel | None:
    """Chat model built from settings, or None when no credentials are configured."""
    try:
        return LLMFactory.create(LLMConfig.from_settings(settings))
    except AppError as exc:
        logger.warning("llm_not_configured", error=exc.message)
        return None


MarketProviderDep = Annotated[MarketDataProvider, Depends(get_market_provider)]
LLMDep = Annotated[BaseChatModel | None, Depends(get_llm)]


def get_prediction_service(provider: MarketProviderDep, llm: LLMDep) -> PredictionService:
    return PredictionService(
        provider,
        llm,
        history_period=settings.history_period,
        chart_days=settings.chart_days,
    )


def get_financials_service(provider: MarketProviderDep) -> FinancialsService:
    return FinancialsService(provider)


def get_fundamentals_service(provider: MarketProviderDep, llm: LLMDep) -> FundamentalsService:
    return FundamentalsService(provider, llm)


def get_news_service(provider: MarketProviderDep, llm: LLMDep) -> NewsService:
    return NewsService(provider, llm, limit=settings.news_limit)


def get_ownership_service(provider: MarketProviderDep, llm: LLMDep) -> OwnershipService:
    return OwnershipService(provider, llm)


PredictionServiceDep = Annotated[PredictionService, Depends(get_prediction_service)]
FinancialsServiceDep = Annotated[FinancialsService, Depends(get_financials_service)]
FundamentalsServiceDep = Annotated[FundamentalsService, Depends(get_fundamentals_service)]
NewsServiceDep = Annotated[NewsService, Depends(get_news_service)]
OwnershipServiceDep = Annotated[OwnershipService, Depends(get_ownership_service)]


def get_stock_report_service(
    prediction: PredictionServiceDep,
    financials: FinancialsServiceDep,
    fundamentals: FundamentalsServiceDep,
    news: NewsServiceDep,
    ownership: OwnershipServiceDep,
) -> StockReportService:
    return StockReportService(prediction, financials, fundamentals, news, ownership)


StockReportServiceDep = Annotated[StockReportService, Depends(get_stock_report_service)]
