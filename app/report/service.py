"""Fan-out over the core prediction and the four auxiliary feeds.

The prediction is required: if it fails the whole report fails. Each
auxiliary feed is independent; a failure leaves its section empty and never
cancels or delays the others.
"""

import asyncio
from collections.abc import Awaitable

import structlog

from app.financials.service import FinancialsService
from app.fundamentals.service import FundamentalsService
from app.news.service import NewsService
from app.ownership.service import OwnershipService
from app.prediction.service import PredictionService
from app.report.schemas import StockReport

logger = structlog.get_logger()


class StockReportService:
    def __init__(
        self,
        prediction: PredictionService,
        financials: FinancialsService,
        fundamentals: FundamentalsService,
        news: NewsService,
        ownership: OwnershipService,
    ) -> None:
        self._prediction = prediction
        self._financials = financials
        self._fundamentals = fundamentals
        self._news = news
        self._ownership = ownership

    async def build(self, ticker: str, chart_days: int | None = None) -> StockReport:
        logger.info("report_build", ticker=ticker)

        auxiliary: dict[str, Awaitable] = {
            "financials": self._financials.get_financials(ticker),
            "fundamentals": self._fundamentals.get_fundamentals(ticker),
            "news": self._news.get_news(ticker),
            "ownership": self._ownership.get_ownership(ticker),
        }
        tasks = {name: asyncio.create_task(coro) for name, coro in auxiliary.items()}

        try:
            prediction = await self._prediction.predict(ticker, chart_days)
        except Exception:
            for task in tasks.values():
                task.cancel()
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            raise

        results = await asyncio.gather(*tasks.values(), return_exceptions=True)

        sections: dict[str, object] = {}
        unavailable: list[str] = []
        for name, result in zip(tasks, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("report_section_failed", ticker=ticker, section=name, error=str(result))
                unavailable.append(name)
                sections[name] = None
            else:
                sections[name] = result

        return StockReport(
            ticker=ticker,
            prediction=prediction,
            unavailable_sections=unavailable,
            **sections,
        )
