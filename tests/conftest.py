from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from app.market.providers.base import MarketDataProvider
from app.market.schemas import PriceBar, PriceSeries, SeriesMeta


def make_series(closes, volumes=None, ticker="TEST") -> PriceSeries:
    """Daily series starting 2024-01-01 with high/low one unit around the close."""
    volumes = volumes if volumes is not None else [1_000_000.0] * len(closes)
    start = datetime(2024, 1, 1, tzinfo=UTC)
    bars = [
        PriceBar(
            timestamp=start + timedelta(days=i),
            open=close,
            high=close + 1,
            low=close - 1,
            close=close,
            volume=volume,
        )
        for i, (close, volume) in enumerate(zip(closes, volumes, strict=True))
    ]
    return PriceSeries(
        ticker=ticker,
        bars=bars,
        meta=SeriesMeta(company_name=f"{ticker} Corp", currency="USD", exchange="NMS"),
    )


class StubProvider(MarketDataProvider):
    """In-memory provider; set an ``*_error`` attribute to make that call raise."""

    def __init__(self, series=None, info=None, earnings=None, news=None, holders=None):
        self.series = series
        self.info = info or {}
        self.earnings = earnings or []
        self.news = news or []
        self.holders = holders or {}
        self.series_error = None
        self.info_error = None
        self.news_error = None
        self.holders_error = None

    async def get_price_series(self, ticker, period="6mo"):
        if self.series_error:
            raise self.series_error
        return self.series.model_copy(update={"ticker": ticker})

    async def get_company_info(self, ticker):
        if self.info_error:
            raise self.info_error
        return self.info

    async def get_earnings_history(self, ticker):
        return self.earnings

    async def get_news(self, ticker, limit):
        if self.news_error:
            raise self.news_error
        return self.news[:limit]

    async def get_major_holders(self, ticker):
        if self.holders_error:
            raise self.holders_error
        return self.holders


MODEL_REPLY = (
    "Here is my analysis:\n```json\n"
    '{"prediction": 131.5, "confidence": 0.72, "sentiment": "bullish", '
    '"technicalAnalysis": "Price is above both moving averages.", '
    '"sentimentScore": 0.4, "recommendation": "Buy on strength", '
    '"keySignals": ["RSI rising", "MACD above signal"]}\n```'
)


@pytest.fixture
def rising_series():
    return make_series([100.0 + i for i in range(60)])


@pytest.fixture
def company_info():
    return {
        "shortName": "Test Corp",
        "marketCap": 2_500_000_000_000,
        "totalRevenue": 385_000_000_000,
        "netIncomeToCommon": 97_000_000_000,
        "profitMargins": 0.253,
        "trailingPE": 18.2,
        "trailingEps": 6.42,
        "returnOnEquity": 0.245,
        "debtToEquity": 0.4,
        "currentRatio": 0.99,
        "operatingCashflow": 110_000_000_000,
        "freeCashflow": 99_500_000_000,
        "revenueGrowth": 0.061,
        "earningsGrowth": 0.108,
        "targetMeanPrice": 210.0,
        "recommendationKey": "buy",
        "bookValue": 4.38,
        "priceToBook": 43.1,
        "dividendYield": 0.0052,
        "beta": 1.24,
    }


@pytest.fixture
def holders():
    return {
        "insidersPercentHeld": 0.0712,
        "institutionsPercentHeld": 0.6105,
        "institutionsFloatPercentHeld": 0.6573,
        "institutionsCount": 6512.0,
    }


@pytest.fixture
def news_items():
    published = datetime(2024, 3, 4, 14, 30, tzinfo=UTC)
    return [
        {"title": "Test Corp beats estimates", "publisher": "Wire", "link": "https://x/1", "published_at": published},
        {"title": "Test Corp faces probe", "publisher": "Daily", "link": "https://x/2", "published_at": published},
        {"title": "Test Corp holds event", "publisher": "Blog", "link": "", "published_at": None},
    ]


@pytest.fixture
def provider(rising_series, company_info, holders, news_items):
    return StubProvider(
        series=rising_series, info=company_info, holders=holders, news=news_items
    )


@pytest.fixture
def fake_llm():
    return FakeListChatModel(responses=[MODEL_REPLY])


@pytest.fixture
def failing_llm():
    llm = MagicMock()
    llm.ainvoke = AsyncMock(side_effect=TimeoutError("model timed out"))
    return llm
