from abc import ABC, abstractmethod

from app.market.schemas import PriceSeries


class MarketDataProvider(ABC):
    """Source of raw market data.

    Implementations raise ``UpstreamUnavailableError`` when the source cannot
    be reached and ``UpstreamMalformedError`` when it answers with data in an
    unexpected shape.
    """

    @abstractmethod
    async def get_price_series(self, ticker: str, period: str = "6mo") -> PriceSeries: ...

    @abstractmethod
    async def get_company_info(self, ticker: str) -> dict: ...

    @abstractmethod
    async def get_earnings_history(self, ticker: str) -> list[dict]: ...

    @abstractmethod
    async def get_news(self, ticker: str, limit: int) -> list[dict]: ...

    @abstractmethod
    async def get_major_holders(self, ticker: str) -> dict[str, float]: ...
