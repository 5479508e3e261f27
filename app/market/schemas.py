from datetime import datetime

from pydantic import Field, model_validator

from app.schemas import CamelModel


class PriceBar(CamelModel):
    timestamp: datetime
    open: float | None = None
    high: float
    low: float
    close: float
    volume: float = 0.0


class SeriesMeta(CamelModel):
    company_name: str
    currency: str = "USD"
    exchange: str = "Unknown"


class PriceSeries(CamelModel):
    ticker: str
    bars: list[PriceBar] = Field(min_length=1)
    meta: SeriesMeta | None = None

    @model_validator(mode="after")
    def check_chronological(self) -> "PriceSeries":
        for prev, bar in zip(self.bars, self.bars[1:]):
            if bar.timestamp <= prev.timestamp:
                raise ValueError(
                    f"bars must be strictly chronological: {bar.timestamp} follows {prev.timestamp}"
                )
        return self

    @property
    def closes(self) -> list[float]:
        return [bar.close for bar in self.bars]

    @property
    def volumes(self) -> list[float]:
        return [bar.volume for bar in self.bars]

    @property
    def last_close(self) -> float:
        return self.bars[-1].close


class MacdResult(CamelModel):
    line: float
    signal: float
    histogram: float


class IndicatorBundle(CamelModel):
    sma20: float
    sma50: float
    ema12: float
    ema26: float
    rsi14: float
    macd: MacdResult


class MomentumSummary(CamelModel):
    day1_pct: float | None
    day7_pct: float | None
    day30_pct: float | None
    volume_current: float
    volume_average20: float
    volume_change_pct: float | None


class ChartPoint(CamelModel):
    date: str  # YYYY-MM-DD
    price: float
    volume: float
    high: float
    low: float
