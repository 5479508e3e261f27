from enum import StrEnum

from pydantic import Field, field_validator

from app.market.charting import CHART_WINDOWS
from app.market.schemas import ChartPoint, IndicatorBundle, MomentumSummary, SeriesMeta
from app.schemas import CamelModel, TickerRequest


class Sentiment(StrEnum):
    bullish = "bullish"
    bearish = "bearish"
    neutral = "neutral"


class PredictionSource(StrEnum):
    model = "model"
    fallback = "fallback"


class PredictionPayload(CamelModel):
    predicted_price: float
    confidence: float = Field(ge=0.0, le=1.0)
    sentiment: Sentiment
    sentiment_score: float = Field(ge=-1.0, le=1.0)
    narrative: str
    recommendation: str
    key_signals: list[str] = []


class PredictRequest(TickerRequest):
    chart_days: int | None = None

    @field_validator("chart_days")
    @classmethod
    def check_chart_days(cls, value: int | None) -> int | None:
        if value is not None and value not in CHART_WINDOWS:
            raise ValueError(f"chart_days must be one of {CHART_WINDOWS}")
        return value


class PredictionResponse(CamelModel):
    ticker: str
    current_price: float
    meta: SeriesMeta
    prediction: PredictionPayload
    prediction_source: PredictionSource
    indicators: IndicatorBundle
    momentum: MomentumSummary
    chart_data: list[ChartPoint]
