from enum import StrEnum

from app.schemas import CamelModel


class HeadlineSentiment(StrEnum):
    positive = "positive"
    negative = "negative"
    neutral = "neutral"


class NewsItem(CamelModel):
    date: str | None  # YYYY-MM-DD
    headline: str
    publisher: str
    link: str
    sentiment: HeadlineSentiment
    sentiment_score: float  # -1.0 to 1.0


class NewsReport(CamelModel):
    ticker: str
    news: list[NewsItem]
