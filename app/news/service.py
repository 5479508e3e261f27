import asyncio

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage

from app.exceptions import AppError
from app.llm.commentary import message_text
from app.market.providers.base import MarketDataProvider
from app.news.schemas import HeadlineSentiment, NewsItem, NewsReport

logger = structlog.get_logger()

_HEADLINE_PROMPT = (
    "Analyze sentiment of this headline "
    '(respond with only: positive, negative, or neutral): "{headline}"'
)

_SENTIMENT_SCORES = {
    HeadlineSentiment.positive: 0.7,
    HeadlineSentiment.negative: -0.7,
    HeadlineSentiment.neutral: 0.0,
}


def classify_reply(reply: str) -> HeadlineSentiment:
    """Map a free-text model reply onto a sentiment label."""
    lowered = reply.lower()
    if "positive" in lowered:
        return HeadlineSentiment.positive
    if "negative" in lowered:
        return HeadlineSentiment.negative
    return HeadlineSentiment.neutral


class NewsService:
    def __init__(
        self, provider: MarketDataProvider, llm: BaseChatModel | None, limit: int = 8
    ) -> None:
        self._provider = provider
        self._llm = llm
        self._limit = limit

    async def get_news(self, ticker: str) -> NewsReport:
        logger.info("news_get", ticker=ticker)

        try:
            items = await self._provider.get_news(ticker, self._limit)
        except AppError as exc:
            logger.error("news_fetch_error", ticker=ticker, error=exc.message)
            raise AppError("Unable to fetch news", code=exc.code) from exc

        sentiments = await asyncio.gather(
            *(self._classify_headline(ticker, item["title"]) for item in items)
        )

        news = [
            NewsItem(
                date=item["published_at"].date().isoformat() if item.get("published_at") else None,
                headline=item["title"],
                publisher=item.get("publisher") or "Unknown",
                link=item.get("link") or "",
                sentiment=sentiment,
                sentiment_score=_SENTIMENT_SCORES[sentiment],
            )
            for item, sentiment in zip(items, sentiments, strict=True)
        ]
        return NewsReport(ticker=ticker, news=news)

    async def _classify_headline(self, ticker: str, headline: str) -> HeadlineSentiment:
        if self._llm is None:
            return HeadlineSentiment.neutral

        prompt = _HEADLINE_PROMPT.format(headline=headline)
        try:
            response = await self._llm.ainvoke([HumanMessage(content=prompt)])
        except Exception as exc:
            logger.warning("news_sentiment_error", ticker=ticker, error=str(exc))
            return HeadlineSentiment.neutral
        return classify_reply(message_text(response.content))
