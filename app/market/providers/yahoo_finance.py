import asyncio
import math
from datetime import UTC, datetime

import pandas as pd
import structlog
import yfinance as yf
from pydantic import ValidationError

from app.exceptions import UpstreamMalformedError, UpstreamUnavailableError
from app.market.providers.base import MarketDataProvider
from app.market.schemas import PriceBar, PriceSeries, SeriesMeta

logger = structlog.get_logger()

_SOURCE = "Yahoo Finance"


def _to_float(value: object) -> float | None:
    """Coerce a yfinance cell to float, mapping NaN and junk to None."""
    if value is None:
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _fetch_history(ticker: str, period: str) -> tuple[pd.DataFrame, dict]:
    """Fetch daily price history synchronously (to be run in a thread)."""
    t = yf.Ticker(ticker)
    hist = t.history(period=period, interval="1d", auto_adjust=False)
    metadata = t.history_metadata or {}
    return hist, metadata


def _fetch_info(ticker: str) -> dict:
    return yf.Ticker(ticker).info or {}


def _fetch_earnings_history(ticker: str) -> pd.DataFrame | None:
    return yf.Ticker(ticker).earnings_history


def _fetch_news(ticker: str) -> list:
    return yf.Ticker(ticker).news or []


def _fetch_major_holders(ticker: str) -> pd.DataFrame | None:
    return yf.Ticker(ticker).major_holders


def _bars_from_history(ticker: str, hist: pd.DataFrame) -> list[PriceBar]:
    required = {"High", "Low", "Close", "Volume"}
    if hist is None or hist.empty:
        raise UpstreamMalformedError(_SOURCE, ticker, "Price history is empty")
    missing = required - set(hist.columns)
    if missing:
        raise UpstreamMalformedError(
            _SOURCE, ticker, f"Price history is missing columns: {sorted(missing)}"
        )

    # yfinance can repeat the latest session; the last copy wins.
    hist = hist[~hist.index.duplicated(keep="last")].sort_index()

    bars = []
    # Bars without a close are dropped whole so every column stays aligned.
    for timestamp, row in hist.dropna(subset=["Close"]).iterrows():
        close = float(row["Close"])
        high = _to_float(row["High"])
        low = _to_float(row["Low"])
        bars.append(
            PriceBar(
                timestamp=pd.Timestamp(timestamp).to_pydatetime(),
                open=_to_float(row.get("Open")),
                high=close if high is None else high,
                low=close if low is None else low,
                close=close,
                volume=_to_float(row["Volume"]) or 0.0,
            )
        )
    if not bars:
        raise UpstreamMalformedError(_SOURCE, ticker, "Price history has no closing prices")
    return bars


def _normalize_news_item(item: dict) -> dict | None:
    """Flatten both the legacy and the nested ``content`` news shapes."""
    content = item.get("content") if isinstance(item.get("content"), dict) else None
    if content is not None:
        title = content.get("title")
        provider = content.get("provider") or {}
        link = (content.get("canonicalUrl") or {}).get("url") or (
            content.get("clickThroughUrl") or {}
        ).get("url")
        published = None
        if content.get("pubDate"):
            published = pd.Timestamp(content["pubDate"]).to_pydatetime()
        publisher = provider.get("displayName")
    else:
        title = item.get("title")
        link = item.get("link")
        publisher = item.get("publisher")
        published = None
        if item.get("providerPublishTime"):
            published = datetime.fromtimestamp(int(item["providerPublishTime"]), tz=UTC)

    if not title:
        return None
    return {
        "title": title,
        "publisher": publisher or "Unknown",
        "link": link or "",
        "published_at": published,
    }


class YahooFinanceProvider(MarketDataProvider):
    async def get_price_series(self, ticker: str, period: str = "6mo") -> PriceSeries:
        try:
            hist, metadata = await asyncio.to_thread(_fetch_history, ticker, period)
        except Exception as exc:
            logger.error("yfinance_history_error", ticker=ticker, error=str(exc))
            raise UpstreamUnavailableError(_SOURCE, ticker, str(exc)) from exc

        bars = _bars_from_history(ticker, hist)
        meta = SeriesMeta(
            company_name=metadata.get("longName") or metadata.get("shortName") or ticker,
            currency=metadata.get("currency") or "USD",
            exchange=metadata.get("exchangeName") or "Unknown",
        )
        try:
            series = PriceSeries(ticker=ticker, bars=bars, meta=meta)
        except ValidationError as exc:
            logger.error("yfinance_history_invalid", ticker=ticker, error=str(exc))
            raise UpstreamMalformedError(_SOURCE, ticker, "Price history format unavailable") from exc

        logger.info("yfinance_history_fetched", ticker=ticker, bars=len(bars))
        return series

    async def get_company_info(self, ticker: str) -> dict:
        try:
            info = await asyncio.to_thread(_fetch_info, ticker)
        except Exception as exc:
            logger.error("yfinance_info_error", ticker=ticker, error=str(exc))
            raise UpstreamUnavailableError(_SOURCE, ticker, str(exc)) from exc

        if not isinstance(info, dict) or len(info) <= 1:
            raise UpstreamMalformedError(_SOURCE, ticker, "Financial data format unavailable")
        return info

    async def get_earnings_history(self, ticker: str) -> list[dict]:
        try:
            frame = await asyncio.to_thread(_fetch_earnings_history, ticker)
        except Exception as exc:
            logger.error("yfinance_earnings_error", ticker=ticker, error=str(exc))
            raise UpstreamUnavailableError(_SOURCE, ticker, str(exc)) from exc

        if frame is None or not isinstance(frame, pd.DataFrame) or frame.empty:
            return []

        rows = []
        for quarter, row in frame.sort_index(ascending=False).iterrows():
            rows.append(
                {
                    "quarter": quarter,
                    "eps_actual": _to_float(row.get("epsActual")),
                    "eps_estimate": _to_float(row.get("epsEstimate")),
                    "surprise_percent": _to_float(row.get("surprisePercent")),
                }
            )
        return rows

    async def get_news(self, ticker: str, limit: int) -> list[dict]:
        try:
            raw = await asyncio.to_thread(_fetch_news, ticker)
        except Exception as exc:
            logger.error("yfinance_news_error", ticker=ticker, error=str(exc))
            raise UpstreamUnavailableError(_SOURCE, ticker, str(exc)) from exc

        if not isinstance(raw, list):
            raise UpstreamMalformedError(_SOURCE, ticker, "News feed format unavailable")

        items = [_normalize_news_item(item) for item in raw if isinstance(item, dict)]
        return [item for item in items if item is not None][:limit]

    async def get_major_holders(self, ticker: str) -> dict[str, float]:
        try:
            frame = await asyncio.to_thread(_fetch_major_holders, ticker)
        except Exception as exc:
            logger.error("yfinance_holders_error", ticker=ticker, error=str(exc))
            raise UpstreamUnavailableError(_SOURCE, ticker, str(exc)) from exc

        if not isinstance(frame, pd.DataFrame) or "Value" not in frame.columns:
            raise UpstreamMalformedError(_SOURCE, ticker, "Ownership data format unavailable")

        holders = {}
        for key, value in frame["Value"].items():
            number = _to_float(value)
            if number is not None:
                holders[str(key)] = number
        return holders
