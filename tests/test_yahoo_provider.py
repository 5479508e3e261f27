import math

import pandas as pd
import pytest

from app.exceptions import UpstreamMalformedError, UpstreamUnavailableError
from app.market.providers import yahoo_finance
from app.market.providers.yahoo_finance import YahooFinanceProvider, _normalize_news_item
from app.market.schemas import PriceSeries


def _history_frame():
    index = pd.date_range("2024-05-01", periods=4, freq="D", tz="America/New_York")
    return pd.DataFrame(
        {
            "Open": [10.0, 11.0, 12.0, 13.0],
            "High": [10.5, 11.5, math.nan, 13.5],
            "Low": [9.5, 10.5, 11.5, 12.5],
            "Close": [10.2, math.nan, 12.2, 13.2],
            "Volume": [1000, 1100, 1200, 1300],
        },
        index=index,
    )


async def test_price_series_drops_bars_without_close(monkeypatch):
    metadata = {"longName": "Example Inc.", "currency": "USD", "exchangeName": "NMS"}
    monkeypatch.setattr(yahoo_finance, "_fetch_history", lambda t, p: (_history_frame(), metadata))

    series = await YahooFinanceProvider().get_price_series("EXM")

    assert series.closes == [10.2, 12.2, 13.2]
    assert series.volumes == [1000.0, 1200.0, 1300.0]
    # missing high falls back to the close
    assert series.bars[1].high == 12.2
    assert series.meta.company_name == "Example Inc."


async def test_price_series_keeps_last_copy_of_repeated_session(monkeypatch):
    index = pd.DatetimeIndex(["2024-05-01", "2024-05-02", "2024-05-02"], tz="America/New_York")
    frame = pd.DataFrame(
        {
            "Open": [10.0, 11.0, 11.0],
            "High": [10.5, 11.5, 11.8],
            "Low": [9.5, 10.5, 10.4],
            "Close": [10.2, 11.2, 11.6],
            "Volume": [1000, 1100, 1400],
        },
        index=index,
    )
    monkeypatch.setattr(yahoo_finance, "_fetch_history", lambda t, p: (frame, {}))

    series = await YahooFinanceProvider().get_price_series("DUP")

    assert series.closes == [10.2, 11.6]
    assert series.volumes == [1000.0, 1400.0]
    assert series.meta.company_name == "DUP"


async def test_price_series_invalid_bars_are_malformed(monkeypatch):
    def bad_series(**kwargs):
        # an empty bar list fails PriceSeries validation
        return PriceSeries.model_validate({"ticker": kwargs["ticker"], "bars": []})

    monkeypatch.setattr(yahoo_finance, "_fetch_history", lambda t, p: (_history_frame(), {}))
    monkeypatch.setattr(yahoo_finance, "PriceSeries", bad_series)
    with pytest.raises(UpstreamMalformedError):
        await YahooFinanceProvider().get_price_series("BAD")


async def test_price_series_keeps_zero_low(monkeypatch):
    frame = _history_frame()
    frame.loc[frame.index[0], "Low"] = 0.0
    monkeypatch.setattr(yahoo_finance, "_fetch_history", lambda t, p: (frame, {}))

    series = await YahooFinanceProvider().get_price_series("EXM")

    assert series.bars[0].low == 0.0


async def test_price_series_empty_history_is_malformed(monkeypatch):
    monkeypatch.setattr(yahoo_finance, "_fetch_history", lambda t, p: (pd.DataFrame(), {}))
    with pytest.raises(UpstreamMalformedError):
        await YahooFinanceProvider().get_price_series("NOPE")


async def test_network_error_is_unavailable(monkeypatch):
    def boom(ticker):
        raise ConnectionError("connection refused")

    monkeypatch.setattr(yahoo_finance, "_fetch_info", boom)
    with pytest.raises(UpstreamUnavailableError):
        await YahooFinanceProvider().get_company_info("EXM")


async def test_empty_info_is_malformed(monkeypatch):
    monkeypatch.setattr(yahoo_finance, "_fetch_info", lambda t: {"trailingPegRatio": None})
    with pytest.raises(UpstreamMalformedError):
        await YahooFinanceProvider().get_company_info("EXM")


async def test_major_holders_from_value_column(monkeypatch):
    frame = pd.DataFrame(
        {"Value": [0.02, 0.6, 0.62, 5000.0]},
        index=["insidersPercentHeld", "institutionsPercentHeld", "institutionsFloatPercentHeld", "institutionsCount"],
    )
    monkeypatch.setattr(yahoo_finance, "_fetch_major_holders", lambda t: frame)
    holders = await YahooFinanceProvider().get_major_holders("EXM")
    assert holders["institutionsPercentHeld"] == 0.6


async def test_major_holders_unexpected_shape_is_malformed(monkeypatch):
    monkeypatch.setattr(yahoo_finance, "_fetch_major_holders", lambda t: pd.DataFrame({"0": [1]}))
    with pytest.raises(UpstreamMalformedError):
        await YahooFinanceProvider().get_major_holders("EXM")


async def test_earnings_history_newest_first(monkeypatch):
    frame = pd.DataFrame(
        {"epsActual": [1.0, 1.2], "epsEstimate": [0.9, math.nan], "surprisePercent": [0.11, 0.05]},
        index=pd.to_datetime(["2024-03-31", "2024-06-30"]),
    )
    monkeypatch.setattr(yahoo_finance, "_fetch_earnings_history", lambda t: frame)
    rows = await YahooFinanceProvider().get_earnings_history("EXM")
    assert [row["eps_actual"] for row in rows] == [1.2, 1.0]
    assert rows[0]["eps_estimate"] is None


class TestNewsNormalization:
    def test_nested_content_shape(self):
        item = {
            "id": "abc",
            "content": {
                "title": "Example Inc. raises guidance",
                "pubDate": "2024-05-02T13:00:00Z",
                "provider": {"displayName": "Reuters"},
                "canonicalUrl": {"url": "https://example.com/a"},
            },
        }
        normalized = _normalize_news_item(item)
        assert normalized["title"] == "Example Inc. raises guidance"
        assert normalized["publisher"] == "Reuters"
        assert normalized["published_at"].date().isoformat() == "2024-05-02"

    def test_legacy_shape(self):
        item = {"title": "Old style", "publisher": "AP", "link": "https://x", "providerPublishTime": 1714654800}
        normalized = _normalize_news_item(item)
        assert normalized["link"] == "https://x"
        assert normalized["published_at"].year == 2024

    def test_untitled_item_dropped(self):
        assert _normalize_news_item({"content": {"summary": "no title"}}) is None
