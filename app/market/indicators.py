"""Technical indicators over a chronological sequence of closing prices.

Every function is pure and only the final value of each indicator is returned,
except ``ema_series`` which exposes the running values MACD needs.
"""

from collections.abc import Sequence

import pandas as pd

from app.market.schemas import IndicatorBundle, MacdResult

RSI_NEUTRAL = 50.0

MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9


def _to_series(values: Sequence[float], period: int, name: str) -> pd.Series:
    if period <= 0:
        raise ValueError(f"period must be positive, got {period}")
    if len(values) == 0:
        raise ValueError(f"cannot compute {name} of an empty series")
    return pd.Series(values, dtype="float64")


def _ewm(closes: pd.Series, period: int) -> pd.Series:
    # adjust=False seeds with the first value and uses k = 2 / (period + 1)
    return closes.ewm(span=period, adjust=False).mean()


def sma(values: Sequence[float], period: int) -> float:
    """Mean of the last ``period`` values, or of all of them if fewer exist."""
    closes = _to_series(values, period, "SMA")
    return float(closes.tail(period).mean())


def ema_series(values: Sequence[float], period: int) -> list[float]:
    """Running EMA seeded with the first value.

    Element ``i`` equals ``ema(values[: i + 1], period)``.
    """
    closes = _to_series(values, period, "EMA")
    return _ewm(closes, period).tolist()


def ema(values: Sequence[float], period: int) -> float:
    closes = _to_series(values, period, "EMA")
    return float(_ewm(closes, period).iloc[-1])


def rsi(values: Sequence[float], period: int = 14) -> float:
    """Relative strength index over the last ``period`` price changes.

    A window with neither gains nor losses (flat prices, or fewer than two
    closes) has no defined ratio and returns ``RSI_NEUTRAL``.
    """
    if period <= 0:
        raise ValueError(f"period must be positive, got {period}")

    deltas = pd.Series(values, dtype="float64").diff().dropna().tail(period)
    avg_gain = float(deltas.clip(lower=0).sum()) / period
    avg_loss = float(-deltas.clip(upper=0).sum()) / period

    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else RSI_NEUTRAL

    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def macd(values: Sequence[float]) -> MacdResult:
    """MACD line, signal and histogram.

    The line series starts at index 26, so fewer than 35 closes give a signal
    built from a short line series; with 26 closes or fewer there is no line
    series at all and the signal equals the line.
    """
    closes = _to_series(values, MACD_SLOW, "MACD")
    line_series = _ewm(closes, MACD_FAST) - _ewm(closes, MACD_SLOW)
    line = float(line_series.iloc[-1])

    tail = line_series.iloc[MACD_SLOW:]
    signal = float(_ewm(tail, MACD_SIGNAL).iloc[-1]) if not tail.empty else line

    return MacdResult(line=line, signal=signal, histogram=line - signal)


def compute_indicators(closes: Sequence[float]) -> IndicatorBundle:
    return IndicatorBundle(
        sma20=sma(closes, 20),
        sma50=sma(closes, 50),
        ema12=ema(closes, 12),
        ema26=ema(closes, 26),
        rsi14=rsi(closes, 14),
        macd=macd(closes),
    )
