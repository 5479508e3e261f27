from collections.abc import Sequence

from app.market.indicators import sma
from app.market.schemas import MomentumSummary, PriceSeries

LOOKBACKS = (1, 7, 30)
VOLUME_AVERAGE_PERIOD = 20


def pct_change(values: Sequence[float], lookback: int) -> float | None:
    """Percent change from ``lookback`` bars ago to the last bar.

    None when the series is too short or the base price is zero.
    """
    if lookback <= 0:
        raise ValueError(f"lookback must be positive, got {lookback}")
    if len(values) <= lookback:
        return None
    base = values[-1 - lookback]
    if base == 0:
        return None
    return (values[-1] - base) / base * 100


def volume_change_pct(volumes: Sequence[float], period: int = VOLUME_AVERAGE_PERIOD) -> float | None:
    average = sma(volumes, period)
    if average == 0:
        return None
    return (volumes[-1] / average - 1) * 100


def compute_momentum(series: PriceSeries) -> MomentumSummary:
    closes = series.closes
    volumes = series.volumes
    day1, day7, day30 = (pct_change(closes, n) for n in LOOKBACKS)

    return MomentumSummary(
        day1_pct=day1,
        day7_pct=day7,
        day30_pct=day30,
        volume_current=volumes[-1],
        volume_average20=sma(volumes, VOLUME_AVERAGE_PERIOD),
        volume_change_pct=volume_change_pct(volumes),
    )
