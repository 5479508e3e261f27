from app.market.schemas import ChartPoint, PriceBar, PriceSeries

CHART_WINDOWS = (20, 30, 60)
DEFAULT_CHART_WINDOW = 60


def window_bars(series: PriceSeries, size: int) -> list[PriceBar]:
    """The trailing ``size`` bars in their original order (all bars if fewer exist)."""
    if size <= 0:
        raise ValueError(f"window size must be positive, got {size}")
    return list(series.bars[-size:])


def chart_window(series: PriceSeries, size: int = DEFAULT_CHART_WINDOW) -> list[ChartPoint]:
    return [
        ChartPoint(
            date=bar.timestamp.date().isoformat(),
            price=bar.close,
            volume=bar.volume,
            high=bar.high,
            low=bar.low,
        )
        for bar in window_bars(series, size)
    ]
