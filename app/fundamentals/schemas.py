from enum import StrEnum

from app.schemas import CamelModel


class ScoreTier(StrEnum):
    green = "green"
    yellow = "yellow"
    red = "red"


class FundamentalsInput(CamelModel):
    """Raw financial ratios; any ratio left out counts as zero."""

    eps: float | None = None
    pe_ratio: float | None = None
    roe: float | None = None
    debt_to_equity: float | None = None
    profit_margin: float | None = None
    dividend_yield: float | None = None
    revenue_growth: float | None = None
    earnings_growth: float | None = None

    def value(self, metric: str) -> float:
        raw = getattr(self, metric)
        return 0.0 if raw is None else float(raw)


class RadarMetric(CamelModel):
    metric: str
    value: float


class FundamentalsScore(CamelModel):
    score: int
    tier: ScoreTier
    radar_metrics: list[RadarMetric]


class FormattedMetrics(CamelModel):
    eps: str
    pe_ratio: str
    roe: str
    debt_to_equity: str
    profit_margin: str
    dividend_yield: str
    revenue_growth: str
    earnings_growth: str


class FundamentalsReport(CamelModel):
    ticker: str
    ai_score: int
    score_color: ScoreTier
    metrics: FormattedMetrics
    radar_data: list[RadarMetric]
    matched_rules: list[str]
    ai_commentary: str
    is_mock_data: bool = False
