"""Additive fundamentals score and radar-chart normalization.

The score starts at ``BASE_SCORE`` and every rule in ``SCORING_RULES`` whose
predicate holds adds its points. Rules on the same ratio are independent, so a
ratio can earn several of them. Radar metrics use their own scales and are only
meant for display.
"""

from collections.abc import Callable
from dataclasses import dataclass

from app.fundamentals.schemas import (
    FormattedMetrics,
    FundamentalsInput,
    FundamentalsScore,
    RadarMetric,
    ScoreTier,
)

BASE_SCORE = 50
GREEN_THRESHOLD = 70
YELLOW_THRESHOLD = 50


@dataclass(frozen=True)
class ScoringRule:
    metric: str
    description: str
    predicate: Callable[[float], bool]
    points: int

    def matches(self, inputs: FundamentalsInput) -> bool:
        return self.predicate(inputs.value(self.metric))


SCORING_RULES: tuple[ScoringRule, ...] = (
    ScoringRule("eps", "EPS positive", lambda v: v > 0, 10),
    ScoringRule("eps", "EPS above 5", lambda v: v > 5, 5),
    ScoringRule("pe_ratio", "P/E between 0 and 30", lambda v: 0 < v < 30, 10),
    ScoringRule("pe_ratio", "P/E between 10 and 20", lambda v: 10 <= v <= 20, 5),
    ScoringRule("roe", "ROE above 15%", lambda v: v > 0.15, 10),
    ScoringRule("roe", "ROE above 20%", lambda v: v > 0.20, 5),
    ScoringRule("debt_to_equity", "Debt/equity below 1", lambda v: v < 1, 10),
    ScoringRule("debt_to_equity", "Debt/equity below 0.5", lambda v: v < 0.5, 5),
    ScoringRule("profit_margin", "Profit margin above 10%", lambda v: v > 0.10, 10),
    ScoringRule("profit_margin", "Profit margin above 20%", lambda v: v > 0.20, 5),
    ScoringRule("revenue_growth", "Revenue growing", lambda v: v > 0, 5),
    ScoringRule("revenue_growth", "Revenue growth above 10%", lambda v: v > 0.10, 5),
    ScoringRule("earnings_growth", "Earnings growing", lambda v: v > 0, 5),
    ScoringRule("earnings_growth", "Earnings growth above 15%", lambda v: v > 0.15, 5),
)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def matched_rules(
    inputs: FundamentalsInput, rules: tuple[ScoringRule, ...] = SCORING_RULES
) -> list[ScoringRule]:
    return [rule for rule in rules if rule.matches(inputs)]


def raw_score(inputs: FundamentalsInput, rules: tuple[ScoringRule, ...] = SCORING_RULES) -> int:
    """Unclamped additive total."""
    return BASE_SCORE + sum(rule.points for rule in matched_rules(inputs, rules))


def tier_for(score: float) -> ScoreTier:
    if score >= GREEN_THRESHOLD:
        return ScoreTier.green
    if score >= YELLOW_THRESHOLD:
        return ScoreTier.yellow
    return ScoreTier.red


def radar_metrics(inputs: FundamentalsInput) -> list[RadarMetric]:
    eps = inputs.value("eps")
    pe = inputs.value("pe_ratio")
    raw = [
        ("EPS Growth", min(eps / 10 * 100, 100)),
        ("P/E Health", max(100 - pe * 2, 0) if pe > 0 else 0),
        ("ROE", inputs.value("roe") * 500),
        ("Low Debt", max(100 - inputs.value("debt_to_equity") * 50, 0)),
        ("Profit Margin", inputs.value("profit_margin") * 500),
        ("Div Yield", inputs.value("dividend_yield") * 1000),
    ]
    return [RadarMetric(metric=name, value=_clamp(value, 0, 100)) for name, value in raw]


def score_fundamentals(
    inputs: FundamentalsInput, rules: tuple[ScoringRule, ...] = SCORING_RULES
) -> FundamentalsScore:
    score = int(round(_clamp(raw_score(inputs, rules), 0, 100)))
    return FundamentalsScore(
        score=score,
        tier=tier_for(score),
        radar_metrics=radar_metrics(inputs),
    )


def format_metrics(inputs: FundamentalsInput) -> FormattedMetrics:
    """Display strings: plain ratios to two decimals, fractional ratios as percentages."""

    def plain(metric: str) -> str:
        return f"{inputs.value(metric):.2f}"

    def percent(metric: str) -> str:
        return f"{inputs.value(metric) * 100:.2f}"

    return FormattedMetrics(
        eps=plain("eps"),
        pe_ratio=plain("pe_ratio"),
        roe=percent("roe"),
        debt_to_equity=plain("debt_to_equity"),
        profit_margin=percent("profit_margin"),
        dividend_yield=percent("dividend_yield"),
        revenue_growth=percent("revenue_growth"),
        earnings_growth=percent("earnings_growth"),
    )
