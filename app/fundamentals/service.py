import structlog
from langchain_core.language_models import BaseChatModel

from app.exceptions import UpstreamMalformedError, UpstreamUnavailableError
from app.fundamentals.schemas import FundamentalsInput, FundamentalsReport
from app.fundamentals.scoring import format_metrics, matched_rules, score_fundamentals
from app.llm.commentary import generate_commentary
from app.market.providers.base import MarketDataProvider
from app.schemas import UnavailableResponse

logger = structlog.get_logger()

_DEFAULT_COMMENTARY = "Fundamental analysis complete."

_COMMENTARY_PROMPT = (
    "Generate a brief 1-2 sentence insight for {ticker} based on: "
    "AI Score: {score}/100, ROE: {roe:.1f}%, Profit Margin: {margin:.1f}%, "
    "P/E: {pe:.1f}, Debt/Equity: {de:.2f}."
)

# Yahoo Finance info keys for each scored ratio
_INFO_KEYS = {
    "eps": "trailingEps",
    "pe_ratio": "trailingPE",
    "roe": "returnOnEquity",
    "debt_to_equity": "debtToEquity",
    "profit_margin": "profitMargins",
    "dividend_yield": "dividendYield",
    "revenue_growth": "revenueGrowth",
    "earnings_growth": "earningsGrowth",
}

MOCK_INPUT = FundamentalsInput(
    eps=5.80,
    pe_ratio=24.50,
    roe=0.185,
    debt_to_equity=0.65,
    profit_margin=0.173,
    dividend_yield=0.0125,
    revenue_growth=0.125,
    earnings_growth=0.152,
)


def _numeric(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)


def fundamentals_input_from_info(info: dict) -> FundamentalsInput:
    return FundamentalsInput(**{field: _numeric(info.get(key)) for field, key in _INFO_KEYS.items()})


class FundamentalsService:
    def __init__(self, provider: MarketDataProvider, llm: BaseChatModel | None) -> None:
        self._provider = provider
        self._llm = llm

    async def get_fundamentals(self, ticker: str) -> FundamentalsReport | UnavailableResponse:
        logger.info("fundamentals_get", ticker=ticker)

        try:
            info = await self._provider.get_company_info(ticker)
        except UpstreamUnavailableError as exc:
            logger.warning("fundamentals_using_mock", ticker=ticker, error=exc.message)
            return self._mock_report(ticker)
        except UpstreamMalformedError as exc:
            logger.warning("fundamentals_malformed", ticker=ticker, error=exc.message)
            return UnavailableResponse(ticker=ticker, error=exc.message)

        inputs = fundamentals_input_from_info(info)
        return await self.build_report(ticker, inputs)

    async def build_report(self, ticker: str, inputs: FundamentalsInput) -> FundamentalsReport:
        result = score_fundamentals(inputs)
        prompt = _COMMENTARY_PROMPT.format(
            ticker=ticker,
            score=result.score,
            roe=inputs.value("roe") * 100,
            margin=inputs.value("profit_margin") * 100,
            pe=inputs.value("pe_ratio"),
            de=inputs.value("debt_to_equity"),
        )
        commentary = await generate_commentary(
            self._llm, prompt, _DEFAULT_COMMENTARY, ticker=ticker, feature="fundamentals"
        )

        logger.info("fundamentals_scored", ticker=ticker, score=result.score, tier=result.tier)
        return FundamentalsReport(
            ticker=ticker,
            ai_score=result.score,
            score_color=result.tier,
            metrics=format_metrics(inputs),
            radar_data=result.radar_metrics,
            matched_rules=[rule.description for rule in matched_rules(inputs)],
            ai_commentary=commentary,
        )

    def _mock_report(self, ticker: str) -> FundamentalsReport:
        result = score_fundamentals(MOCK_INPUT)
        return FundamentalsReport(
            ticker=ticker,
            ai_score=result.score,
            score_color=result.tier,
            metrics=format_metrics(MOCK_INPUT),
            radar_data=result.radar_metrics,
            matched_rules=[rule.description for rule in matched_rules(MOCK_INPUT)],
            ai_commentary=(
                f"{ticker} demonstrates strong fundamentals with an AI score of "
                f"{result.score}/100. The company shows robust ROE and healthy profit "
                "margins, indicating efficient capital allocation and strong operational "
                "performance."
            ),
            is_mock_data=True,
        )
