import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from app.exceptions import AppError
from app.llm.commentary import message_text
from app.market.charting import DEFAULT_CHART_WINDOW, chart_window
from app.market.indicators import compute_indicators
from app.market.momentum import compute_momentum
from app.market.providers.base import MarketDataProvider
from app.market.schemas import IndicatorBundle, MomentumSummary, PriceSeries, SeriesMeta
from app.prediction.parsing import Fallback, ParseResult, fallback_payload, parse_prediction
from app.prediction.prompts import SYSTEM_PROMPT, build_analysis_prompt
from app.prediction.schemas import PredictionResponse, PredictionSource

logger = structlog.get_logger()


class PredictionService:
    def __init__(
        self,
        provider: MarketDataProvider,
        llm: BaseChatModel | None,
        history_period: str = "6mo",
        chart_days: int = DEFAULT_CHART_WINDOW,
    ) -> None:
        self._provider = provider
        self._llm = llm
        self._history_period = history_period
        self._chart_days = chart_days

    async def predict(self, ticker: str, chart_days: int | None = None) -> PredictionResponse:
        logger.info("prediction_start", ticker=ticker)

        try:
            series = await self._provider.get_price_series(ticker, self._history_period)
        except AppError as exc:
            logger.error("prediction_price_data_error", ticker=ticker, error=exc.message)
            raise AppError("Unable to fetch stock data", code=exc.code) from exc

        return await self.analyze(series, chart_days)

    async def analyze(
        self, series: PriceSeries, chart_days: int | None = None
    ) -> PredictionResponse:
        """Compute the numeric bundle for a series and merge in the model's prediction.

        ``chart_days`` falls back to the window the service was built with.
        """
        ticker = series.ticker
        current_price = series.last_close
        indicators = compute_indicators(series.closes)
        momentum = compute_momentum(series)

        result = await self._ask_model(ticker, current_price, indicators, momentum)
        if isinstance(result, Fallback):
            logger.warning("prediction_fallback", ticker=ticker, reason=result.reason)
            source = PredictionSource.fallback
        else:
            source = PredictionSource.model

        logger.info(
            "prediction_complete",
            ticker=ticker,
            source=source,
            rsi=round(indicators.rsi14, 2),
        )
        return PredictionResponse(
            ticker=ticker,
            current_price=current_price,
            meta=series.meta or SeriesMeta(company_name=ticker),
            prediction=result.payload,
            prediction_source=source,
            indicators=indicators,
            momentum=momentum,
            chart_data=chart_window(series, chart_days or self._chart_days),
        )

    async def _ask_model(
        self,
        ticker: str,
        current_price: float,
        indicators: IndicatorBundle,
        momentum: MomentumSummary,
    ) -> ParseResult:
        if self._llm is None:
            return Fallback(fallback_payload(current_price), "model not configured")

        prompt = build_analysis_prompt(ticker, current_price, indicators, momentum)
        try:
            response = await self._llm.ainvoke(
                [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)]
            )
        except Exception as exc:
            logger.error("prediction_llm_error", ticker=ticker, error=str(exc))
            return Fallback(fallback_payload(current_price), f"model call failed: {exc}")

        return parse_prediction(message_text(response.content), current_price)
