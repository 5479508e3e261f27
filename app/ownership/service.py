import structlog
from langchain_core.language_models import BaseChatModel

from app.exceptions import UpstreamMalformedError, UpstreamUnavailableError
from app.llm.commentary import generate_commentary
from app.market.providers.base import MarketDataProvider
from app.ownership.schemas import OwnershipReport, PieSlice, Shareholding
from app.schemas import UnavailableResponse

logger = structlog.get_logger()

_DEFAULT_COMMENTARY = "Ownership analysis complete."

_COMMENTARY_PROMPT = (
    "Generate 1 sentence insight for {ticker}: Insiders: {insiders:.1f}%, "
    "Institutions: {institutions:.1f}%, Retail: {retail:.1f}%. "
    "Focus on what this mix means for volatility or confidence."
)

_SLICES = (
    ("insiders", "Insiders/Promoters", "#3b82f6"),
    ("institutions", "Institutional Investors", "#10b981"),
    ("retail", "Retail Investors", "#f59e0b"),
)


def build_shareholding(holders: dict[str, float]) -> tuple[Shareholding, float]:
    """Percent split from yfinance's fractional holder breakdown, plus float held."""
    insiders = holders.get("insidersPercentHeld", 0.0) * 100
    institutions = holders.get("institutionsPercentHeld", 0.0) * 100
    float_held = holders.get("institutionsFloatPercentHeld", 0.0) * 100
    retail = max(0.0, 100 - insiders - institutions)
    shareholding = Shareholding(
        insiders=round(insiders, 2),
        institutions=round(institutions, 2),
        retail=round(retail, 2),
    )
    return shareholding, round(float_held, 2)


def pie_data(shareholding: Shareholding) -> list[PieSlice]:
    return [
        PieSlice(name=name, value=getattr(shareholding, field), color=color)
        for field, name, color in _SLICES
    ]


def mock_ownership(ticker: str) -> OwnershipReport:
    shareholding = Shareholding(insiders=15.50, institutions=65.30, retail=19.20)
    return OwnershipReport(
        ticker=ticker,
        shareholding=shareholding,
        pie_data=pie_data(shareholding),
        float_held_by_institutions=68.50,
        ai_commentary=(
            f"{ticker} shows strong institutional confidence with 65.3% institutional "
            "ownership, indicating professional investor trust. Healthy retail "
            "participation at 19.2% provides market liquidity."
        ),
        is_mock_data=True,
    )


class OwnershipService:
    def __init__(self, provider: MarketDataProvider, llm: BaseChatModel | None) -> None:
        self._provider = provider
        self._llm = llm

    async def get_ownership(self, ticker: str) -> OwnershipReport | UnavailableResponse:
        logger.info("ownership_get", ticker=ticker)

        try:
            holders = await self._provider.get_major_holders(ticker)
        except UpstreamUnavailableError as exc:
            logger.warning("ownership_using_mock", ticker=ticker, error=exc.message)
            return mock_ownership(ticker)
        except UpstreamMalformedError as exc:
            logger.warning("ownership_malformed", ticker=ticker, error=exc.message)
            return UnavailableResponse(ticker=ticker, error=exc.message)

        shareholding, float_held = build_shareholding(holders)
        commentary = await generate_commentary(
            self._llm,
            _COMMENTARY_PROMPT.format(
                ticker=ticker,
                insiders=shareholding.insiders,
                institutions=shareholding.institutions,
                retail=shareholding.retail,
            ),
            _DEFAULT_COMMENTARY,
            ticker=ticker,
            feature="ownership",
        )

        return OwnershipReport(
            ticker=ticker,
            shareholding=shareholding,
            pie_data=pie_data(shareholding),
            float_held_by_institutions=float_held,
            ai_commentary=commentary,
        )
