from datetime import date, datetime

import structlog

from app.exceptions import UpstreamMalformedError, UpstreamUnavailableError
from app.financials.schemas import CompanyFinancials, EarningsQuarter
from app.market.providers.base import MarketDataProvider
from app.schemas import UnavailableResponse

logger = structlog.get_logger()

_NA = "N/A"
_EARNINGS_QUARTERS = 4


def _raw(value: object) -> float | None:
    """Numeric value or None; zero counts as missing, as the source reports it."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value) or None


def format_currency(value: float | None) -> str:
    if not value:
        return _NA
    if value >= 1e12:
        return f"${value / 1e12:.2f}T"
    if value >= 1e9:
        return f"${value / 1e9:.2f}B"
    if value >= 1e6:
        return f"${value / 1e6:.2f}M"
    return f"${value:.2f}"


def format_number(value: float | None) -> str:
    return _NA if value is None else f"{value:.2f}"


def format_percent(value: float | None) -> str:
    return _NA if value is None else f"{value * 100:.2f}%"


def format_quarter(value: object) -> str:
    if isinstance(value, datetime | date):
        return f"Q{(value.month - 1) // 3 + 1} {value.year}"
    return str(value) if value else _NA


def build_financials(ticker: str, info: dict, earnings: list[dict]) -> CompanyFinancials:
    market_cap = _raw(info.get("marketCap"))
    revenue = _raw(info.get("totalRevenue"))
    net_income = _raw(info.get("netIncomeToCommon"))
    eps = _raw(info.get("trailingEps"))
    operating_cf = _raw(info.get("operatingCashflow"))
    free_cf = _raw(info.get("freeCashflow"))
    target = _raw(info.get("targetMeanPrice"))
    book_value = _raw(info.get("bookValue"))

    history = [
        EarningsQuarter(
            quarter=format_quarter(row.get("quarter")),
            eps_actual=format_number(row.get("eps_actual")),
            eps_actual_raw=row.get("eps_actual"),
            eps_estimate=format_number(row.get("eps_estimate")),
            eps_estimate_raw=row.get("eps_estimate"),
            surprise=format_percent(row.get("surprise_percent")),
        )
        for row in earnings[:_EARNINGS_QUARTERS]
    ]

    return CompanyFinancials(
        ticker=ticker,
        market_cap=format_currency(market_cap),
        market_cap_raw=market_cap,
        revenue=format_currency(revenue),
        revenue_raw=revenue,
        net_income=format_currency(net_income),
        net_income_raw=net_income,
        profit_margin=format_percent(_raw(info.get("profitMargins"))),
        pe_ratio=format_number(_raw(info.get("trailingPE"))),
        eps=format_number(eps),
        eps_raw=eps,
        debt_to_equity=format_number(_raw(info.get("debtToEquity"))),
        current_ratio=format_number(_raw(info.get("currentRatio"))),
        operating_cash_flow=format_currency(operating_cf),
        operating_cash_flow_raw=operating_cf,
        free_cash_flow=format_currency(free_cf),
        free_cash_flow_raw=free_cf,
        revenue_growth=format_percent(_raw(info.get("revenueGrowth"))),
        earnings_growth=format_percent(_raw(info.get("earningsGrowth"))),
        target_price=format_number(target),
        target_price_raw=target,
        recommendation_key=info.get("recommendationKey") or _NA,
        book_value=format_number(book_value),
        book_value_raw=book_value,
        price_to_book=format_number(_raw(info.get("priceToBook"))),
        dividend_yield=format_percent(_raw(info.get("dividendYield"))),
        beta=format_number(_raw(info.get("beta"))),
        earnings_history=history,
    )


def mock_financials(ticker: str) -> CompanyFinancials:
    quarters = [
        ("Q1 2025", 1.45, 1.38, "5.07%"),
        ("Q4 2024", 1.52, 1.48, "2.70%"),
        ("Q3 2024", 1.38, 1.35, "2.22%"),
        ("Q2 2024", 1.42, 1.40, "1.43%"),
    ]
    return CompanyFinancials(
        ticker=ticker,
        market_cap="$45.2B",
        market_cap_raw=45_200_000_000,
        revenue="$18.5B",
        revenue_raw=18_500_000_000,
        net_income="$3.2B",
        net_income_raw=3_200_000_000,
        profit_margin="17.30%",
        pe_ratio="24.50",
        eps="5.80",
        eps_raw=5.80,
        debt_to_equity="0.65",
        current_ratio="1.85",
        operating_cash_flow="$4.5B",
        operating_cash_flow_raw=4_500_000_000,
        free_cash_flow="$3.8B",
        free_cash_flow_raw=3_800_000_000,
        revenue_growth="12.50%",
        earnings_growth="15.20%",
        target_price="185.00",
        target_price_raw=185.00,
        recommendation_key="buy",
        book_value="42.50",
        book_value_raw=42.50,
        price_to_book="3.80",
        dividend_yield="1.25%",
        beta="1.15",
        earnings_history=[
            EarningsQuarter(
                quarter=quarter,
                eps_actual=f"{actual:.2f}",
                eps_actual_raw=actual,
                eps_estimate=f"{estimate:.2f}",
                eps_estimate_raw=estimate,
                surprise=surprise,
            )
            for quarter, actual, estimate, surprise in quarters
        ],
        is_mock_data=True,
    )


class FinancialsService:
    def __init__(self, provider: MarketDataProvider) -> None:
        self._provider = provider

    async def get_financials(self, ticker: str) -> CompanyFinancials | UnavailableResponse:
        logger.info("financials_get", ticker=ticker)

        try:
            info = await self._provider.get_company_info(ticker)
            earnings = await self._provider.get_earnings_history(ticker)
        except UpstreamUnavailableError as exc:
            logger.warning("financials_using_mock", ticker=ticker, error=exc.message)
            return mock_financials(ticker)
        except UpstreamMalformedError as exc:
            logger.warning("financials_malformed", ticker=ticker, error=exc.message)
            return UnavailableResponse(ticker=ticker, error=exc.message)

        return build_financials(ticker, info, earnings)
