from app.schemas import CamelModel


class EarningsQuarter(CamelModel):
    quarter: str
    eps_actual: str
    eps_actual_raw: float | None = None
    eps_estimate: str
    eps_estimate_raw: float | None = None
    surprise: str


class CompanyFinancials(CamelModel):
    ticker: str
    market_cap: str
    market_cap_raw: float | None = None
    revenue: str
    revenue_raw: float | None = None
    net_income: str
    net_income_raw: float | None = None
    profit_margin: str
    pe_ratio: str
    eps: str
    eps_raw: float | None = None
    debt_to_equity: str
    current_ratio: str
    operating_cash_flow: str
    operating_cash_flow_raw: float | None = None
    free_cash_flow: str
    free_cash_flow_raw: float | None = None
    revenue_growth: str
    earnings_growth: str
    target_price: str
    target_price_raw: float | None = None
    recommendation_key: str
    book_value: str
    book_value_raw: float | None = None
    price_to_book: str
    dividend_yield: str
    beta: str
    earnings_history: list[EarningsQuarter] = []
    is_mock_data: bool = False
