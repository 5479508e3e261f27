from app.financials.schemas import CompanyFinancials
from app.fundamentals.schemas import FundamentalsReport
from app.news.schemas import NewsReport
from app.ownership.schemas import OwnershipReport
from app.prediction.schemas import PredictionResponse
from app.schemas import CamelModel, UnavailableResponse


class StockReport(CamelModel):
    """Prediction plus every auxiliary section that could be fetched.

    A section is None when its fetch failed; its name is then listed in
    ``unavailable_sections``.
    """

    ticker: str
    prediction: PredictionResponse
    financials: CompanyFinancials | UnavailableResponse | None = None
    fundamentals: FundamentalsReport | UnavailableResponse | None = None
    news: NewsReport | None = None
    ownership: OwnershipReport | UnavailableResponse | None = None
    unavailable_sections: list[str] = []
