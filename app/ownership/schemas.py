from app.schemas import CamelModel


class Shareholding(CamelModel):
    insiders: float
    institutions: float
    retail: float


class PieSlice(CamelModel):
    name: str
    value: float
    color: str


class OwnershipReport(CamelModel):
    ticker: str
    shareholding: Shareholding
    pie_data: list[PieSlice]
    float_held_by_institutions: float
    ai_commentary: str
    is_mock_data: bool = False
