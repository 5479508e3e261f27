"""Base models shared by every feature package."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Immutable model serialized with camelCase keys, accepting either casing on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TickerRequest(CamelModel):
    ticker: str = Field(min_length=1, max_length=20)

    @field_validator("ticker")
    @classmethod
    def normalize_ticker(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("ticker must not be blank")
        return value


class UnavailableResponse(CamelModel):
    ticker: str
    unavailable: bool = True
    error: str
