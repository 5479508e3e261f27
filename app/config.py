from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from app.market.charting import CHART_WINDOWS, DEFAULT_CHART_WINDOW


class Settings(BaseSettings):
    model_config = {"env_prefix": "SI_", "env_file": ".env", "env_file_encoding": "utf-8"}

    llm_provider: str = Field(default="openai", pattern=r"^(openai|anthropic)$")
    llm_model: str = Field(default="gpt-4o-mini")
    llm_base_url: str = Field(default="")
    openai_api_key: str = Field(default="")
    anthropic_api_key: str = Field(default="")
    llm_timeout_seconds: float = Field(default=30.0, gt=0)
    llm_max_retries: int = Field(default=1, ge=0)

    history_period: str = Field(default="6mo")
    chart_days: int = Field(default=DEFAULT_CHART_WINDOW)
    news_limit: int = Field(default=8, ge=1, le=20)

    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    cors_origins: str = Field(default="http://localhost:5173")

    @field_validator("chart_days")
    @classmethod
    def check_chart_days(cls, value: int) -> int:
        if value not in CHART_WINDOWS:
            raise ValueError(f"chart_days must be one of {CHART_WINDOWS}")
        return value


settings = Settings()
