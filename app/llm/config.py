from dataclasses import dataclass
from enum import StrEnum

from app.config import Settings


class LLMProvider(StrEnum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


@dataclass(frozen=True)
class LLMConfig:
    """Everything needed to build a chat model client, resolved up front."""

    provider: str
    model: str
    api_key: str
    base_url: str | None = None
    timeout: float = 30.0
    max_retries: int = 1

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMConfig":
        api_key = (
            settings.anthropic_api_key
            if settings.llm_provider == LLMProvider.ANTHROPIC
            else settings.openai_api_key
        )
        return cls(
            provider=settings.llm_provider,
            model=settings.llm_model,
            api_key=api_key,
            base_url=settings.llm_base_url or None,
            timeout=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries,
        )
