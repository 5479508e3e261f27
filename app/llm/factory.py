from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from app.exceptions import AppError
from app.llm.config import LLMConfig, LLMProvider


class LLMFactory:
    @staticmethod
    def create(config: LLMConfig, **kwargs: object) -> BaseChatModel:
        if not config.api_key:
            raise AppError(
                f"API key for LLM provider '{config.provider}' is not configured",
                code="LLM_CONFIG_ERROR",
            )

        match config.provider:
            case LLMProvider.OPENAI:
                return ChatOpenAI(  # type: ignore[call-arg]
                    model=config.model,
                    api_key=config.api_key,  # type: ignore[arg-type]
                    base_url=config.base_url,
                    timeout=config.timeout,
                    max_retries=config.max_retries,
                    **kwargs,
                )

            case LLMProvider.ANTHROPIC:
                return ChatAnthropic(  # type: ignore[call-arg]
                    model=config.model,  # type: ignore[arg-type]
                    api_key=config.api_key,  # type: ignore[arg-type]
                    base_url=config.base_url,
                    timeout=config.timeout,
                    max_retries=config.max_retries,
                    **kwargs,
                )

            case _:
                raise AppError(f"Unknown LLM provider: '{config.provider}'", code="LLM_CONFIG_ERROR")
