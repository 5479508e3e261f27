"""Short free-text insights from the chat model, with a fixed default on any failure."""

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage

logger = structlog.get_logger()


def message_text(content: object) -> str:
    """Flatten a chat message's content to plain text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return str(content)


async def generate_commentary(
    llm: BaseChatModel | None, prompt: str, default: str, **log_context: object
) -> str:
    if llm is None:
        return default

    try:
        response = await llm.ainvoke([HumanMessage(content=prompt)])
    except Exception as exc:
        logger.warning("commentary_llm_error", error=str(exc), **log_context)
        return default

    text = message_text(response.content).strip()
    return text or default
