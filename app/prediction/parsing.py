"""Turn a free-text model reply into a ``PredictionPayload``.

The reply is untrusted: it may wrap the JSON in prose or code fences, use
out-of-range numbers, or contain no JSON at all. ``parse_prediction`` never
raises; it returns ``Parsed`` when the first JSON object in the reply is a
usable prediction and ``Fallback`` with a deterministic payload otherwise.
"""

import json
from dataclasses import dataclass

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.prediction.schemas import PredictionPayload, Sentiment

FALLBACK_NARRATIVE = "Analysis unavailable"
FALLBACK_RECOMMENDATION = "Hold — insufficient data"
FALLBACK_PRICE_FACTOR = 1.01


@dataclass(frozen=True)
class Parsed:
    payload: PredictionPayload


@dataclass(frozen=True)
class Fallback:
    payload: PredictionPayload
    reason: str


ParseResult = Parsed | Fallback


class _ModelReply(BaseModel):
    """The reply shape requested in the prompt, with the payload's own names accepted too."""

    predicted_price: float = Field(
        validation_alias=AliasChoices("prediction", "predictedPrice", "predicted_price"),
        allow_inf_nan=False,
    )
    confidence: float = Field(allow_inf_nan=False)
    sentiment: Sentiment
    sentiment_score: float = Field(
        default=0.0,
        validation_alias=AliasChoices("sentimentScore", "sentiment_score"),
        allow_inf_nan=False,
    )
    narrative: str = Field(
        default=FALLBACK_NARRATIVE,
        validation_alias=AliasChoices("technicalAnalysis", "narrative", "technical_analysis"),
    )
    recommendation: str = FALLBACK_RECOMMENDATION
    key_signals: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("keySignals", "key_signals")
    )

    @field_validator("sentiment", mode="before")
    @classmethod
    def normalize_sentiment(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, value: float) -> float:
        return max(0.0, min(1.0, value))

    @field_validator("sentiment_score")
    @classmethod
    def clamp_sentiment_score(cls, value: float) -> float:
        return max(-1.0, min(1.0, value))

    @field_validator("key_signals", mode="before")
    @classmethod
    def stringify_signals(cls, value: object) -> object:
        if isinstance(value, list):
            return [str(item) for item in value if item is not None]
        return value


def extract_first_json_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` substring, ignoring braces inside strings."""
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def fallback_payload(current_price: float) -> PredictionPayload:
    return PredictionPayload(
        predicted_price=current_price * FALLBACK_PRICE_FACTOR,
        confidence=0.5,
        sentiment=Sentiment.neutral,
        sentiment_score=0.0,
        narrative=FALLBACK_NARRATIVE,
        recommendation=FALLBACK_RECOMMENDATION,
        key_signals=[],
    )


def parse_prediction(text: str, current_price: float) -> ParseResult:
    candidate = extract_first_json_object(text)
    if candidate is None:
        return Fallback(fallback_payload(current_price), "no JSON object in reply")

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        return Fallback(fallback_payload(current_price), f"invalid JSON: {exc.msg}")

    try:
        reply = _ModelReply.model_validate(data)
    except PydanticValidationError as exc:
        return Fallback(
            fallback_payload(current_price), f"unexpected reply shape: {exc.error_count()} errors"
        )

    return Parsed(PredictionPayload(**reply.model_dump()))
