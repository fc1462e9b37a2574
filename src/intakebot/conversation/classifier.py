"""Intent classification for the first message of a conversation."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field

from intakebot.conversation.prompts import MAX_TOKENS, build_classification_prompt
from intakebot.conversation.schema import DEFAULT_PROBLEM_TYPE, known_problem_types
from intakebot.observability.logging import get_logger
from intakebot.oracle.parsing import parse_json_object
from intakebot.oracle.protocols import SemanticOracle

logger = get_logger(__name__)

CLASSIFICATION_FAILED = "classification failed"
UNCLASSIFIED_REASON = "Unable to classify"

_CONFIDENCE_WORDS = {"high": 90, "medium": 70, "low": 50}


class IntentClassification(BaseModel):
    """Result of classifying a user's opening message."""

    primary_intent: str = Field(description="Problem category or 'general'")
    confidence: int = Field(default=0, ge=0, le=100)
    suggested_backend: Optional[str] = None
    reasoning: str = ""

    @classmethod
    def failed(cls) -> "IntentClassification":
        return cls(
            primary_intent=DEFAULT_PROBLEM_TYPE, confidence=0, reasoning=CLASSIFICATION_FAILED
        )


def _coerce_confidence(raw: Any) -> int:
    # The oracle sometimes answers "high"/"medium" or 0-1 floats instead of 0-100.
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, (int, float)):
        value = float(raw)
        if 0 < value <= 1 and isinstance(raw, float):
            value *= 100
        return max(0, min(100, round(value)))
    if isinstance(raw, str):
        word = raw.strip().lower()
        if word in _CONFIDENCE_WORDS:
            return _CONFIDENCE_WORDS[word]
        try:
            value = float(word.rstrip("%"))
        except ValueError:
            return 0
        return max(0, min(100, round(value)))
    return 0


class IntentClassifier:
    """Stateless classifier; never raises for malformed oracle output."""

    def __init__(self, oracle: SemanticOracle, *, history_lines: int = 10) -> None:
        self._oracle = oracle
        self.history_lines = history_lines

    async def classify(
        self, user_message: str, history: Sequence[str] = ()
    ) -> IntentClassification:
        window = list(history)[-self.history_lines :] if self.history_lines else []
        prompt = build_classification_prompt(user_message, window)
        text = await self._oracle.infer(
            prompt, purpose="classify", max_tokens=MAX_TOKENS["classify"]
        )
        result = self.parse(text)
        logger.info(
            "intent_classified",
            intent=result.primary_intent,
            confidence=result.confidence,
        )
        return result

    @staticmethod
    def parse(text: str) -> IntentClassification:
        data = parse_json_object(text)
        if data is None:
            logger.warning("oracle_parse_failed", purpose="classify")
            return IntentClassification.failed()

        intent = data.get("primaryIntent")
        if not isinstance(intent, str) or intent not in known_problem_types():
            intent = DEFAULT_PROBLEM_TYPE

        backend = data.get("suggestedBackend")
        reasoning = data.get("reasoning")
        if not isinstance(reasoning, str) or not reasoning:
            reasoning = UNCLASSIFIED_REASON
        return IntentClassification(
            primary_intent=intent,
            confidence=_coerce_confidence(data.get("confidence")),
            suggested_backend=backend if isinstance(backend, str) and backend else None,
            reasoning=reasoning,
        )
