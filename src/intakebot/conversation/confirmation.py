"""Interpretation of a user's reply to a confirmation summary.

The oracle's verdict is a handful of booleans plus free-text details rather
than one label, because agreement and additions routinely arrive together
("yes, and can we also add a blog?"). :func:`resolve_outcome` collapses it into
the single outcome the orchestrator acts on.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel

from intakebot.conversation.prompts import MAX_TOKENS, build_confirmation_analysis_prompt
from intakebot.observability.logging import get_logger
from intakebot.oracle.parsing import parse_json_object
from intakebot.oracle.protocols import SemanticOracle

logger = get_logger(__name__)


class ConfirmationAnalysis(BaseModel):
    agreed: bool = False
    needs_discussion: bool = False
    has_additions: bool = False
    addition_details: str = ""
    clarification_needed: str = ""

    @classmethod
    def unclassifiable(cls, user_response: str) -> "ConfirmationAnalysis":
        """Treat the reply as a correction whose content is the reply itself."""
        return cls(clarification_needed=user_response)


class ConfirmationOutcome(str, Enum):
    AGREED = "agreed"
    NEEDS_DISCUSSION = "needs_discussion"
    ADDITIONS = "additions"
    CORRECTION = "correction"


def resolve_outcome(analysis: ConfirmationAnalysis) -> ConfirmationOutcome:
    """Apply the fixed precedence: agreement, discussion, additions, correction."""
    if analysis.agreed and not analysis.has_additions:
        return ConfirmationOutcome.AGREED
    if analysis.needs_discussion:
        return ConfirmationOutcome.NEEDS_DISCUSSION
    if analysis.has_additions:
        return ConfirmationOutcome.ADDITIONS
    return ConfirmationOutcome.CORRECTION


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "y", "1"}
    if isinstance(value, (int, float)):
        return value == 1
    return False


def _as_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


class ConfirmationAnalyzer:
    def __init__(self, oracle: SemanticOracle) -> None:
        self._oracle = oracle

    async def analyze(self, user_response: str) -> ConfirmationAnalysis:
        prompt = build_confirmation_analysis_prompt(user_response)
        text = await self._oracle.infer(prompt, purpose="confirm", max_tokens=MAX_TOKENS["confirm"])
        analysis = self.parse(text, user_response)
        logger.info("confirmation_analyzed", outcome=resolve_outcome(analysis).value)
        return analysis

    @staticmethod
    def parse(text: str, user_response: str) -> ConfirmationAnalysis:
        data = parse_json_object(text)
        if data is None:
            logger.warning("oracle_parse_failed", purpose="confirm")
            return ConfirmationAnalysis.unclassifiable(user_response)
        return ConfirmationAnalysis(
            agreed=_as_bool(data.get("agreed")),
            needs_discussion=_as_bool(data.get("needsDiscussion")),
            has_additions=_as_bool(data.get("hasAdditions")),
            addition_details=_as_text(data.get("additionDetails")),
            clarification_needed=_as_text(data.get("clarificationNeeded")),
        )
