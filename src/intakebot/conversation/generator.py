"""Oracle-backed text for follow-up questions and confirmation summaries.

Wording is presentation only; the state machine depends on when these run,
not on what they say. Empty oracle answers fall back to fixed text.
"""

from __future__ import annotations

from typing import Any, Sequence

from intakebot.conversation.models import Message
from intakebot.conversation.prompts import MAX_TOKENS, build_question_prompt, build_summary_prompt
from intakebot.conversation.schema import RequirementField, get_all_fields
from intakebot.oracle.protocols import SemanticOracle

FALLBACK_QUESTION = "What else can you tell me about your project?"
FALLBACK_SUMMARY = "Let me confirm what I've gathered. Is this accurate?"


class ResponseGenerator:
    def __init__(self, oracle: SemanticOracle, *, history_messages: int = 6) -> None:
        self._oracle = oracle
        self.history_messages = history_messages

    def _prioritized_missing(
        self, problem_type: str, missing_keys: Sequence[str]
    ) -> list[RequirementField]:
        # Schema order is priority order.
        wanted = set(missing_keys)
        return [f for f in get_all_fields(problem_type) if f.key in wanted]

    async def next_question(
        self,
        problem_type: str,
        history: Sequence[Message],
        known: dict[str, Any],
        missing_keys: Sequence[str],
    ) -> str:
        recent = list(history)[-self.history_messages :] if self.history_messages else []
        prompt = build_question_prompt(
            problem_type, known, self._prioritized_missing(problem_type, missing_keys), recent
        )
        text = await self._oracle.infer(
            prompt, purpose="question", max_tokens=MAX_TOKENS["question"]
        )
        return text.strip() or FALLBACK_QUESTION

    async def confirmation_summary(self, problem_type: str, requirements: dict[str, Any]) -> str:
        prompt = build_summary_prompt(problem_type, requirements)
        text = await self._oracle.infer(prompt, purpose="summary", max_tokens=MAX_TOKENS["summary"])
        return text.strip() or FALLBACK_SUMMARY
