"""Requirements extraction over the full conversation transcript.

Each call re-extracts from the whole transcript; accumulating facts across
turns is left to the oracle reading the full history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from intakebot.conversation.models import Message
from intakebot.conversation.prompts import MAX_TOKENS, build_extraction_prompt
from intakebot.conversation.schema import RequirementField, get_all_fields
from intakebot.observability.logging import get_logger
from intakebot.oracle.parsing import parse_json_object
from intakebot.oracle.protocols import SemanticOracle

logger = get_logger(__name__)


@dataclass
class ExtractedRequirements:
    """Extraction outcome.

    ``data`` only ever holds present values, so merging it into stored
    requirements cannot erase something captured earlier.
    """

    data: dict[str, Any] = field(default_factory=dict)
    missing_required: list[str] = field(default_factory=list)
    readiness_score: int = 0
    completion_ready: bool = False

    @classmethod
    def zero_state(cls, required: Sequence[RequirementField]) -> "ExtractedRequirements":
        return cls(
            data={},
            missing_required=[f.key for f in required],
            readiness_score=0,
            completion_ready=False,
        )


def is_present(value: Any) -> bool:
    """False for null, blank text and empty collections; False/0 still count."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) > 0
    return True


def readiness_score(required_total: int, required_present: int) -> int:
    if required_total <= 0:
        return 0
    # rounds .5 up: 1/8 -> 13
    return (200 * required_present + required_total) // (2 * required_total)


class RequirementsExtractor:
    """Maps a transcript onto the field schema of a problem category."""

    def __init__(self, oracle: SemanticOracle) -> None:
        self._oracle = oracle

    async def extract(
        self, problem_type: str, messages: Sequence[Message]
    ) -> ExtractedRequirements:
        fields = get_all_fields(problem_type)

        if not fields:
            # Degenerate category: nothing to ask for, nothing to score.
            logger.info("requirements_schema_empty", problem_type=problem_type)
            return ExtractedRequirements(completion_ready=True)

        prompt = build_extraction_prompt(problem_type, fields, messages)
        text = await self._oracle.infer(prompt, purpose="extract", max_tokens=MAX_TOKENS["extract"])
        result = self.parse(text, fields)

        logger.info(
            "requirements_extracted",
            problem_type=problem_type,
            readiness_score=result.readiness_score,
            missing=result.missing_required,
        )
        return result

    @staticmethod
    def parse(text: str, fields: Sequence[RequirementField]) -> ExtractedRequirements:
        required = [f for f in fields if f.required]
        payload = parse_json_object(text)
        extracted = payload.get("extracted") if payload is not None else None
        if not isinstance(extracted, dict):
            logger.warning("oracle_parse_failed", purpose="extract")
            return ExtractedRequirements.zero_state(required)

        known_keys = {f.key for f in fields}
        data = {k: v for k, v in extracted.items() if k in known_keys and is_present(v)}
        missing = [f.key for f in required if f.key not in data]
        return ExtractedRequirements(
            data=data,
            missing_required=missing,
            readiness_score=readiness_score(len(required), len(required) - len(missing)),
            completion_ready=not missing,
        )
