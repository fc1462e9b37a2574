"""Protocol interface for the semantic oracle.

The oracle turns natural language into structured judgments or synthesized
text. Its answers are probabilistic: they may be unparseable, incomplete, or
simply wrong, and every consumer must define a safe default for that case.
Only transport problems (timeouts, connectivity, upstream errors) surface as
:class:`~intakebot.errors.OracleTransportError`.
"""

from __future__ import annotations

from typing import Literal, Protocol

OraclePurpose = Literal["classify", "extract", "confirm", "question", "summary"]


class SemanticOracle(Protocol):
    async def infer(
        self, prompt: str, *, purpose: OraclePurpose, max_tokens: int | None = None
    ) -> str: ...
