"""Semantic oracle interface and implementations."""

from intakebot.oracle.fake import FakeOracle
from intakebot.oracle.protocols import OraclePurpose, SemanticOracle

__all__ = ["FakeOracle", "OraclePurpose", "SemanticOracle"]
