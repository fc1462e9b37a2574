"""Domain-specific exceptions for the intake conversation core."""

from __future__ import annotations

RETRY_MESSAGE = "Sorry, I could not process your message. Please try again."


class DomainError(Exception):
    """Base class for domain errors."""

    error: str = "domain_error"

    def __init__(self, message: str, *, error: str | None = None):
        super().__init__(message)
        if error:
            self.error = error


class ConfigurationError(DomainError):
    error = "configuration_error"


class OracleTransportError(DomainError):
    """The semantic oracle could not be reached or did not answer in time."""

    error = "oracle_unavailable"

    def __init__(self, message: str, *, purpose: str | None = None, cause: Exception | None = None):
        self.purpose = purpose
        self.cause = cause
        super().__init__(message)


class TurnFailedError(DomainError):
    """A conversation turn could not be completed; session state is unchanged."""

    error = "turn_failed"

    def __init__(self, message: str, *, session_id: str | None = None):
        super().__init__(message)
        self.session_id = session_id
        self.user_message = RETRY_MESSAGE
