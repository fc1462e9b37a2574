"""intakebot: a conversational requirements-intake assistant."""

from intakebot.app_version import get_app_version

__version__ = get_app_version()

__all__ = ["__version__"]
