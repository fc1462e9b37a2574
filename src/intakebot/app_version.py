"""Application version helper.

Use importlib.metadata when installed, and fall back to reading pyproject.toml
when running from a source checkout.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _dist_version
from pathlib import Path

import tomllib


def _pyproject_path() -> Path:
    # src/intakebot/app_version.py -> repo root
    return Path(__file__).resolve().parents[2] / "pyproject.toml"


def get_app_version(package_name: str = "intakebot") -> str:
    try:
        return _dist_version(package_name)
    except PackageNotFoundError:
        try:
            with _pyproject_path().open("rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError):
            return "0.0.0"
        return str(data.get("project", {}).get("version", "0.0.0"))
