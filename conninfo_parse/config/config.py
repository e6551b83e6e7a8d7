"""
Centralised config for conninfo-parse.

Settings are read from ``CONNINFO_*`` environment variables (or a ``.env``
file) and exposed through a singleton `settings` object. The ``PG*``
variables consulted during resolution are not settings: the resolver reads
them straight from the process environment.
"""

import os
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILE = Path(__file__).resolve()

T = TypeVar("T")


class Settings(BaseSettings):
    """
    Validated runtime settings for the CLI and logging.
    """
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", case_sensitive=False
    )

    # --- LOGGING ---
    CONNINFO_LOG_LEVEL: str = "WARNING"
    CONNINFO_LOG_TO_CONSOLE: bool = False
    CONNINFO_LOG_FILE: Optional[Path] = None

    # --- OUTPUT ---
    CONNINFO_OUTPUT: str = "delimited"
    CONNINFO_DELIMITER: str = "\t"

    # --- RESOLUTION ---
    CONNINFO_USE_ENVIRONMENT: bool = True
    CONNINFO_USE_DEFAULTS: bool = True

    @field_validator("CONNINFO_LOG_LEVEL")
    @classmethod
    def normalise_log_level(cls, value: str) -> str:
        # Unknown names are left for logging_setup to report and replace.
        candidate = str(value).strip().upper()
        return "WARNING" if candidate == "WARN" else candidate

    @field_validator("CONNINFO_OUTPUT")
    @classmethod
    def normalise_output(cls, value: str) -> str:
        return str(value).strip().lower()


# Create a single, importable instance of the settings for the entire application.
# A malformed CONNINFO_* value leaves the defaults in place and is kept in
# SETTINGS_ERROR for the CLI to report.
SETTINGS_ERROR: Optional[ValidationError] = None
try:
    settings = Settings()
except ValidationError as exc:
    settings = Settings.model_construct()
    SETTINGS_ERROR = exc


def describe_settings_error(error: ValidationError) -> str:
    """Summarise a settings validation failure on one line."""
    problems = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"])
        problems.append(f"{field}: {item['msg']}")
    return "; ".join(problems)


def _to_bool(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _coerce_type(raw: str, template: Any) -> Any:
    if isinstance(template, bool):
        return _to_bool(raw)
    if isinstance(template, int) and not isinstance(template, bool):
        return int(raw)
    if isinstance(template, Path):
        return Path(raw)
    return raw


def get_env(
    name: str,
    default: T | None = None,
    *,
    parser: Callable[[str], T] | None = None,
) -> T | Any | None:
    """Return a configuration value resolving environment overrides consistently.

    The resolution order is:

    1. Explicit environment variable overrides at runtime.
    2. Typed values provided by the Pydantic ``settings`` object.
    3. The supplied ``default`` value.

    When an override is read directly from :mod:`os.environ`, ``parser`` (or the
    inferred type from ``settings``) is used to coerce the string into the
    expected type.
    """

    if name in os.environ:
        raw_value = os.environ[name]
        if parser is not None:
            return parser(raw_value)
        template = getattr(settings, name, None)
        if template is not None:
            try:
                return _coerce_type(raw_value, template)
            except (TypeError, ValueError):
                return template
        return raw_value

    value = getattr(settings, name, None)
    if value is not None:
        return value

    return default
