import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from conninfo_parse import logging_setup  # noqa: E402
from conninfo_parse.domain import keywords  # noqa: E402

CONNINFO_SETTINGS_VARS = (
    "CONNINFO_LOG_LEVEL",
    "CONNINFO_LOG_TO_CONSOLE",
    "CONNINFO_LOG_FILE",
    "CONNINFO_OUTPUT",
    "CONNINFO_DELIMITER",
    "CONNINFO_USE_ENVIRONMENT",
    "CONNINFO_USE_DEFAULTS",
)


@pytest.fixture(autouse=True)
def clean_pg_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's PG* and CONNINFO_* variables out of every test."""

    for spec in keywords.keywords():
        if spec.env_var:
            monkeypatch.delenv(spec.env_var, raising=False)
    for name in CONNINFO_SETTINGS_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def fresh_logging():
    logging_setup.reset_logging()
    yield
    logging_setup.reset_logging()
