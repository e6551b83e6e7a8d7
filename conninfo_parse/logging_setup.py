"""Central logging configuration for conninfo-parse."""

from __future__ import annotations

import inspect
import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from conninfo_parse.config import get_env, settings

LOGGER_NAME = "conninfo_parse"
DEFAULT_MAX_BYTES = 1 * 1024 * 1024  # 1 MB per log file
DEFAULT_BACKUP_COUNT = 3
LOG_LEVEL_ENV_VAR = "CONNINFO_LOG_LEVEL"

_logger: Optional[logging.Logger] = None
_configured: bool = False


class TaggedLogger(logging.LoggerAdapter):
    """Logger adapter that injects a tag field for structured logs."""

    def process(self, msg, kwargs):
        extra = kwargs.get("extra", {})
        if "tag" not in extra:
            extra["tag"] = self.extra.get("tag", "GEN")
        kwargs["extra"] = extra
        return msg, kwargs


class _DefaultTagFilter(logging.Filter):
    """Give records logged without an adapter a ``tag`` so formatting never fails."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "tag"):
            record.tag = "GEN"
        return True


def _resolve_level(level: Optional[str]) -> int:
    """Translate a textual level into the numeric value logging expects."""

    candidate = str(level or get_env(LOG_LEVEL_ENV_VAR, default=settings.CONNINFO_LOG_LEVEL)).upper()
    numeric_level = logging.getLevelName(candidate)
    if isinstance(numeric_level, int):
        return numeric_level

    print(
        f"conninfo-parse logger: unknown log level '{candidate}', defaulting to WARNING.",
        file=sys.stderr,
    )
    return logging.WARNING


def _build_formatter() -> logging.Formatter:
    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] [%(tag)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    formatter.converter = time.gmtime
    return formatter


def configure_logging(
    *,
    log_path: Optional[Path] = None,
    level: Optional[str] = None,
    to_console: Optional[bool] = None,
    max_bytes: Optional[int] = None,
    backup_count: Optional[int] = None,
    force: bool = False,
) -> logging.Logger:
    """Attach handlers to the package logger.

    A rotating file handler is added when a log path is given or configured,
    a stderr stream handler when console logging is enabled. Without either,
    records are discarded through a :class:`logging.NullHandler` so that the
    CLI's stdout and stderr stay clean.
    """
    global _logger, _configured
    logger = logging.getLogger(LOGGER_NAME)

    if _configured and not force and log_path is None:
        if level is not None:
            logger.setLevel(_resolve_level(level))
        return logger

    if force or _configured:
        for h in list(logger.handlers):
            h.close()
            logger.removeHandler(h)
        _configured = False
        _logger = None

    logger.setLevel(_resolve_level(level))
    formatter = _build_formatter()
    tag_filter = _DefaultTagFilter()

    resolved_path = log_path if log_path is not None else get_env("CONNINFO_LOG_FILE")
    if resolved_path:
        resolved_path = Path(resolved_path)
        try:
            resolved_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                resolved_path,
                maxBytes=max_bytes or DEFAULT_MAX_BYTES,
                backupCount=backup_count or DEFAULT_BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            file_handler.addFilter(tag_filter)
            logger.addHandler(file_handler)
        except OSError as exc:
            print(
                f"conninfo-parse logger: unable to access log file {resolved_path}: {exc}",
                file=sys.stderr,
            )

    if to_console is None:
        to_console = bool(get_env("CONNINFO_LOG_TO_CONSOLE", default=False))
    if to_console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        stream_handler.addFilter(tag_filter)
        logger.addHandler(stream_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    logger.propagate = False

    _configured = True
    _logger = logger
    return logger


def get_logger(tag: str | None = None) -> TaggedLogger:
    """Return a tagged logger, configuring it on first access."""
    global _logger, _configured

    if tag is None:
        frame = inspect.stack()[1]
        module = inspect.getmodule(frame[0])
        module_name = getattr(module, "__name__", "unknown")
        tag = get_tag_for_module(module_name)

    base_logger = _logger if _configured and _logger else configure_logging()
    return TaggedLogger(base_logger, {"tag": tag})


# Default tag map per module keyword
TAG_MAP = {
    "uri_decoder": "URI",
    "kv_decoder": "KV",
    "resolver": "RESOLVE",
    "parser": "PARSE",
    "formatters": "RENDER",
    "cli": "CLI",
}


def get_tag_for_module(module_name: str) -> str:
    """Infer a logging tag from the module name."""
    module_name = module_name.lower()
    for key, tag in TAG_MAP.items():
        if key in module_name:
            return tag
    return "GEN"


def reset_logging() -> None:
    """Tear down handlers so tests can reconfigure the logger cleanly."""

    global _configured, _logger
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    _configured = False
    _logger = None
