"""Tagged logging shortcuts for the application and CLI layers."""

from __future__ import annotations

import inspect
import logging

from conninfo_parse.logging_setup import get_logger, get_tag_for_module

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
}


def _caller_tag() -> str:
    for frame_info in inspect.stack()[1:]:
        module_name = frame_info.frame.f_globals.get("__name__", "unknown")
        if module_name != __name__:
            return get_tag_for_module(module_name)
    return "GEN"


def log_message(msg: str, level: str = "INFO", tag: str | None = None) -> None:
    """Write ``msg`` to the package logger under ``tag``.

    Without a tag, one is inferred from the calling module's name. An
    unrecognised level is logged at INFO.
    """
    numeric_level = _LEVELS.get(str(level).upper(), logging.INFO)
    get_logger(tag or _caller_tag()).log(numeric_level, msg)


def debug(msg: str, tag: str | None = None) -> None:
    log_message(msg, "DEBUG", tag)


def info(msg: str, tag: str | None = None) -> None:
    log_message(msg, "INFO", tag)


def warn(msg: str, tag: str | None = None) -> None:
    log_message(msg, "WARNING", tag)
