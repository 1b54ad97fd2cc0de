from __future__ import annotations

import logging
import os
import re
from typing import Literal

import coloredlogs  # type: ignore[import]

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

LOGLEVEL_ENV_VAR = "MACFLEET_LOGLEVEL"

DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
DEFAULT_DATE_FORMAT = "%H:%M:%S"

QUIET_LOGGERS = ("urllib3", "charset_normalizer")

_BEARER = re.compile(r"(Bearer\s+)[^\s'\"]+")


class BearerTokenFilter(logging.Filter):
    """Masks bearer tokens in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = _BEARER.sub(r"\1***", message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


_token_filter = BearerTokenFilter()


def setup_logging(level: LogLevel | None = None) -> None:
    resolved = (
        level
        or os.environ.get(LOGLEVEL_ENV_VAR)
        or os.environ.get("LOGLEVEL", "INFO")
    ).upper()

    coloredlogs.install(
        level=resolved,
        fmt=DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT,
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(_token_filter)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
