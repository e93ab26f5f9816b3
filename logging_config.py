from __future__ import annotations

import logging
import os
import time
from logging.config import dictConfig
from typing import Iterable, Sequence

from settings import read_log_level

CONTEXT_KEYS = (
    "record_id",
    "city",
    "stage",
    "object_key",
    "status_code",
    "period",
    "count",
    "skipped",
    "reason",
    "elapsed_ms",
)

# Third-party loggers that are chatty at INFO and DEBUG.
_QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "httpx", "httpcore")

_configured = False


class ContextualFormatter(logging.Formatter):
    """Appends ``key=value`` pairs for any known context passed via ``extra``."""

    converter = time.gmtime

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        context_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._context_keys: Sequence[str] = tuple(context_keys or CONTEXT_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        pairs = [
            f"{key}={_render(value)}"
            for key in self._context_keys
            if (value := getattr(record, key, None)) is not None
        ]
        return f"{message} | {' '.join(pairs)}" if pairs else message


def _render(value: object) -> str:
    text = str(value)
    return f'"{text}"' if " " in text else text


def _running_in_lambda() -> bool:
    return bool(os.getenv("AWS_LAMBDA_FUNCTION_NAME"))


def configure_logging(level: str | int | None = None) -> None:
    """Install the contextual formatter on the root logger once per process.

    Inside Lambda the runtime already stamps each line with a time and request
    id, so the timestamp is left out of the format there.
    """
    global _configured
    if _configured:
        return

    log_level = level if level is not None else read_log_level()
    fmt = "%(levelname)s | %(name)s | %(message)s"
    if not _running_in_lambda():
        fmt = "%(asctime)sZ | " + fmt

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": "logging_config.ContextualFormatter",
                    "fmt": fmt,
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "context_keys": list(CONTEXT_KEYS),
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "contextual",
                }
            },
            "loggers": {
                name: {"level": "WARNING"} for name in _QUIET_LOGGERS
            },
            "root": {"handlers": ["console"], "level": log_level},
        }
    )

    _configured = True
