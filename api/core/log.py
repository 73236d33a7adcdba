"""
Process-wide logging setup.

Modules log through `logging.getLogger(__name__)`; this module only decides
where records go and how they look. Records are rendered by structlog's
`ProcessorFormatter`: JSON lines in production, a console layout for local
runs. Call `configure_logging()` once at process start (see `api/main.py`).
"""

from __future__ import annotations

import logging

import structlog

from . import config

_PRE_CHAIN = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True, key="time"),
]


def log_level() -> str:
    return config.env_str("LOG_LEVEL", "INFO").upper()


def log_format() -> str:
    return config.env_str("LOG_FORMAT", "json").lower()


def log_file() -> str | None:
    return config.env_str("LOG_FILE", "") or None


def build_formatter(fmt: str) -> logging.Formatter:
    if fmt == "text":
        processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ]
    else:
        # One object per line: time, level, logger, msg (+ exception).
        processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.EventRenamer("msg"),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_PRE_CHAIN,
        processors=processors,
    )


def configure_logging(
    *,
    level: str | None = None,
    fmt: str | None = None,
    file_path: str | None = None,
) -> None:
    formatter = build_formatter(fmt or log_format())

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    path = file_path or log_file()
    if path:
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)

    root = logging.getLogger()
    # Replace handlers so repeated calls (tests, reloads) do not duplicate output.
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    for handler in handlers:
        root.addHandler(handler)

    root.setLevel(level or log_level())
