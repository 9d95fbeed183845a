"""Logging configuration for DollForge.

The compositor runs once per animation tick, so most of what it logs is
DEBUG chatter tagged with the tick number.  ``setup_logging`` wires the
``dollforge`` root logger; ``get_logger`` hands out module loggers and
``tick_logger`` wraps one so every record carries the current tick.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from collections.abc import MutableMapping
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER = "dollforge"
DEFAULT_FORMAT = "%(levelname)-5s | %(name)-20s | %(message)s"
VERBOSE_FORMAT = "%(asctime)s | %(levelname)-5s | %(name)-20s | %(message)s"
_SETUP_LOCK = threading.Lock()


class JsonFormatter(logging.Formatter):
    """One JSON object per line, including the tick number when present."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        tick = getattr(record, "tick", None)
        if tick is not None:
            payload["tick"] = tick
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class TickAdapter(logging.LoggerAdapter):
    """Prefixes messages with ``[tick N]`` and exposes ``tick`` on the record."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        tick = (self.extra or {}).get("tick")
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("tick", tick)
        kwargs["extra"] = extra
        return f"[tick {tick}] {msg}", kwargs


def _formatter(json_logs: bool, fmt: str) -> logging.Formatter:
    return JsonFormatter() if json_logs else logging.Formatter(fmt)


def setup_logging(
    level: int = logging.INFO,
    verbose: bool = False,
    log_file: str | None = None,
    json_logs: bool = False,
) -> None:
    """Configure handlers on the ``dollforge`` root logger.

    Safe to call repeatedly: the stderr handler and any file handler for
    the same path are reused instead of stacked.

    Args:
        level: Logging level (default: INFO).
        verbose: Include timestamps in console output.
        log_file: Optional path that also receives every record.
        json_logs: Emit JSON lines instead of the pipe-separated format.
    """
    with _SETUP_LOCK:
        logger = logging.getLogger(ROOT_LOGGER)
        logger.setLevel(level)

        console = [
            h
            for h in logger.handlers
            if type(h) is logging.StreamHandler
            and getattr(h, "stream", None) is sys.stderr
        ]
        if console:
            stream_handler = console[0]
            for extra in console[1:]:
                logger.removeHandler(extra)
        else:
            stream_handler = logging.StreamHandler(sys.stderr)
            logger.addHandler(stream_handler)
        stream_handler.setFormatter(
            _formatter(json_logs, VERBOSE_FORMAT if verbose else DEFAULT_FORMAT)
        )

        if not log_file:
            return
        target = os.path.abspath(str(log_file))
        for handler in logger.handlers:
            if (
                isinstance(handler, logging.FileHandler)
                and handler.baseFilename == target
            ):
                file_handler = handler
                break
        else:
            file_handler = logging.FileHandler(target)
            logger.addHandler(file_handler)
        file_handler.setFormatter(_formatter(json_logs, VERBOSE_FORMAT))


def get_logger(name: str) -> logging.Logger:
    """Return the ``dollforge.<name>`` logger (e.g. ``"compositor"``)."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def tick_logger(logger: logging.Logger, tick: int) -> TickAdapter:
    """Wrap *logger* so each record is tagged with animation *tick*."""
    return TickAdapter(logger, {"tick": tick})
