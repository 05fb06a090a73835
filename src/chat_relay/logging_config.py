from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from loguru import logger

# Records emitted outside a request carry this placeholder uid.
NO_UID = "-"

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> <level>{level:<8}</level> "
    "<magenta>[{extra[uid]}]</magenta> <cyan>{name}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | uid={extra[uid]} | {name}:{line} - {message}"

# Stdlib loggers from the web server and HTTP client, forwarded into loguru.
_FORWARDED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx", "httpcore")


class _InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(exception=record.exc_info).log(level, record.getMessage())


class ConsoleLogConsumer:
    def register(self, level: str) -> int:
        return logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT)

    def describe(self, level: str) -> str:
        return f"console ({level})"


class FileLogConsumer:
    """Rotating log file; ``serialize`` writes one JSON record per line."""

    def __init__(
        self,
        path: str = "logs/chat_relay.log",
        rotation: str = "10 MB",
        retention: int = 3,
        serialize: bool = False,
    ):
        self._path = path
        self._rotation = rotation
        self._retention = retention
        self._serialize = serialize

    def register(self, level: str) -> int:
        Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        return logger.add(
            self._path,
            level=level,
            format=_FILE_FORMAT,
            rotation=self._rotation,
            retention=self._retention,
            serialize=self._serialize,
        )

    def describe(self, level: str) -> str:
        kind = "json" if self._serialize else "text"
        return f"file ({self._path}, {kind}, {level})"


_CONSUMER_TYPES: dict[str, type] = {
    "console": ConsoleLogConsumer,
    "file": FileLogConsumer,
}


def _forward_stdlib_logging(level: str, noisy_level: str) -> None:
    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in _FORWARDED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = []
        std_logger.propagate = True
        std_logger.setLevel(noisy_level if name.startswith(("httpx", "httpcore")) else level)


def setup_logging(
    level: str = "INFO",
    consumers: list[dict[str, Any]] | None = None,
    *,
    noisy_level: str = "WARNING",
) -> list[str]:
    """Route relay, uvicorn and httpx logs to the configured consumers.

    ``consumers=None`` means a single console sink; an empty list disables
    output. Every record carries the ``uid`` bound by the chat pipeline, or
    ``NO_UID`` outside a request. Returns a description of each sink.
    """
    if consumers is None:
        consumers = [{"type": "console"}]

    # Validate every entry before replacing the current sinks.
    planned: list[tuple[Any, str]] = []
    for config in consumers:
        sink_type = config.get("type", "")
        cls = _CONSUMER_TYPES.get(sink_type)
        if cls is None:
            raise ValueError(f"Unknown log consumer type: {sink_type!r}")
        options = {k: v for k, v in config.items() if k not in ("type", "level")}
        planned.append((cls(**options), str(config.get("level", level)).upper()))

    logger.remove()
    logger.configure(extra={"uid": NO_UID})

    descriptions: list[str] = []
    for consumer, sink_level in planned:
        consumer.register(sink_level)
        descriptions.append(consumer.describe(sink_level))

    _forward_stdlib_logging(level.upper(), noisy_level.upper())
    return descriptions
