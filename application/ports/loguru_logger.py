# application/ports/loguru_logger.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from loguru import logger

from application.ports.logger import LoggerPort


@dataclass(frozen=True)
class LoguruLogger(LoggerPort):
    """
    Forwards structured events to loguru. The event name is the message, the
    fields travel in record["extra"] so sinks can serialize them.
    """

    bound: Dict[str, Any] = field(default_factory=dict)

    def bind(self, **fields: Any) -> "LoguruLogger":
        merged = dict(self.bound)
        merged.update(fields)
        return LoguruLogger(bound=merged)

    def debug(self, event: str, **fields: Any) -> None:
        self._emit("DEBUG", event, fields)

    def info(self, event: str, **fields: Any) -> None:
        self._emit("INFO", event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._emit("WARNING", event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._emit("ERROR", event, fields)

    def _emit(self, level: str, event: str, fields: Dict[str, Any]) -> None:
        payload = dict(self.bound)
        payload.update(fields)
        # depth=2 reports the caller of debug()/info()/..., not this adapter
        logger.bind(**payload).opt(depth=2).log(level, event)
