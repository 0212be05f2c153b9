# infrastructure/logging/console_logger.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict

from application.ports.logger import LoggerPort


@dataclass(frozen=True)
class ConsoleLogger(LoggerPort):
    """One JSON object per line on stdout, for piping harness runs into jq."""

    bound: Dict[str, Any] = field(default_factory=dict)

    def bind(self, **fields: Any) -> "ConsoleLogger":
        merged = dict(self.bound)
        merged.update(fields)
        return ConsoleLogger(bound=merged)

    def debug(self, event: str, **fields: Any) -> None:
        self._emit("debug", event, fields)

    def info(self, event: str, **fields: Any) -> None:
        self._emit("info", event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._emit("warning", event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._emit("error", event, fields)

    def _emit(self, level: str, event: str, fields: Dict[str, Any]) -> None:
        payload = dict(self.bound)
        payload.update(fields)
        payload.setdefault("type", event)
        payload.setdefault("level", level)
        print(f"{event} {json.dumps(payload, ensure_ascii=False, default=str)}")
