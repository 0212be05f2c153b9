# application/ports/logger.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class LoggerPort(ABC):
    """
    Structured events: a dotted name ("form.not_found", "asset.fetch_failed",
    "step.end") plus keyword fields. Virtual users log through a bound copy
    carrying their index, so every event can be traced back to its session.
    """

    @abstractmethod
    def debug(self, event: str, **fields: Any) -> None:
        ...

    @abstractmethod
    def info(self, event: str, **fields: Any) -> None:
        ...

    @abstractmethod
    def warning(self, event: str, **fields: Any) -> None:
        ...

    @abstractmethod
    def error(self, event: str, **fields: Any) -> None:
        ...

    @abstractmethod
    def bind(self, **fields: Any) -> "LoggerPort":
        """
        Return a logger that will attach given fields to every log event.
        """
        ...
