from __future__ import annotations

from typing import Any, Dict, List, Tuple

import pytest

from application.ports.logger import LoggerPort
from application.services.virtual_user import VirtualUser
from fake_http_client import FakeHttpClient
from infrastructure.url.base_url_resolver import BaseUrlResolver

BASE_URL = "https://umami.example"


class RecordingLogger(LoggerPort):
    """Keeps (level, event, fields) tuples; bound loggers share the list."""

    def __init__(self, records: List[Tuple[str, str, Dict[str, Any]]] = None, bound: Dict[str, Any] = None):
        self.records = records if records is not None else []
        self.bound = bound or {}

    def _log(self, level: str, event: str, fields: Dict[str, Any]) -> None:
        payload = dict(self.bound)
        payload.update(fields)
        self.records.append((level, event, payload))

    def debug(self, event: str, **fields: Any) -> None:
        self._log("debug", event, fields)

    def info(self, event: str, **fields: Any) -> None:
        self._log("info", event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._log("warning", event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._log("error", event, fields)

    def bind(self, **fields: Any) -> "RecordingLogger":
        merged = dict(self.bound)
        merged.update(fields)
        return RecordingLogger(records=self.records, bound=merged)

    def events(self, level: str = None) -> List[str]:
        return [e for lv, e, _ in self.records if level is None or lv == level]


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def http() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def user(http, recording_logger) -> VirtualUser:
    return VirtualUser(http=http, url_resolver=BaseUrlResolver(BASE_URL), logger=recording_logger)
