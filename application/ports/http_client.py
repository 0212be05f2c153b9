# application/ports/http_client.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Optional


@dataclass(frozen=True)
class HttpHistoryItem:
    status: int
    url: str
    location: Optional[str]


@dataclass(frozen=True)
class HttpResponse:
    status: int
    url: str  # final URL, after redirects were followed
    text: str
    headers: Dict[str, str] = field(default_factory=dict)
    request_url: str = ""
    encoding: Optional[str] = None
    history: Optional[List[HttpHistoryItem]] = None

    @property
    def redirected(self) -> bool:
        return bool(self.request_url) and self.url != self.request_url


class HttpClientPort(ABC):
    """
    One simulated browser session. Implementations keep cookies between calls
    and raise domain.exceptions.TransportError when no response was received.
    """

    @abstractmethod
    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        form_list: Optional[List[Tuple[str, str]]] = None,
        allow_redirects: Optional[bool] = None,
    ) -> HttpResponse:
        ...
