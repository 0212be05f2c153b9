# domain/page.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class AssetFetchFailure:
    url: str
    status: Optional[int] = None
    error: Optional[str] = None

    def describe(self) -> str:
        if self.status is not None:
            return f"{self.url}: status {self.status}"
        return f"{self.url}: {self.error}"


@dataclass(frozen=True)
class AssetLoadReport:
    urls: Tuple[str, ...] = ()
    succeeded: int = 0
    failures: Tuple[AssetFetchFailure, ...] = ()

    @property
    def attempted(self) -> int:
        return len(self.urls)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class PageFetchResult:
    url: str
    request_url: str
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    text: str = ""
    asset_urls: Tuple[str, ...] = ()
