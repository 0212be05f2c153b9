# infrastructure/url/base_url_resolver.py
from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from domain.exceptions import ConfigurationError


@dataclass(frozen=True)
class BaseUrlResolver:
    base_url: str

    def __post_init__(self) -> None:
        parts = urlsplit(self.base_url or "")
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigurationError(f"invalid base url: {self.base_url!r}")

    def resolve_url(self, url: str) -> str:
        if url.startswith("http://") or url.startswith("https://"):
            return url
        return self.base_url.rstrip("/") + "/" + url.lstrip("/")
