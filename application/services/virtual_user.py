# application/services/virtual_user.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Protocol, Tuple

from application.ports.http_client import HttpClientPort, HttpResponse
from application.ports.logger import LoggerPort
from application.services.redactor import mask_pairs


class UrlResolverPort(Protocol):
    base_url: str

    def resolve_url(self, url: str) -> str:
        ...


@dataclass(frozen=True)
class VirtualUser:
    """
    One simulated browser session: its own http client (and so its own
    cookies), the site it targets and a logger bound to its identity.
    Nothing here is shared between users.
    """

    http: HttpClientPort
    url_resolver: UrlResolverPort
    logger: LoggerPort
    max_asset_workers: int = 4

    @property
    def base_url(self) -> str:
        return self.url_resolver.base_url

    def resolve_url(self, url: str) -> str:
        return self.url_resolver.resolve_url(url)

    def with_logger(self, logger: LoggerPort) -> "VirtualUser":
        return replace(self, logger=logger)

    def get(self, path: str) -> HttpResponse:
        url = self.resolve_url(path)
        self.logger.debug("http.request", method="GET", url=url)
        return self.http.request("GET", url)

    def post_form(self, path: str, form_list: List[Tuple[str, str]], allow_redirects: Optional[bool] = None) -> HttpResponse:
        url = self.resolve_url(path)
        self.logger.debug("http.request", method="POST", url=url, form=mask_pairs(form_list))
        return self.http.request("POST", url, form_list=form_list, allow_redirects=allow_redirects)
