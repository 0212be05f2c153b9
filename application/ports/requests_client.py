# application/ports/requests_client.py
from __future__ import annotations

import requests
from typing import Dict, List, Tuple, Optional

from application.ports.http_client import HttpClientPort, HttpResponse, HttpHistoryItem
from domain.exceptions import TransportError


class RequestsSessionHttpClient(HttpClientPort):
    def __init__(self, base_headers: Optional[Dict[str, str]] = None, timeout_sec: int = 20):
        self._session = requests.Session()
        self._base_headers = base_headers or {}
        self._timeout = timeout_sec

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        form_list: Optional[List[Tuple[str, str]]] = None,
        allow_redirects: Optional[bool] = None,
    ) -> HttpResponse:
        merged = dict(self._base_headers)
        if headers:
            merged.update(headers)

        # requests follows redirects by default; None keeps that
        follow = True if allow_redirects is None else bool(allow_redirects)

        try:
            resp = self._session.request(
                method=method.upper(),
                url=url,
                headers=merged,
                data=form_list,  # list of tuples keeps repeated keys
                timeout=self._timeout,
                allow_redirects=follow,
            )
        except requests.RequestException as e:
            raise TransportError(f"{url}: no response from server: {e}", url=url) from e

        history_items: List[HttpHistoryItem] = []
        for h in resp.history or []:
            history_items.append(
                HttpHistoryItem(
                    status=h.status_code,
                    url=str(h.url),
                    location=h.headers.get("Location"),
                )
            )

        # the prepared URL of the first hop, normalised the same way as resp.url
        first = resp.history[0] if resp.history else resp
        request_url = str(first.request.url) if first.request is not None else url

        return HttpResponse(
            status=resp.status_code,
            url=str(resp.url),
            text=resp.text,
            headers=dict(resp.headers),
            request_url=request_url,
            encoding=resp.encoding,
            history=history_items,
        )

    def close(self) -> None:
        self._session.close()
