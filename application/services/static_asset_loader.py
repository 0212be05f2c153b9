# application/services/static_asset_loader.py
"""
Fetch the same-origin images, scripts and stylesheets a browser would load
after receiving a page.

Failures are collected, never raised: a broken image must not abort the
simulated user. The caller decides whether AssetLoadReport.failed matters.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple
from urllib.parse import urljoin, urlsplit

from application.ports.http_client import HttpClientPort
from application.ports.logger import LoggerPort
from application.ports.loguru_logger import LoguruLogger
from application.services.entity_matcher import attribute_value, iter_tags
from domain.exceptions import TransportError
from domain.page import AssetFetchFailure, AssetLoadReport

_ASSET_TAGS = ("img", "script", "link")


def _origin(url: str) -> Tuple[str, str]:
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    port = parts.port or {"http": 80, "https": 443}.get(scheme)
    return scheme, f"{(parts.hostname or '').lower()}:{port}"


def _is_stylesheet(tag: str, href: str) -> bool:
    rel = (attribute_value(tag, "rel") or "").lower().split()
    return "stylesheet" in rel or ".css" in urlsplit(href).path.lower()


def _asset_reference(tag: str) -> Optional[str]:
    name = tag[1:].split(None, 1)[0].rstrip("/>").lower()
    if name == "link":
        href = attribute_value(tag, "href")
        if href and _is_stylesheet(tag, href):
            return href
        return None
    return attribute_value(tag, "src")


def _resolve_same_origin(base_url: str, base_origin: Tuple[str, str], tag: str) -> Optional[str]:
    ref = _asset_reference(tag)
    if not ref:
        return None
    ref = ref.strip()
    if not ref or ref.lower().startswith(("data:", "javascript:", "#")):
        return None
    url = urljoin(base_url, ref)
    if _origin(url) != base_origin:
        return None
    return url.split("#", 1)[0]


def discover_static_assets(body: str, base_url: str, logger: Optional[LoggerPort] = None) -> List[str]:
    """
    Absolute same-origin asset URLs referenced by ``body``, in document order.

    Root-relative ("/x.png") and absolute ("https://host/x.png") references
    are kept when they resolve to the origin of ``base_url``; anything on
    another host (CDNs, trackers) is skipped. Values are entity-decoded, so
    "/a.js?x=1&amp;y=2" is fetched as "/a.js?x=1&y=2". A URL referenced
    twice is listed once, at its first position. References urllib cannot
    parse (bad port, broken IPv6 host) are skipped with a warning.
    """
    log = logger if logger is not None else LoguruLogger()
    base_origin = _origin(base_url)
    urls: List[str] = []
    seen = set()
    for tag in iter_tags(body, _ASSET_TAGS):
        try:
            url = _resolve_same_origin(base_url, base_origin, tag)
        except ValueError as e:
            log.warning("asset.unparseable_url", tag=tag, error=str(e))
            continue
        if url is None or url in seen:
            continue
        seen.add(url)
        urls.append(url)
    return urls


def _fetch_asset(http: HttpClientPort, url: str) -> Optional[AssetFetchFailure]:
    try:
        resp = http.request("GET", url)
    except TransportError as e:
        return AssetFetchFailure(url=url, error=str(e))
    if resp.status >= 400:
        return AssetFetchFailure(url=url, status=resp.status)
    return None


def load_static_assets(
    http: HttpClientPort,
    body: str,
    base_url: str,
    max_workers: int = 4,
    logger: Optional[LoggerPort] = None,
) -> AssetLoadReport:
    """
    GET every asset discover_static_assets() finds, ``max_workers`` at a time.

    Completion order is irrelevant: results are read back in discovery order,
    so the same body always yields the same report layout. No retries.
    """
    log = logger if logger is not None else LoguruLogger()
    urls = discover_static_assets(body, base_url, logger=log)
    if not urls:
        return AssetLoadReport()

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(urls)))) as executor:
        outcomes = list(executor.map(lambda u: _fetch_asset(http, u), urls))

    failures = tuple(f for f in outcomes if f is not None)
    for failure in failures:
        log.warning("asset.fetch_failed", url=failure.url, status=failure.status, error=failure.error)

    report = AssetLoadReport(
        urls=tuple(urls),
        succeeded=len(urls) - len(failures),
        failures=failures,
    )
    log.debug("asset.loaded", attempted=report.attempted, succeeded=report.succeeded, failed=report.failed)
    return report
