# application/services/page_fetcher.py
from __future__ import annotations

from dataclasses import replace
from typing import Optional

from application.outcome import PageOutcome
from application.ports.http_client import HttpResponse
from application.services.static_asset_loader import load_static_assets
from application.services.validator import validate
from application.services.virtual_user import VirtualUser
from domain.exceptions import TransportError
from domain.page import PageFetchResult
from domain.validation import ValidationSpec


def to_page_result(response: HttpResponse) -> PageFetchResult:
    return PageFetchResult(
        url=response.url,
        request_url=response.request_url or response.url,
        status=response.status,
        headers=dict(response.headers or {}),
        text=response.text or "",
    )


def validate_and_load_static_assets(
    user: VirtualUser,
    response: HttpResponse,
    spec: Optional[ValidationSpec] = None,
    load_assets: bool = True,
) -> PageOutcome:
    """
    Validate an already received response and, only if it passed, load the
    static assets it references. Validation stops at the first mismatch so a
    page that failed to load does not cascade into asset errors.
    """
    page = to_page_result(response)
    result = validate(response, spec or ValidationSpec.none(), logger=user.logger)
    if not result.ok:
        return PageOutcome(
            ok=False,
            page=page,
            validation=result,
            error_message=result.first.message,
        )

    if not load_assets:
        return PageOutcome(ok=True, page=page, validation=result)

    report = load_static_assets(
        user.http,
        page.text,
        response.url,
        max_workers=user.max_asset_workers,
        logger=user.logger,
    )
    page = replace(page, asset_urls=report.urls)
    return PageOutcome(ok=True, page=page, validation=result, assets=report)


def fetch_page(
    user: VirtualUser,
    path: str,
    spec: Optional[ValidationSpec] = None,
    load_assets: bool = True,
) -> PageOutcome:
    try:
        response = user.get(path)
    except TransportError as e:
        user.logger.error("page.fetch_failed", path=path, error=str(e))
        return PageOutcome(ok=False, error_message=str(e))
    return validate_and_load_static_assets(user, response, spec, load_assets=load_assets)
