# application/services/validator.py
"""
Check a received response against a ValidationSpec.

Checks run as a fixed pipeline, cheapest first: status, redirect, headers,
title, body texts. Status and headers need no body parsing and usually tell
server errors apart from content mismatches, so they are reported first.
Each check is a plain function over the same read-only response and can be
exercised on its own.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from application.ports.http_client import HttpResponse
from application.ports.logger import LoggerPort
from application.ports.loguru_logger import LoguruLogger
from application.services.entity_matcher import contains_text, decode_entities, get_title
from domain.validation import ValidationMismatch, ValidationResult, ValidationSpec

Check = Callable[[HttpResponse, ValidationSpec], List[ValidationMismatch]]


def _header_lookup(headers: Dict[str, str], name: str) -> Optional[str]:
    # header names are case-insensitive on the wire
    wanted = name.lower()
    for key, value in (headers or {}).items():
        if key.lower() == wanted:
            return value
    return None


def _title_contains(title: Optional[str], text: str) -> bool:
    if title is None:
        return False
    needle = text.lower()
    return needle in title.lower() or needle in decode_entities(title).lower()


def check_status(response: HttpResponse, spec: ValidationSpec) -> List[ValidationMismatch]:
    if spec.status is None or response.status == spec.status:
        return []
    return [
        ValidationMismatch(
            check="status",
            expected=spec.status,
            observed=response.status,
            message=f"{response.url}: response status != {spec.status}: {response.status}",
        )
    ]


def check_redirect(response: HttpResponse, spec: ValidationSpec) -> List[ValidationMismatch]:
    if spec.redirect is None or response.redirected == spec.redirect:
        return []
    if spec.redirect:
        message = f"{response.request_url}: did not redirect"
    else:
        message = f"{response.request_url}: redirected unexpectedly to {response.url}"
    return [
        ValidationMismatch(
            check="redirect",
            expected=spec.redirect,
            observed=response.redirected,
            message=message,
        )
    ]


def check_headers(response: HttpResponse, spec: ValidationSpec) -> List[ValidationMismatch]:
    mismatches: List[ValidationMismatch] = []
    for header in spec.headers:
        observed = _header_lookup(response.headers, header.name)
        if observed is None:
            mismatches.append(
                ValidationMismatch(
                    check="header",
                    expected=(header.name, header.value),
                    observed=None,
                    message=f"{response.url}: header not included in response: {header.name}",
                )
            )
        elif header.value is not None and observed != header.value:
            mismatches.append(
                ValidationMismatch(
                    check="header",
                    expected=(header.name, header.value),
                    observed=(header.name, observed),
                    message=f'{response.url}: header does not contain expected value: "{header.name}: {header.value}"',
                )
            )
    for name in spec.not_headers:
        observed = _header_lookup(response.headers, name)
        if observed is not None:
            mismatches.append(
                ValidationMismatch(
                    check="header",
                    expected=(name, None),
                    observed=(name, observed),
                    message=f"{response.url}: header included in response: {name}",
                )
            )
    return mismatches


def check_title(response: HttpResponse, spec: ValidationSpec) -> List[ValidationMismatch]:
    if spec.title is None and spec.not_title is None:
        return []
    title = get_title(response.text or "")
    mismatches: List[ValidationMismatch] = []
    if spec.title is not None and not _title_contains(title, spec.title):
        mismatches.append(
            ValidationMismatch(
                check="title",
                expected=spec.title,
                observed=title,
                message=f"{response.url}: title not found: {spec.title}",
            )
        )
    if spec.not_title is not None and _title_contains(title, spec.not_title):
        mismatches.append(
            ValidationMismatch(
                check="title",
                expected=None,
                observed=title,
                message=f"{response.url}: title found: {spec.not_title}",
            )
        )
    return mismatches


def check_texts(response: HttpResponse, spec: ValidationSpec) -> List[ValidationMismatch]:
    body = response.text or ""
    mismatches: List[ValidationMismatch] = []
    for text in spec.texts:
        if not contains_text(body, text):
            mismatches.append(
                ValidationMismatch(
                    check="text",
                    expected=text,
                    observed=None,
                    message=f"{response.url}: text not found on page: {text}",
                )
            )
    for text in spec.not_texts:
        if contains_text(body, text):
            mismatches.append(
                ValidationMismatch(
                    check="text",
                    expected=None,
                    observed=text,
                    message=f"{response.url}: text found on page: {text}",
                )
            )
    return mismatches


CHECKS: Tuple[Check, ...] = (
    check_status,
    check_redirect,
    check_headers,
    check_title,
    check_texts,
)


def validate(
    response: HttpResponse,
    spec: ValidationSpec,
    fail_fast: bool = True,
    logger: Optional[LoggerPort] = None,
) -> ValidationResult:
    """
    Run CHECKS in order. With fail_fast (the default) the result holds only the
    first mismatch; otherwise every mismatch, still in pipeline order.
    """
    mismatches: List[ValidationMismatch] = []
    for check in CHECKS:
        found = check(response, spec)
        if not found:
            continue
        if fail_fast:
            mismatches.append(found[0])
            break
        mismatches.extend(found)

    if mismatches:
        log = logger if logger is not None else LoguruLogger()
        for mismatch in mismatches:
            log.info("validation.mismatch", check=mismatch.check, detail=mismatch.message)
    return ValidationResult(mismatches=tuple(mismatches))


def validate_all(
    response: HttpResponse,
    spec: ValidationSpec,
    logger: Optional[LoggerPort] = None,
) -> ValidationResult:
    return validate(response, spec, fail_fast=False, logger=logger)
