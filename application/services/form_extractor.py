# application/services/form_extractor.py
"""
Find forms in a page and read the values needed to resubmit them.

    form = find_form(page.text, "user-login-form")
    values = extract_values(form, ["form_build_id", "form_id"])

Forms are matched by id="..." or data-drupal-selector="..."; when several
forms share the selector, the first one in the document wins. Nothing found
means None (or a missing key) plus a warning, never an exception; use
require_form() / require_value() where a missing element must be fatal.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterable, Iterator, List, Optional

from application.ports.logger import LoggerPort
from application.ports.loguru_logger import LoguruLogger
from application.services.entity_matcher import (
    LEADING_ATTRIBUTES,
    MARKUP_FLAGS,
    attribute_value,
    compile_pattern,
    decode_entities,
    find_tag_body,
)
from domain.exceptions import FieldNotFound, FormNotFound
from domain.forms import FORM_SELECTOR_ATTRIBUTES, ExtractedForm, FormQuery

_VALUE_ELEMENT = r"<(?:input|button)" + LEADING_ATTRIBUTES + r"\s+name\s*=\s*([\"'])(?-i:%(name)s)\1[^>]*>"
_TEXTAREA_ELEMENT = (
    r"<textarea" + LEADING_ATTRIBUTES + r"\s+name\s*=\s*([\"'])(?-i:%(name)s)\1[^>]*>(.*?)</textarea\s*>"
)

# BigPipe placeholders: JSON command lists inside these script tags
_DRUPAL_AJAX_SCRIPT = re.compile(
    r"<script\b[^>]*\btype\s*=\s*[\"']application/vnd\.drupal-ajax[\"'][^>]*>(.*?)</script\s*>",
    MARKUP_FLAGS,
)


def _logger(logger: Optional[LoggerPort]) -> LoggerPort:
    return logger if logger is not None else LoguruLogger()


def _match_form(body: str, selector: str) -> Optional[str]:
    return find_tag_body(body, "form", FORM_SELECTOR_ATTRIBUTES, selector)


def _match_value(form_body: str, field_name: str) -> Optional[str]:
    m = compile_pattern(_VALUE_ELEMENT, name=field_name).search(form_body)
    if m:
        value = attribute_value(m.group(0), "value")
        # an input without a value attribute submits an empty string
        return "" if value is None else value

    m = compile_pattern(_TEXTAREA_ELEMENT, name=field_name).search(form_body)
    if m:
        return decode_entities(m.group(2))
    return None


def find_form(body: str, selector: str, logger: Optional[LoggerPort] = None) -> Optional[str]:
    """Inner markup of the form identified by ``selector``, or None."""
    form = _match_form(body, selector)
    if form is None:
        _logger(logger).warning("form.not_found", selector=selector)
    return form


def extract_value(form_body: str, field_name: str, logger: Optional[LoggerPort] = None) -> Optional[str]:
    """Entity-decoded value of ``field_name`` inside ``form_body``, or None."""
    value = _match_value(form_body, field_name)
    if value is None:
        _logger(logger).warning("form.field_not_found", field=field_name)
    return value


def extract_values(
    form_body: str,
    field_names: Iterable[str],
    logger: Optional[LoggerPort] = None,
) -> ExtractedForm:
    values: ExtractedForm = {}
    for name in field_names:
        value = extract_value(form_body, name, logger=logger)
        if value is not None:
            values[name] = value
    return values


def extract_form(body: str, query: FormQuery, logger: Optional[LoggerPort] = None) -> Optional[ExtractedForm]:
    form = find_form(body, query.selector, logger=logger)
    if form is None:
        return None
    return extract_values(form, query.fields, logger=logger)


def require_form(body: str, selector: str) -> str:
    form = _match_form(body, selector)
    if form is None:
        raise FormNotFound(selector)
    return form


def require_value(form_body: str, field_name: str) -> str:
    value = _match_value(form_body, field_name)
    if value is None:
        raise FieldNotFound(field_name)
    return value


def _iter_ajax_commands(payload: str, logger: LoggerPort) -> Iterator[Dict[str, Any]]:
    stripped = payload.strip()
    if stripped.startswith("["):
        sources: List[str] = [stripped]
    else:
        sources = [m.group(1) for m in _DRUPAL_AJAX_SCRIPT.finditer(payload)]

    for source in sources:
        try:
            commands = json.loads(source)
        except ValueError as e:
            logger.warning("form.ajax_payload_undecodable", error=str(e))
            continue
        if isinstance(commands, dict):
            commands = [commands]
        if not isinstance(commands, list):
            continue
        for command in commands:
            if isinstance(command, dict):
                yield command


def decode_embedded_form(
    ajax_payload: str,
    selector: str,
    logger: Optional[LoggerPort] = None,
) -> Optional[str]:
    """
    Form delivered JSON-escaped inside an AJAX response or a BigPipe
    placeholder replacement.

    ``ajax_payload`` is either the bare JSON command list or a page containing
    <script type="application/vnd.drupal-ajax"> blocks. The markup carried in
    each command's "data" member is decoded by the JSON parser and searched
    with the same rules as find_form(); the returned body is plain HTML that
    extract_value() reads directly.
    """
    log = _logger(logger)
    for command in _iter_ajax_commands(ajax_payload, log):
        data = command.get("data")
        if not isinstance(data, str):
            continue
        form = _match_form(data, selector)
        if form is not None:
            return form
    log.warning("form.embedded_not_found", selector=selector)
    return None


def extract_updated_build_id(
    ajax_payload: str,
    old_build_id: str,
    logger: Optional[LoggerPort] = None,
) -> Optional[str]:
    """
    New form_build_id announced by an ``update_build_id`` AJAX command.
    Drupal rotates the build id after some AJAX interactions; the old one is
    then rejected on submit.
    """
    log = _logger(logger)
    for command in _iter_ajax_commands(ajax_payload, log):
        if command.get("command") == "update_build_id" and command.get("old") == old_build_id:
            new = command.get("new")
            if isinstance(new, str):
                return new
    log.warning("form.build_id_update_not_found", old_build_id=old_build_id)
    return None
