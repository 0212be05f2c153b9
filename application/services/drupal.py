# application/services/drupal.py
"""
Drupal log-in and search, built from the page fetcher and the form extractor.

Both follow the same sequence: fetch the page holding the form, find the
form, read its hidden build/form ids, post the submission on the same
session, validate the resulting page.
"""
from __future__ import annotations

from dataclasses import replace
from typing import List, Tuple

from application.outcome import PageOutcome
from application.services.form_extractor import extract_values, find_form
from application.services.page_fetcher import fetch_page, validate_and_load_static_assets
from application.services.virtual_user import VirtualUser
from domain.exceptions import TransportError
from domain.params import LoginParams, SearchParams
from domain.validation import ValidationSpec

LOGIN_FORM_VALUES = ("form_build_id", "form_id")


def _fail(user: VirtualUser, event: str, outcome: PageOutcome, message: str) -> PageOutcome:
    user.logger.warning(event, error=message)
    return replace(outcome, ok=False, error_message=message)


def _read_form(
    user: VirtualUser,
    outcome: PageOutcome,
    url: str,
    selector: str,
    names: Tuple[str, ...],
) -> Tuple[List[Tuple[str, str]], str]:
    """Values of ``names`` from the ``selector`` form, or an error message."""
    form = find_form(outcome.text, selector, logger=user.logger)
    if form is None:
        return [], f"{url}: no {selector} on page"
    values = extract_values(form, names, logger=user.logger)
    for name in names:
        if name not in values:
            return [], f"{url}: no {name} on page"
    return [(name, values[name]) for name in names], ""


def login(user: VirtualUser, params: LoginParams) -> PageOutcome:
    """
    Log in through the standard user login form.

    The submission must be answered with a redirect; the page it lands on is
    then validated with ``params.logged_in_validation`` or, by default, by
    checking that the title contains ``params.expected_title``.
    """
    login_page = fetch_page(user, params.url, params.login_page_validation)
    if not login_page.ok:
        return _fail(user, "login.failed", login_page, login_page.error_message or f"{params.url}: login page failed")

    hidden, error = _read_form(user, login_page, params.url, params.form_selector, LOGIN_FORM_VALUES)
    if error:
        return _fail(user, "login.failed", login_page, error)

    form_list = [("name", params.username), ("pass", params.password)] + hidden + [("op", "Log in")]
    try:
        response = user.post_form(params.url, form_list)
    except TransportError as e:
        return _fail(user, "login.failed", PageOutcome(ok=False), str(e))

    if not response.redirected:
        outcome = validate_and_load_static_assets(user, response, load_assets=False)
        return _fail(user, "login.failed", outcome, f"{response.url}: login failed (check username and password)")

    spec = params.logged_in_validation or ValidationSpec.builder().title(params.expected_title).build()
    outcome = validate_and_load_static_assets(user, response, spec)
    if not outcome.ok:
        user.logger.warning("login.failed", error=outcome.error_message)
    return outcome


def search(user: VirtualUser, params: SearchParams) -> PageOutcome:
    """
    Submit the site search form with ``params.keys``.

    Results are validated with ``params.results_page_validation`` or, when
    only ``params.title`` is set, by the results page title.
    """
    search_page = fetch_page(user, params.url, params.search_page_validation)
    if not search_page.ok:
        return _fail(user, "search.failed", search_page, search_page.error_message or f"{params.url}: search page failed")

    hidden, error = _read_form(user, search_page, params.url, params.form_selector, params.form_values)
    if error:
        return _fail(user, "search.failed", search_page, error)

    form_list = [("keys", params.keys), ("op", params.submit)] + hidden
    try:
        response = user.post_form(params.url, form_list)
    except TransportError as e:
        return _fail(user, "search.failed", PageOutcome(ok=False), str(e))

    spec = params.results_page_validation
    if spec is None and params.title is not None:
        spec = ValidationSpec.builder().title(params.title).build()
    outcome = validate_and_load_static_assets(user, response, spec)
    if not outcome.ok:
        user.logger.warning("search.failed", error=outcome.error_message)
    return outcome
