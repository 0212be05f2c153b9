# domain/params.py
"""
Login / search submission parameters.

Both carry Drupal defaults so a script only states what differs:

    LoginParams.builder().username("editor").password("s3cret").build()
    SearchParams.builder().keys("pizza").title("Search").build()
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from domain.exceptions import ConfigurationError
from domain.validation import ValidationSpec


def _require(value: str, label: str) -> str:
    if not value:
        raise ConfigurationError(f"{label} must not be empty")
    return value


@dataclass(frozen=True)
class LoginParams:
    username: str = "username"
    password: str = "password"
    url: str = "user/login"
    # expected post-login title; None means "the username"
    title: Optional[str] = None
    form_selector: str = "user-login-form"
    login_page_validation: Optional[ValidationSpec] = None
    logged_in_validation: Optional[ValidationSpec] = None

    @staticmethod
    def builder() -> "LoginParamsBuilder":
        return LoginParamsBuilder()

    @property
    def expected_title(self) -> str:
        return self.title if self.title is not None else self.username


class LoginParamsBuilder:
    def __init__(self) -> None:
        self._fields: Dict[str, Any] = {}

    def username(self, username: str) -> "LoginParamsBuilder":
        self._fields["username"] = username
        return self

    def password(self, password: str) -> "LoginParamsBuilder":
        self._fields["password"] = password
        return self

    def url(self, url: str) -> "LoginParamsBuilder":
        self._fields["url"] = _require(url, "login url")
        return self

    def title(self, title: str) -> "LoginParamsBuilder":
        self._fields["title"] = title
        return self

    def form_selector(self, selector: str) -> "LoginParamsBuilder":
        self._fields["form_selector"] = _require(selector, "form selector")
        return self

    def login_page_validation(self, spec: ValidationSpec) -> "LoginParamsBuilder":
        self._fields["login_page_validation"] = spec
        return self

    def logged_in_validation(self, spec: ValidationSpec) -> "LoginParamsBuilder":
        self._fields["logged_in_validation"] = spec
        return self

    def build(self) -> LoginParams:
        return LoginParams(**self._fields)


@dataclass(frozen=True)
class SearchParams:
    keys: str = ""
    url: str = "search"
    submit: str = "Search"
    # expected results-page title; None means "don't check"
    title: Optional[str] = None
    form_selector: str = "search-form"
    form_values: Tuple[str, ...] = ("form_build_id", "form_id")
    search_page_validation: Optional[ValidationSpec] = None
    results_page_validation: Optional[ValidationSpec] = None

    @staticmethod
    def builder() -> "SearchParamsBuilder":
        return SearchParamsBuilder()


class SearchParamsBuilder:
    def __init__(self) -> None:
        self._fields: Dict[str, Any] = {}

    def keys(self, keys: str) -> "SearchParamsBuilder":
        self._fields["keys"] = keys
        return self

    def url(self, url: str) -> "SearchParamsBuilder":
        self._fields["url"] = _require(url, "search url")
        return self

    def submit(self, submit: str) -> "SearchParamsBuilder":
        self._fields["submit"] = _require(submit, "submit label")
        return self

    def title(self, title: str) -> "SearchParamsBuilder":
        self._fields["title"] = title
        return self

    def form_selector(self, selector: str) -> "SearchParamsBuilder":
        self._fields["form_selector"] = _require(selector, "form selector")
        return self

    def form_values(self, names: Iterable[str]) -> "SearchParamsBuilder":
        self._fields["form_values"] = tuple(names)
        return self

    def search_page_validation(self, spec: ValidationSpec) -> "SearchParamsBuilder":
        self._fields["search_page_validation"] = spec
        return self

    def results_page_validation(self, spec: ValidationSpec) -> "SearchParamsBuilder":
        self._fields["results_page_validation"] = spec
        return self

    def build(self) -> SearchParams:
        return SearchParams(**self._fields)
