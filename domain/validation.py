# domain/validation.py
"""
Declarative page expectations and the records produced when checking them.

A ValidationSpec only ever describes positive assertions plus the negative
ones that are modelled explicitly (not_title / not_texts / not_headers).
Anything left unset is simply not checked.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple

from domain.exceptions import ConfigurationError, ValidationFailed


@dataclass(frozen=True)
class Header:
    name: str
    value: Optional[str] = None

    @classmethod
    def named(cls, name: str) -> "Header":
        return cls(name=name)

    @classmethod
    def with_value(cls, name: str, value: str) -> "Header":
        return cls(name=name, value=value)


@dataclass(frozen=True)
class ValidationSpec:
    status: Optional[int] = None
    title: Optional[str] = None
    texts: Tuple[str, ...] = ()
    headers: Tuple[Header, ...] = ()
    redirect: Optional[bool] = None
    not_title: Optional[str] = None
    not_texts: Tuple[str, ...] = ()
    not_headers: Tuple[str, ...] = ()

    @staticmethod
    def builder() -> "ValidationSpecBuilder":
        return ValidationSpecBuilder()

    @classmethod
    def none(cls) -> "ValidationSpec":
        return cls()

    def is_empty(self) -> bool:
        return self == ValidationSpec()


def _append_unique(items: List[Any], item: Any) -> None:
    if item not in items:
        items.append(item)


class ValidationSpecBuilder:
    """Step-wise assembler; only build() hands out a (frozen) ValidationSpec."""

    def __init__(self) -> None:
        self._status: Optional[int] = None
        self._title: Optional[str] = None
        self._texts: List[str] = []
        self._headers: List[Header] = []
        self._redirect: Optional[bool] = None
        self._not_title: Optional[str] = None
        self._not_texts: List[str] = []
        self._not_headers: List[str] = []

    def status(self, code: int) -> "ValidationSpecBuilder":
        if isinstance(code, bool) or not isinstance(code, int) or not 100 <= code <= 599:
            raise ConfigurationError(f"invalid status code: {code!r}")
        self._status = code
        return self

    def title(self, title: str) -> "ValidationSpecBuilder":
        self._title = title
        return self

    def text(self, text: str) -> "ValidationSpecBuilder":
        _append_unique(self._texts, text)
        return self

    def texts(self, texts: Iterable[str]) -> "ValidationSpecBuilder":
        for text in texts:
            self.text(text)
        return self

    def header(self, name: str) -> "ValidationSpecBuilder":
        return self._add_header(Header.named(name))

    def header_value(self, name: str, value: str) -> "ValidationSpecBuilder":
        return self._add_header(Header.with_value(name, value))

    def redirect(self, redirect: bool) -> "ValidationSpecBuilder":
        self._redirect = bool(redirect)
        return self

    def not_title(self, title: str) -> "ValidationSpecBuilder":
        self._not_title = title
        return self

    def not_text(self, text: str) -> "ValidationSpecBuilder":
        _append_unique(self._not_texts, text)
        return self

    def not_header(self, name: str) -> "ValidationSpecBuilder":
        if not name:
            raise ConfigurationError("header name must not be empty")
        _append_unique(self._not_headers, name)
        return self

    def _add_header(self, header: Header) -> "ValidationSpecBuilder":
        if not header.name:
            raise ConfigurationError("header name must not be empty")
        _append_unique(self._headers, header)
        return self

    def build(self) -> ValidationSpec:
        return ValidationSpec(
            status=self._status,
            title=self._title,
            texts=tuple(self._texts),
            headers=tuple(self._headers),
            redirect=self._redirect,
            not_title=self._not_title,
            not_texts=tuple(self._not_texts),
            not_headers=tuple(self._not_headers),
        )


@dataclass(frozen=True)
class ValidationMismatch:
    check: str  # "status" | "redirect" | "header" | "title" | "text"
    expected: Any
    observed: Any
    message: str


@dataclass(frozen=True)
class ValidationResult:
    mismatches: Tuple[ValidationMismatch, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.mismatches

    @property
    def first(self) -> Optional[ValidationMismatch]:
        return self.mismatches[0] if self.mismatches else None

    def raise_for_mismatch(self) -> None:
        if self.mismatches:
            raise ValidationFailed(self.mismatches[0])
