# domain/exceptions.py
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from domain.validation import ValidationMismatch


class LoadEggsError(Exception):
    pass


class ConfigurationError(LoadEggsError):
    """Invalid builder input, base URL or plan file. Raised before any request is sent."""


class TransportError(LoadEggsError):
    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class FormNotFound(LoadEggsError):
    def __init__(self, selector: str):
        super().__init__(f"form not found: {selector}")
        self.selector = selector


class FieldNotFound(LoadEggsError):
    def __init__(self, field_name: str):
        super().__init__(f"form field not found: {field_name}")
        self.field_name = field_name


class ValidationFailed(LoadEggsError):
    def __init__(self, mismatch: "ValidationMismatch"):
        super().__init__(mismatch.message)
        self.mismatch = mismatch
