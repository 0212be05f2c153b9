# application/services/redactor.py
from __future__ import annotations

from typing import Any, List, Tuple

# Drupal names the password field "pass"; form_token is its CSRF token
SENSITIVE_KEYS = {"pass", "password", "passwd", "form_token", "authorization", "cookie", "set-cookie"}
MASK = "********"


def mask_value(key: str, value: Any) -> Any:
    if key.lower() in SENSITIVE_KEYS and value is not None:
        return MASK
    return value


def mask_pairs(pairs: List[Tuple[str, str]]) -> List[Tuple[str, Any]]:
    return [(k, mask_value(k, v)) for k, v in pairs]
