# domain/forms.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

# field name -> literal (entity-decoded) value; missing fields are missing keys
ExtractedForm = Dict[str, str]

# Drupal marks forms with both attributes; either one identifies the form.
FORM_SELECTOR_ATTRIBUTES: Tuple[str, ...] = ("id", "data-drupal-selector")


@dataclass(frozen=True)
class FormQuery:
    selector: str
    fields: Tuple[str, ...] = ()
