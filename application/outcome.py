# application/outcome.py
from dataclasses import dataclass
from typing import Optional

from domain.page import AssetLoadReport, PageFetchResult
from domain.validation import ValidationResult


@dataclass(frozen=True)
class PageOutcome:
    ok: bool
    page: Optional[PageFetchResult] = None
    validation: Optional[ValidationResult] = None
    assets: Optional[AssetLoadReport] = None
    error_message: Optional[str] = None

    @property
    def text(self) -> str:
        return self.page.text if self.page is not None else ""
