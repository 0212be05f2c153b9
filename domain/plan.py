# domain/plan.py
"""
Load plan domain model
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from domain.params import LoginParams, SearchParams
from domain.validation import ValidationSpec


@dataclass(frozen=True)
class PageCheck:
    path: str
    validate: ValidationSpec = field(default_factory=ValidationSpec)
    load_assets: bool = True


@dataclass(frozen=True)
class LoadPlan:
    base_url: str
    pages: List[PageCheck] = field(default_factory=list)
    users: int = 1
    iterations: int = 1
    timeout_sec: int = 20
    max_asset_workers: int = 4
    headers: Dict[str, str] = field(default_factory=dict)
    login: Optional[LoginParams] = None
    search: Optional[SearchParams] = None
