# infrastructure/plan/yaml_loader.py
"""
Build a LoadPlan from a YAML file.

    base_url: https://umami.example
    users: 4
    pages:
      - path: /en
        validate: {status: 200, title: Home}
    login: {username: editor, title: editor}
    search: {keys: soup, title: Search}
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from domain.exceptions import ConfigurationError
from domain.params import LoginParams, SearchParams
from domain.plan import LoadPlan, PageCheck
from domain.validation import ValidationSpec


class PlanLoadError(ConfigurationError):
    pass


def _expect(value: Any, kind: type, label: str) -> Any:
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise PlanLoadError(f"{label} must be {kind.__name__}, got: {type(value).__name__}")
    return value


def _str_list(value: Any, label: str) -> List[str]:
    if isinstance(value, str):
        return [value]
    items = _expect(value, list, label)
    return [str(_expect(v, str, label)) for v in items]


class YamlPlanLoader:
    def load_from_file(self, path: str) -> LoadPlan:
        p = Path(path)
        if not p.exists():
            raise PlanLoadError(f"Plan file not found: {path}")

        with p.open("r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise PlanLoadError(f"Plan file is not valid YAML: {path}: {e}") from e

        if data is None:
            raise PlanLoadError(f"Plan file is empty: {path}")

        if not isinstance(data, dict):
            raise PlanLoadError(f"Plan file is invalid: {path}")

        return self.load_from_dict(data)

    def load_from_dict(self, data: Dict[str, Any]) -> LoadPlan:
        try:
            return LoadPlan(
                base_url=str(_expect(data.get("base_url"), str, "base_url")),
                pages=self._load_pages(data.get("pages", [])),
                users=_expect(data.get("users", 1), int, "users"),
                iterations=_expect(data.get("iterations", 1), int, "iterations"),
                timeout_sec=_expect(data.get("timeout_sec", 20), int, "timeout_sec"),
                max_asset_workers=_expect(data.get("max_asset_workers", 4), int, "max_asset_workers"),
                headers={str(k): str(v) for k, v in _expect(data.get("headers", {}), dict, "headers").items()},
                login=self._load_login(data.get("login")),
                search=self._load_search(data.get("search")),
            )
        except PlanLoadError:
            raise
        except ConfigurationError as e:
            raise PlanLoadError(str(e)) from e

    def _load_pages(self, pages_data: Any) -> List[PageCheck]:
        pages: List[PageCheck] = []
        for i, page_data in enumerate(_expect(pages_data, list, "pages")):
            if isinstance(page_data, str):
                pages.append(PageCheck(path=page_data))
                continue
            _expect(page_data, dict, f"pages[{i}]")
            pages.append(
                PageCheck(
                    path=str(_expect(page_data.get("path"), str, f"pages[{i}].path")),
                    validate=self.load_validation(page_data.get("validate")),
                    load_assets=bool(page_data.get("load_assets", True)),
                )
            )
        return pages

    def load_validation(self, data: Optional[Dict[str, Any]]) -> ValidationSpec:
        if not data:
            return ValidationSpec.none()
        _expect(data, dict, "validate")

        builder = ValidationSpec.builder()
        if data.get("status") is not None:
            builder.status(_expect(data["status"], int, "validate.status"))
        if data.get("title") is not None:
            builder.title(str(data["title"]))
        if data.get("text") is not None:
            builder.texts(_str_list(data["text"], "validate.text"))
        if data.get("texts") is not None:
            builder.texts(_str_list(data["texts"], "validate.texts"))
        for header in _expect(data.get("headers", []), list, "validate.headers"):
            if isinstance(header, str):
                builder.header(header)
            else:
                _expect(header, dict, "validate.headers[]")
                if header.get("value") is None:
                    builder.header(str(header.get("name", "")))
                else:
                    builder.header_value(str(header.get("name", "")), str(header["value"]))
        if data.get("redirect") is not None:
            builder.redirect(_expect(data["redirect"], bool, "validate.redirect"))
        if data.get("not_title") is not None:
            builder.not_title(str(data["not_title"]))
        for text in _str_list(data.get("not_texts", []), "validate.not_texts"):
            builder.not_text(text)
        for name in _str_list(data.get("not_headers", []), "validate.not_headers"):
            builder.not_header(name)
        return builder.build()

    def _load_login(self, data: Any) -> Optional[LoginParams]:
        if data is None:
            return None
        _expect(data, dict, "login")
        builder = LoginParams.builder()
        for key in ("username", "password", "url", "title", "form_selector"):
            if data.get(key) is not None:
                getattr(builder, key)(str(data[key]))
        if data.get("login_page_validation"):
            builder.login_page_validation(self.load_validation(data["login_page_validation"]))
        if data.get("logged_in_validation"):
            builder.logged_in_validation(self.load_validation(data["logged_in_validation"]))
        return builder.build()

    def _load_search(self, data: Any) -> Optional[SearchParams]:
        if data is None:
            return None
        _expect(data, dict, "search")
        builder = SearchParams.builder()
        for key in ("keys", "url", "submit", "title", "form_selector"):
            if data.get(key) is not None:
                getattr(builder, key)(str(data[key]))
        if data.get("form_values") is not None:
            builder.form_values(_str_list(data["form_values"], "search.form_values"))
        if data.get("search_page_validation"):
            builder.search_page_validation(self.load_validation(data["search_page_validation"]))
        if data.get("results_page_validation"):
            builder.results_page_validation(self.load_validation(data["results_page_validation"]))
        return builder.build()
