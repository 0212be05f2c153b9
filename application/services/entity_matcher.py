# application/services/entity_matcher.py
"""
Regex primitives over raw markup.

No DOM is built: every lookup is one targeted, lazy regular expression. All
caller-supplied strings (form selectors, field names, tag names) reach a
pattern only through compile_pattern(), which escapes them, so a field name
like "search[keys]" is always matched literally.
"""
from __future__ import annotations

import html
import re
from functools import lru_cache
from typing import Iterator, Optional, Sequence

# case-insensitive, and "." crosses newlines: markup is matched as one line
MARKUP_FLAGS = re.IGNORECASE | re.DOTALL

_OPENING_TAG = re.compile(r"<([a-z][\w:-]*)(?:\s[^>]*)?/?>", MARKUP_FLAGS)

# Whole attributes (name, optionally "=" and a quoted or bare value) that sit
# before the one looked up. Quoted values are consumed as a unit, so text like
# placeholder="e.g. value=3" can never be mistaken for an attribute.
LEADING_ATTRIBUTES = r"(?:\s+[^\s=>/\"']+(?:\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s\"'>]+))?)*?"


@lru_cache(maxsize=512)
def _compile(template: str, flags: int, literals: tuple) -> "re.Pattern[str]":
    escaped = {name: re.escape(value) for name, value in literals}
    return re.compile(template % escaped, flags)


def compile_pattern(template: str, flags: int = MARKUP_FLAGS, **literals: str) -> "re.Pattern[str]":
    """
    Build a regex from ``template`` with ``%(name)s`` placeholders.

    Every keyword value is passed through re.escape() before substitution;
    there is no way to splice raw regex syntax in through this function.
    """
    return _compile(template, flags, tuple(sorted(literals.items())))


def decode_entities(value: str) -> str:
    """&amp; -> &, &quot; -> ", &#039; -> ' and so on."""
    return html.unescape(value)


def contains_text(markup: str, text: str) -> bool:
    return text in markup


def find_element_text(markup: str, tag: str) -> Optional[str]:
    """Inner markup of the first <tag ...>...</tag>, lazily matched."""
    pattern = compile_pattern(r"<%(tag)s(?:\s[^>]*)?>(.*?)</%(tag)s\s*>", tag=tag)
    m = pattern.search(markup)
    return m.group(1) if m else None


def find_tag_body(markup: str, tag: str, attributes: Sequence[str], value: str) -> Optional[str]:
    """
    Inner markup of the first <tag> whose opening tag has one of ``attributes``
    set to ``value``.

    The attribute may sit anywhere among other attributes, but the search for
    it never leaves the opening tag, and the body match is lazy, so a match
    can neither start in an earlier element nor run into a later one. All
    ``attributes`` are tried in one pass: the earliest element in the
    document wins, whichever attribute identified it.
    """
    if not attributes:
        return None
    names = {f"attr{i}": attribute for i, attribute in enumerate(attributes)}
    alternation = "|".join(f"%({key})s" for key in names)
    pattern = compile_pattern(
        r"<%(tag)s" + LEADING_ATTRIBUTES
        + r"\s+(?:" + alternation + r")\s*=\s*([\"'])(?-i:%(value)s)\1[^>]*>(.*?)</%(tag)s\s*>",
        tag=tag,
        value=value,
        **names,
    )
    m = pattern.search(markup)
    return m.group(2) if m else None


def iter_tags(markup: str, names: Sequence[str]) -> Iterator[str]:
    """Opening tags named in ``names``, in document order."""
    wanted = {n.lower() for n in names}
    for m in _OPENING_TAG.finditer(markup):
        if m.group(1).lower() in wanted:
            yield m.group(0)


def attribute_value(tag: str, attribute: str) -> Optional[str]:
    """
    Value of ``attribute`` inside one opening tag, entity-decoded.
    Double-quoted, single-quoted and bare values are accepted. ``tag`` starts
    with "<name", and attributes are walked from there one by one.
    """
    pattern = compile_pattern(
        r"<[^\s>/]+" + LEADING_ATTRIBUTES + r"\s+%(attr)s\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^\s\"'>]+))",
        attr=attribute,
    )
    m = pattern.match(tag)
    if not m:
        return None
    raw = next(g for g in m.groups() if g is not None)
    return decode_entities(raw)


def get_html_head(markup: str) -> Optional[str]:
    return find_element_text(markup, "head")


def get_title(markup: str) -> Optional[str]:
    """
    Title text, looked up inside <head> when the page has one.
    Surrounding whitespace and newlines are stripped; entities are left as-is.
    """
    head = get_html_head(markup)
    title = find_element_text(head if head is not None else markup, "title")
    if title is None and head is not None:
        title = find_element_text(markup, "title")
    if title is None:
        return None
    return " ".join(title.split())
