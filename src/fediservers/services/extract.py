"""Regex based extraction of homepage metadata.

The helpers work on a copy of the HTML where every run of whitespace is
collapsed to a single space, so tags spread over several lines still match.
They never raise: a miss is reported as an empty string.
"""

from __future__ import annotations

import re
from typing import List

__all__ = [
    "capitalize_description",
    "collapse_whitespace",
    "extract_homepage_logo",
    "extract_icon_href",
    "extract_meta_description",
]

_WHITESPACE = re.compile(r"\s+")

_QUOTED_VALUE = r"""(?P<quote>["'])(?P<value>[^>]*?)(?P=quote)"""
_DESCRIPTION_ATTR = r"""(?:name=["']description["']|property=["']og:description["'])"""
_META_NAME_FIRST = re.compile(
    rf"""<meta\s+[^>]*{_DESCRIPTION_ATTR}[^>]*content={_QUOTED_VALUE}[^>]*>""",
    re.IGNORECASE,
)
_META_CONTENT_FIRST = re.compile(
    rf"""<meta\s+[^>]*content={_QUOTED_VALUE}[^>]*{_DESCRIPTION_ATTR}[^>]*>""",
    re.IGNORECASE,
)

_ICON_REL = r"""rel=["'][^"']*icon[^"']*["']"""
_LINK_REL_FIRST = re.compile(
    rf"""<link\s+[^>]*{_ICON_REL}[^>]*href={_QUOTED_VALUE}[^>]*>""",
    re.IGNORECASE,
)
_LINK_HREF_FIRST = re.compile(
    rf"""<link\s+[^>]*href={_QUOTED_VALUE}[^>]*{_ICON_REL}[^>]*>""",
    re.IGNORECASE,
)

_OPEN_TAG = re.compile(r"<([a-zA-Z][\w-]*)(\s[^>]*)?>")
_IMG_TAG = re.compile(r"<img\b[^>]*>", re.IGNORECASE)


def collapse_whitespace(html: str) -> str:
    return _WHITESPACE.sub(" ", html or "")


def _first_non_empty(html: str, patterns) -> str:
    cleaned = collapse_whitespace(html)
    results: List[str] = []
    for pattern in patterns:
        for match in pattern.finditer(cleaned):
            value = match.group("value").strip()
            if value:
                results.append(value)
    return results[0] if results else ""


def extract_meta_description(html: str) -> str:
    """Return the ``description``/``og:description`` meta content or ``""``."""

    return _first_non_empty(html, (_META_NAME_FIRST, _META_CONTENT_FIRST))


def extract_icon_href(html: str) -> str:
    """Return the ``href`` of the first ``<link rel="...icon...">`` or ``""``."""

    return _first_non_empty(html, (_LINK_REL_FIRST, _LINK_HREF_FIRST))


def _attribute(attrs: str, name: str) -> str | None:
    match = re.search(
        rf"""(?:^|\s){name}\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""",
        attrs or "",
        re.IGNORECASE,
    )
    if not match:
        return None
    return next(group for group in match.groups() if group is not None)


def _has_token(value: str | None, token: str) -> bool:
    return bool(value) and token in value.split()


def _img_src(tag: str) -> str:
    return (_attribute(tag[len("<img"):], "src") or "").strip()


def _container_span(html: str, tag_name: str, start: int) -> str:
    """Return the markup between ``start`` and the tag closing ``tag_name``."""

    pattern = re.compile(rf"<(/?){re.escape(tag_name)}\b[^>]*>", re.IGNORECASE)
    depth = 1
    for match in pattern.finditer(html, start):
        if match.group(0).endswith("/>"):
            continue
        depth += -1 if match.group(1) else 1
        if depth == 0:
            return html[start:match.start()]
    return html[start:]


def extract_homepage_logo(html: str) -> str:
    """Return the ``src`` of the site logo image or ``""``.

    The image inside the first ``nav-logo`` container wins. Otherwise any
    ``<img>`` whose ``id`` or ``class`` carries the ``logo`` token is used.
    """

    cleaned = collapse_whitespace(html)

    for match in _OPEN_TAG.finditer(cleaned):
        if not _has_token(_attribute(match.group(2) or "", "class"), "nav-logo"):
            continue
        inner = _container_span(cleaned, match.group(1), match.end())
        for img in _IMG_TAG.finditer(inner):
            src = _img_src(img.group(0))
            if src:
                return src
        break

    for img in _IMG_TAG.finditer(cleaned):
        tag = img.group(0)
        attrs = tag[len("<img"):]
        if _has_token(_attribute(attrs, "id"), "logo") or _has_token(_attribute(attrs, "class"), "logo"):
            src = _img_src(tag)
            if src:
                return src
    return ""


def capitalize_description(description: str) -> str:
    """Upper-case the first character of ``description`` only."""

    if not description:
        return description
    return description[0].upper() + description[1:]
