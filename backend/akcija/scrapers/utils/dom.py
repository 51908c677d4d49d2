"""Small BeautifulSoup helpers shared by store adapters."""

import re
from typing import List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag

from akcija.classifiers import classify_first, resolve_gender
from akcija.scrapers.utils.normalizer import absolute_url

_WS_RE = re.compile(r"\s+")


def clean_text(value: Optional[str]) -> str:
    """Collapse whitespace (including non-breaking spaces) and strip."""
    if not value:
        return ""
    return _WS_RE.sub(" ", value.replace("\xa0", " ")).strip()


def select_text(root: Tag, selector: str) -> str:
    """Text of the first element matching ``selector``, or ""."""
    el = root.select_one(selector)
    return clean_text(el.get_text(" ")) if el else ""


def select_attr(root: Tag, selector: str, attr: str) -> Optional[str]:
    el = root.select_one(selector)
    if el is None:
        return None
    value = el.get(attr)
    if isinstance(value, list):
        value = " ".join(value)
    return value.strip() if value else None


def image_url(img: Optional[Tag], base_url: str) -> Optional[str]:
    """Resolve an <img>, preferring lazy-load attributes over placeholders."""
    if img is None:
        return None
    for attr in ("data-src", "data-original", "data-lazy", "src"):
        value = img.get(attr)
        if value and not value.startswith("data:"):
            return absolute_url(value, base_url)
    return None


def breadcrumb_texts(soup: BeautifulSoup, selector: str) -> List[str]:
    return [t for t in (clean_text(a.get_text(" ")) for a in soup.select(selector)) if t]


def classify_page(
    hints: Sequence[str],
    title: str,
    url: str,
) -> Tuple[List[str], Optional[str]]:
    """Category and gender from structured hints, falling back to title and URL.

    Returns:
        Tuple of (categories, gender). Gender is None when only the unisex
        default applied, so a detail pass never downgrades a known gender.
    """
    category = classify_first([*hints, title])
    gender, tier = resolve_gender(*hints, name=title, url=url)
    return ([category] if category else []), (None if tier == "default" else gender)


def unique(values: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(v for v in values if v))
