"""Category classifier: free text to a ``main/sub`` category path.

Rules are stem matches evaluated in order against normalized text and the
first match wins. Order encodes ambiguity resolution: cleats before
sneakers, swimwear and jumpsuits before generic clothing, tops before
t-shirts. Text is matched with store domains removed so that
"buzzsneakers" or "officeshoes" in a URL do not leak into the result.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from akcija.classifiers.text import normalize_text

_DOMAIN_RE = re.compile(r"https?://[^\s/]+")

# Items that would false-match a real category (sock holders, insoles, headbands)
_EXCLUDED = ("znojnic", "headband", "ulosc")

# "sneaker" and "trainer" appear in clothing names ("Sneaker Tee", "Trainer Hoodie")
_CLOTHING_CONTEXT = (
    "majic", "t-shirt", "tshirt", " tee", "duks", "hoodie", "sweatshirt",
    "jakn", "jacket", "sorc", "short", "pantalon", "pants", "helank",
    "trenerk", "prslu", "vest", "kosulj", "halj", "dress",
)


def _any(*stems: str) -> Callable[[str], bool]:
    return lambda t: any(stem in t for stem in stems)


def _has_clothing(t: str) -> bool:
    return any(k in t for k in _CLOTHING_CONTEXT)


@dataclass(frozen=True)
class CategoryRule:
    """One ordered classification tier."""

    name: str
    path: str
    matches: Callable[[str], bool]


CATEGORY_RULES: Sequence[CategoryRule] = (
    # Footwear, specific before general
    CategoryRule("cleats", "obuca/kopacke", _any("kopack")),
    CategoryRule("ballet_flats", "obuca/baletanke", _any("baletank")),
    CategoryRule(
        "sneakers",
        "obuca/patike",
        lambda t: (
            "patik" in t
            or ("sneaker" in t and not _has_clothing(t))
            or "tenisic" in t
            or ("trainer" in t and not _has_clothing(t))
            or "running" in t
            or "patofn" in t
        ),
    ),
    CategoryRule(
        "shoes",
        "obuca/cipele",
        lambda t: (
            "cipel" in t
            or "mokasine" in t
            or "espadrile" in t
            or ("shoe" in t and "sneaker" not in t)
        ),
    ),
    CategoryRule("boots", "obuca/cizme", _any("cizm", "boot", "gumenjak", "gleznjac")),
    CategoryRule("sandals", "obuca/sandale", _any("sandal")),
    CategoryRule(
        "slippers",
        "obuca/papuce",
        _any("papuc", "japank", "klompe", "klompa", "flip flop", "slipper"),
    ),
    # Clothing, specific before general
    CategoryRule("swimwear", "odeca/kupaci", _any("kupac", "kupace", "bikini")),
    CategoryRule(
        "jumpsuits",
        "odeca/kombinezoni",
        _any("kombinezon", "skafander", "jumpsuit", "overall"),
    ),
    CategoryRule(
        "tops",
        "odeca/topovi",
        lambda t: (
            " top" in t
            or t.startswith("top ")
            or "sports bra" in t
            or "tank top" in t
            or "crop top" in t
            or " bra " in t
            or t.endswith(" bra")
            or t.startswith("bra ")
        ),
    ),
    CategoryRule(
        "jackets",
        "odeca/jakne",
        _any("jakn", "jacket", "vetrovk", "windbreak", "suskav", "puffer"),
    ),
    CategoryRule("vests", "odeca/prsluci", _any("prslu", "vest")),
    CategoryRule("hoodies", "odeca/duksevi", _any("duks", "hoodie", "sweatshirt", "hudica")),
    CategoryRule(
        "sweaters",
        "odeca/bluze",
        _any("dzemp", "bluz", "pulover", "sweater", "cardigan", "kardigan", "sako"),
    ),
    CategoryRule("tshirts", "odeca/majice", _any("majic", "t-shirt", "tshirt", "dres", "jersey")),
    CategoryRule("shirts", "odeca/kosulje", _any("kosulj")),
    CategoryRule("leggings", "odeca/helanke", _any("helank", "tajic", "legging", "tight")),
    CategoryRule("shorts", "odeca/sortevi", _any("sorc", "sorts", "short", "bermud")),
    CategoryRule("trousers", "odeca/pantalone", _any("pantalon", "pants", "trousers")),
    CategoryRule(
        "underwear",
        "odeca/donji-ves",
        lambda t: "bokseric" in t or ("donj" in t and ("ves" in t or "deo" in t)),
    ),
    CategoryRule("tracksuits", "odeca/trenerke", _any("trenerk", "tracksuit")),
    CategoryRule("dresses", "odeca/haljine", _any("halj", "dress", "sukn", "skirt")),
    # Accessories
    CategoryRule("wallets", "oprema/novcanici", _any("novcanik", "wallet")),
    CategoryRule(
        "bags",
        "oprema/torbe",
        _any(
            "ranac", "ranca", "rancev", "ruksak", "backpack",
            "torb", "duffel", "gym bag", "vrec", "gymsack",
        ),
    ),
    CategoryRule(
        "caps",
        "oprema/kape",
        _any("kapa", "kape", "kacket", "sesir", "beanie", "silterica"),
    ),
    CategoryRule("gloves", "oprema/rukavice", _any("rukavic", "gloves")),
    CategoryRule("socks", "oprema/carape", _any("carap", "stucn", "sock")),
    CategoryRule("balls", "oprema/lopte", lambda t: re.search(r"\blopt", t) is not None),
    CategoryRule(
        "scarves",
        "oprema/salovi",
        lambda t: re.search(r"\bsal\b", t) is not None or "salov" in t or "scarf" in t,
    ),
)


def _prepare(text: str) -> str:
    return normalize_text(_DOMAIN_RE.sub("", text or ""))


def match_category_rule(text: str) -> Optional[CategoryRule]:
    """Return the first rule matching ``text``, or None.

    Exposes which tier matched so misclassifications can be traced to a
    specific rule.
    """
    t = _prepare(text)
    if not t or any(stem in t for stem in _EXCLUDED):
        return None
    for rule in CATEGORY_RULES:
        if rule.matches(t):
            return rule
    return None


def classify_category(text: str) -> Optional[str]:
    """Classify free text into a category path.

    Args:
        text: Product name, URL, breadcrumb trail or any mix of them

    Returns:
        Category path such as "obuca/patike", or None when uncategorized
    """
    rule = match_category_rule(text)
    return rule.path if rule else None


def classify_first(candidates: List[Optional[str]]) -> Optional[str]:
    """Classify each candidate text in order and return the first hit.

    Used for store fallback chains such as breadcrumbs, then URL path,
    then product name.
    """
    for candidate in candidates:
        if not candidate:
            continue
        path = classify_category(candidate)
        if path:
            return path
    return None


def is_apparel(categories: List[str]) -> bool:
    """True when any category is footwear or clothing (size-bearing items)."""
    return any(c.startswith(("obuca/", "odeca/")) for c in categories)
