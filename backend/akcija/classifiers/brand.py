"""Brand normalization shared by scrapers and catalog filtering."""

import re
from typing import Dict, List, Optional, Set

from akcija.classifiers.text import normalize_text

# Multi-word brands, matched before single-word fallbacks so that
# "THE NORTH FACE" is not truncated to "THE"
KNOWN_BRANDS: List[str] = [
    "THE NORTH FACE",
    "CALVIN KLEIN",
    "KARL LAGERFELD",
    "TOMMY HILFIGER",
    "TOMMY JEANS",
    "NEW BALANCE",
    "UNDER ARMOUR",
    "ICE PEAK",
    "SERGIO TACCHINI",
    "HUGO BOSS",
    "PEPE JEANS",
    "POLO RALPH LAUREN",
    "RALPH LAUREN",
    "FRED PERRY",
    "JACK JONES",
    "JACK WOLFSKIN",
    "NORTH SAILS",
    "LE COQ SPORTIF",
    "U.S. POLO",
    "US POLO",
    "EA7",
    "EMPORIO ARMANI",
    "ARMANI EXCHANGE",
    "MARC OPOLO",
    "MARC O'POLO",
    "G STAR",
    "G-STAR",
    "ALPHA INDUSTRIES",
    "MOON BOOT",
    "DR MARTENS",
    "DR. MARTENS",
    "RIDER",
    "IPANEMA",
    "HAVAIANAS",
    "CROCS",
]

# Canonical brand -> variants merged into it
BRAND_ALIASES: Dict[str, List[str]] = {
    "NIKE": ["AIR"],  # Air Max, Air Force, Air Jordan
    "CALVIN KLEIN": [
        "CALVIN",
        "CK",
        "CALVIN_KLEIN",
        "CALVIN_KLEIN_BLACK_LABEL",
        "CALVIN_KLEIN_JEANS",
        "CALVIN KLEIN BLACK LABEL",
        "CALVIN KLEIN JEANS",
    ],
    "ICE PEAK": ["ICE", "ICEPEAK", "ICE_PEAK"],
    "KARL LAGERFELD": ["KARL", "KARL_LAGERFELD"],
    "NEW BALANCE": ["NEW_BALANCE", "NB"],
    "TOMMY HILFIGER": ["TOMMY", "TOMMY_HILFIGER", "TOMMY_JEANS", "TOMMY JEANS"],
    "UNDER ARMOUR": ["UNDER_ARMOUR", "UA"],
    "SERGIO TACCHINI": ["SERGIO", "SERGIO_TACCHINI"],
    "SKECHERS": ["SKECHERS_BLUE"],
    "THE NORTH FACE": ["THE", "THE_NORTH_FACE", "NORTH_FACE", "NORTH FACE", "TNF"],
    "HUGO BOSS": ["HUGO", "BOSS", "HUGO_BOSS"],
    "HUMMEL": ["HML"],
    "PEPE JEANS": ["PEPE", "PEPE_JEANS"],
    "MOON BOOT": ["MOON_BOOT"],
    "DR MARTENS": ["DR_MARTENS", "DR. MARTENS", "DR."],
    "ALPHA INDUSTRIES": ["ALPHA_INDUSTRIES", "ALPHA"],
    "JACK WOLFSKIN": ["JACK_WOLFSKIN"],
    "G-STAR": ["G_STAR", "G STAR", "GSTAR"],
}

# First capitalized word of a name is often a gender, not a brand
GENDER_WORDS: Set[str] = {
    "MUSKA", "MUŠKA", "MUSKE", "MUŠKE", "MUŠKI", "MUSKI",
    "ZENSKA", "ŽENSKA", "ZENSKE", "ŽENSKE", "ŽENSKI", "ZENSKI",
    "DECIJA", "DEČIJA", "DECIJE", "DEČIJE", "DECIJI", "DEČIJI",
    "UNISEX",
}

# ... or a product category
CATEGORY_WORDS: Set[str] = {
    "RANAC", "RUKSAK", "TORBA",
    "SANDALE", "PAPUCE", "PAPUČE", "JAPANKE", "PATIKE", "CIPELE", "CIZME", "ČIZME",
    "MAJICA", "MAJICE", "JAKNA", "JAKNE", "DUKS", "DUKSEVI",
    "TRENERKA", "TRENERKE", "SORC", "ŠORC", "SORCEVI", "ŠORCEVI",
    "HELANKE", "BERMUDE", "KAPA", "KAPE", "SAL", "ŠAL",
    "RUKAVICE", "LOPTA", "LOPTE", "CARAPE", "ČARAPE", "DRES", "DRESOVI",
}

# Diacritic-free forms so "Muške" and "MUSKE" are rejected alike
_NON_BRAND_WORDS: Set[str] = {
    normalize_text(w).upper() for w in GENDER_WORDS | CATEGORY_WORDS
}


def _build_alias_index() -> Dict[str, str]:
    index: Dict[str, str] = {}
    for canonical, aliases in BRAND_ALIASES.items():
        for alias in aliases:
            index[alias.upper()] = canonical
        index[canonical] = canonical
    return index


ALIAS_TO_CANONICAL: Dict[str, str] = _build_alias_index()


def is_non_brand_word(token: str) -> bool:
    """True when the token is a gender or category word."""
    return normalize_text(token).upper() in _NON_BRAND_WORDS


def normalize_brand(raw: Optional[str]) -> Optional[str]:
    """Normalize a brand token to its canonical uppercase form.

    Steps, in order: trim/uppercase/underscores to spaces, reject gender
    and category words, resolve aliases, otherwise keep the cleaned token.

    Args:
        raw: Brand as scraped, e.g. "calvin_klein_jeans" or "MUSKA"

    Returns:
        Canonical brand (e.g. "CALVIN KLEIN") or None
    """
    if not raw:
        return None

    cleaned = re.sub(r"\s+", " ", raw.strip().upper().replace("_", " "))
    if not cleaned or is_non_brand_word(cleaned):
        return None

    # Aliases are keyed with underscores too ("CALVIN_KLEIN_JEANS")
    canonical = ALIAS_TO_CANONICAL.get(cleaned) or ALIAS_TO_CANONICAL.get(cleaned.replace(" ", "_"))
    if canonical:
        return canonical
    return cleaned


def extract_brand_from_name(name: Optional[str]) -> Optional[str]:
    """Pull a brand off the front of a product name.

    Known multi-word brands are checked first, then alias prefixes, then
    each of the first two words if it is uppercase, at least two
    characters long and not a gender or category word.
    """
    if not name:
        return None

    trimmed = name.strip()
    upper = trimmed.upper()

    for brand in KNOWN_BRANDS:
        for form in (brand, brand.replace(" ", "_")):
            if upper == form or upper.startswith(form + " "):
                return brand

    for canonical, aliases in BRAND_ALIASES.items():
        for alias in aliases:
            alias_upper = alias.upper()
            if upper == alias_upper or upper.startswith(alias_upper + " "):
                return canonical

    # Brand may be second when the name starts with a category ("SANDALE RIDER ...")
    for word in trimmed.split()[:2]:
        if word == word.upper() and len(word) >= 2:
            brand = normalize_brand(word)
            if brand:
                return brand

    return None


def expand_brand_variants(brand: str) -> Set[str]:
    """Every spelling under which a canonical brand may be stored.

    Used when filtering the catalog by brand so rows saved under a stale
    alias or casing still match.
    """
    upper = brand.upper()
    variants = {
        brand,
        upper,
        brand.replace(" ", "_"),
        upper.replace(" ", "_"),
        " ".join(w[:1] + w[1:].lower() for w in brand.split(" ")),
        brand.lower(),
    }

    for alias in BRAND_ALIASES.get(upper, []):
        variants.update({
            alias,
            alias.upper(),
            alias.lower(),
            alias.replace("_", " "),
            alias.replace(" ", "_"),
        })

    canonical = ALIAS_TO_CANONICAL.get(upper)
    if canonical and canonical != upper:
        variants.update({canonical, canonical.lower(), canonical.replace(" ", "_")})

    return variants
