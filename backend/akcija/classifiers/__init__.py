"""Text classifiers shared by every store scraper."""

from akcija.classifiers.text import normalize_text
from akcija.classifiers.category import (
    classify_category,
    classify_first,
    match_category_rule,
    is_apparel,
)
from akcija.classifiers.gender import (
    classify_gender,
    classify_gender_with_default,
    resolve_gender,
)
from akcija.classifiers.brand import (
    normalize_brand,
    extract_brand_from_name,
    expand_brand_variants,
    BRAND_ALIASES,
    KNOWN_BRANDS,
    GENDER_WORDS,
    CATEGORY_WORDS,
)

__all__ = [
    "normalize_text",
    "classify_category",
    "classify_first",
    "match_category_rule",
    "is_apparel",
    "classify_gender",
    "classify_gender_with_default",
    "resolve_gender",
    "normalize_brand",
    "extract_brand_from_name",
    "expand_brand_variants",
    "BRAND_ALIASES",
    "KNOWN_BRANDS",
    "GENDER_WORDS",
    "CATEGORY_WORDS",
]
