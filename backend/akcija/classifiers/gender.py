"""Gender classifier.

Two entry points with kids > women > men precedence:

* ``classify_gender`` for structured values such as a "Pol" property or a
  breadcrumb; returns None when nothing matches.
* ``classify_gender_with_default`` for free text (name + URL); recognizes
  abbreviations and URL segments and always returns a value, defaulting to
  unisex.

``resolve_gender`` chains them explicitly and reports which tier answered.
"""

from typing import Optional, Sequence, Tuple

from akcija.classifiers.text import normalize_text
from akcija.models.deal import Gender

_STRUCTURED_RULES: Sequence[Tuple[Gender, Tuple[str, ...]]] = (
    (Gender.KIDS, ("deca", "decij", "devoj", "kid", "junior", "beb")),
    (Gender.WOMEN, ("zensk", "women", "dame", "zene", "zena")),
    (Gender.MEN, ("musk", "men")),
)

_FREE_TEXT_KIDS = (
    "deca", "decij", "devoj", "kid", "junior", " jr", "-jr-",
    # Nike/Jordan age codes: BP, BG, PS, GS, TD
    " bp", " bg", " ps", " gs", " td",
    " youth", "beb", "infant", "toddler", "child",
)
_FREE_TEXT_WOMEN = (
    "zensk", "zene", "zena", " w ", "-w-", " wmns", " women", "woman",
    "/women/", "-women-", " lady", " ladies", "female", " girl", "/girl/",
)
_FREE_TEXT_MEN = (
    "musk", " m ", "-m-", " men ", " men's", "/men/", "-men-", "male", " guy",
)


def classify_gender(text: Optional[str]) -> Optional[str]:
    """Map a structured gender label to a catalog gender value.

    Args:
        text: Label such as "Muškarci", "ŽENE" or "Deca"

    Returns:
        "muski", "zenski", "deciji" or None
    """
    t = normalize_text(text or "")
    if not t:
        return None
    for gender, stems in _STRUCTURED_RULES:
        if any(stem in t for stem in stems):
            return gender.value
    return None


def classify_gender_with_default(name: str, url: str = "") -> str:
    """Guess gender from product name and URL, defaulting to unisex."""
    t = normalize_text(f"{name or ''} {url or ''}")

    if any(k in t for k in _FREE_TEXT_KIDS):
        return Gender.KIDS.value
    if any(k in t for k in _FREE_TEXT_WOMEN) or t.endswith(" w"):
        return Gender.WOMEN.value
    if any(k in t for k in _FREE_TEXT_MEN) or t.endswith(" m"):
        return Gender.MEN.value
    return Gender.UNISEX.value


def resolve_gender(
    *structured: Optional[str],
    name: str = "",
    url: str = "",
) -> Tuple[str, str]:
    """Run the ordered gender fallback chain.

    Each structured hint is tried in the order given, then name/URL text,
    then the unisex default.

    Returns:
        Tuple of (gender value, tier) where tier is "structured",
        "name_url" or "default"
    """
    for hint in structured:
        gender = classify_gender(hint)
        if gender:
            return gender, "structured"

    gender = classify_gender_with_default(name, url)
    if gender != Gender.UNISEX.value:
        return gender, "name_url"
    return gender, "default"
