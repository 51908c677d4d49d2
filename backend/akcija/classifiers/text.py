"""Serbian text normalization."""

_DIACRITICS = str.maketrans({"š": "s", "č": "c", "ć": "c", "ž": "z", "đ": "dj"})


def normalize_text(text: str) -> str:
    """Lowercase, strip Serbian diacritics and surrounding whitespace.

    Idempotent: ``normalize_text(normalize_text(x)) == normalize_text(x)``.
    """
    if not text:
        return ""
    return text.lower().translate(_DIACRITICS).strip()
