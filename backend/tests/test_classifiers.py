"""Tests for the text normalizer and the category, gender and brand classifiers."""

import pytest

from akcija.classifiers import (
    CATEGORY_WORDS,
    GENDER_WORDS,
    classify_category,
    classify_first,
    classify_gender,
    classify_gender_with_default,
    expand_brand_variants,
    extract_brand_from_name,
    is_apparel,
    match_category_rule,
    normalize_brand,
    normalize_text,
    resolve_gender,
)


# ============================================================================
# TEXT NORMALIZER
# ============================================================================

class TestNormalizeText:
    """Tests for normalize_text."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Muške Patike", "muske patike"),
            ("ČIZME ŽENSKE", "cizme zenske"),
            ("  Đak Sport  ", "djak sport"),
            ("", ""),
        ],
    )
    def test_strips_diacritics_and_lowercases(self, raw, expected):
        assert normalize_text(raw) == expected

    @pytest.mark.parametrize("raw", ["Šorc ĆĆ", "DUKS Đ", "already plain", "Ženske Čarape  "])
    def test_idempotent(self, raw):
        once = normalize_text(raw)
        assert normalize_text(once) == once

    def test_none_is_empty(self):
        assert normalize_text(None) == ""


# ============================================================================
# CATEGORY CLASSIFIER
# ============================================================================

class TestCategoryClassifier:
    """Tests for ordered category rules."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("NIKE AIR MAX PATIKE ZENSKE", "obuca/patike"),
            ("Kopačke Adidas Predator", "obuca/kopacke"),
            ("Zimske čizme", "obuca/cizme"),
            ("Jakna sa kapuljačom", "odeca/jakne"),
            ("Muški duks", "odeca/duksevi"),
            ("Ranac Nike Heritage", "oprema/torbe"),
            ("Čarape 3 para", "oprema/carape"),
            ("Kupaći kostim", "odeca/kupaci"),
        ],
    )
    def test_classify(self, text, expected):
        assert classify_category(text) == expected

    def test_top_wins_over_tshirt(self):
        assert classify_category("Majica top crop") == "odeca/topovi"
        assert classify_category("Ženski top majica") == "odeca/topovi"

    def test_cleats_win_over_sneakers(self):
        assert classify_category("Patike kopačke za fudbal") == "obuca/kopacke"

    def test_sneaker_tee_is_clothing(self):
        assert classify_category("Sneaker Tee majica") == "odeca/majice"

    def test_store_domain_does_not_leak(self):
        assert classify_category("https://www.buzzsneakers.rs/proizvodi/majica-basic") == "odeca/majice"

    def test_excluded_items(self):
        assert classify_category("Znojnica za čarape") is None

    def test_unknown_is_none(self):
        assert classify_category("Poklon vaučer") is None
        assert classify_category("") is None

    def test_match_rule_exposes_tier(self):
        rule = match_category_rule("Patike za trčanje")
        assert rule is not None
        assert rule.name == "sneakers"

    def test_classify_first_uses_fallback_order(self):
        assert classify_first([None, "Poklon", "Jakna zimska", "Patike"]) == "odeca/jakne"
        assert classify_first(["", None]) is None

    def test_is_apparel(self):
        assert is_apparel(["obuca/patike"])
        assert is_apparel(["oprema/torbe", "odeca/majice"])
        assert not is_apparel(["oprema/torbe"])
        assert not is_apparel([])


# ============================================================================
# GENDER CLASSIFIER
# ============================================================================

class TestGenderClassifier:
    """Tests for the structured and free-text gender tiers."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("Muškarci", "muski"),
            ("ŽENE", "zenski"),
            ("Deca", "deciji"),
            ("Dečije", "deciji"),
            ("Devojčice", "deciji"),
            ("Oprema", None),
            (None, None),
        ],
    )
    def test_structured(self, label, expected):
        assert classify_gender(label) == expected

    def test_kids_take_precedence(self):
        assert classify_gender("Deca / Muškarci") == "deciji"

    @pytest.mark.parametrize(
        "name,url,expected",
        [
            ("NIKE AIR MAX PATIKE ZENSKE", "", "zenski"),
            ("Air Force 1 GS", "", "deciji"),
            ("Court Vision W", "", "zenski"),
            ("Patike muške", "", "muski"),
            ("Ranac", "https://shop.rs/women/ranac", "zenski"),
            ("Ranac Heritage", "", "unisex"),
        ],
    )
    def test_free_text_with_default(self, name, url, expected):
        assert classify_gender_with_default(name, url) == expected

    def test_resolve_reports_tier(self):
        assert resolve_gender("Žene", name="Patike") == ("zenski", "structured")
        assert resolve_gender(None, "", name="Patike muške") == ("muski", "name_url")
        assert resolve_gender(name="Ranac") == ("unisex", "default")

    def test_resolve_tries_hints_in_order(self):
        assert resolve_gender("Oprema", "Muškarci", "Žene", name="x") == ("muski", "structured")


# ============================================================================
# BRAND NORMALIZER
# ============================================================================

class TestBrandNormalizer:
    """Tests for brand normalization and extraction."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("CALVIN_KLEIN_JEANS", "CALVIN KLEIN"),
            ("calvin klein black label", "CALVIN KLEIN"),
            ("nike", "NIKE"),
            ("ICEPEAK", "ICE PEAK"),
            ("  adidas  ", "ADIDAS"),
            ("The_North_Face", "THE NORTH FACE"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_brand(raw) == expected

    @pytest.mark.parametrize("raw", ["MUŠKA", "Ženske", "PATIKE", "ranac", "", None])
    def test_rejects_gender_and_category_words(self, raw):
        assert normalize_brand(raw) is None

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("NIKE AIR MAX PATIKE ZENSKE", "NIKE"),
            ("THE NORTH FACE JAKNA", "THE NORTH FACE"),
            ("AIR JORDAN 1 MID", "NIKE"),
            ("SANDALE RIDER R1", "RIDER"),
            ("PATIKE ADIDAS RUNFALCON", "ADIDAS"),
            ("muške patike", None),
        ],
    )
    def test_extract_from_name(self, name, expected):
        assert extract_brand_from_name(name) == expected

    def test_never_returns_gender_or_category_word(self):
        forbidden = {w.upper() for w in GENDER_WORDS | CATEGORY_WORDS}
        names = [
            "MUŠKE PATIKE", "ŽENSKA JAKNA ICEPEAK", "DEČIJE ČIZME", "PATIKE MUSKE",
            "UNISEX RANAC", "MAJICA KAPA", "TORBA NIKE", "ŠORC ŽENSKI",
        ]
        for name in names:
            assert extract_brand_from_name(name) not in forbidden
            for word in name.split():
                assert normalize_brand(word) not in forbidden

    def test_expand_variants_includes_aliases(self):
        variants = expand_brand_variants("CALVIN KLEIN")
        assert "CK" in variants
        assert "CALVIN_KLEIN" in variants
        assert "Calvin Klein" in variants
        assert "calvin klein" in variants
