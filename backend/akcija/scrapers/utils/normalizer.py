"""Data normalization utilities for prices, sizes, URLs and deal ids."""

import hashlib
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List, Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlparse, urlunparse

import structlog

logger = structlog.get_logger()


class PriceNormalizer:
    """Parse locale-formatted Serbian prices into whole dinars."""

    _CURRENCY_RE = re.compile(r"(RSD|rsd|din\.?|Din\.?|DIN\.?|€|\*)")
    _NUMBER_RE = re.compile(r"\d[\d.,]*")

    @staticmethod
    def parse_price(
        raw: Optional[str],
        thousands: str = ".",
        decimal: str = ",",
    ) -> Optional[int]:
        """Parse a price string.

        Handles:
        - "10.000,00 RSD" -> 10000
        - "4.499 din" -> 4499
        - "RSD 47,000.00*" with thousands="," and decimal="." -> 47000

        Args:
            raw: Raw price text
            thousands: Thousands separator used by the store
            decimal: Decimal separator used by the store

        Returns:
            Price rounded to whole dinars, or None if unparseable or not positive
        """
        if not raw:
            return None

        cleaned = PriceNormalizer._CURRENCY_RE.sub("", raw)
        match = PriceNormalizer._NUMBER_RE.search(cleaned)
        if not match:
            return None

        number = match.group(0).rstrip(".,")
        number = number.replace(thousands, "").replace(decimal, ".")

        try:
            value = Decimal(number)
        except InvalidOperation:
            return None

        amount = int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        if amount <= 0:
            return None
        return amount

    @staticmethod
    def calc_discount(original: int, sale: int) -> int:
        """Discount percent as ``round((original - sale) / original * 100)``, half up."""
        if not original or original <= 0:
            return 0
        ratio = (Decimal(original) - Decimal(sale)) / Decimal(original) * 100
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @staticmethod
    def is_valid_pair(original: Optional[int], sale: Optional[int]) -> bool:
        """A price pair is usable only if both are positive and sale < original."""
        if not original or not sale:
            return False
        return 0 < sale < original

    @staticmethod
    def parse_badge(raw: Optional[str]) -> Optional[int]:
        """Parse a discount badge such as "-55%" into 55."""
        if not raw:
            return None
        match = re.search(r"(\d{1,3})\s*%?", raw)
        if not match:
            return None
        return int(match.group(1))


class SizeNormalizer:
    """Normalize size labels scraped from product pages."""

    LETTER_SIZES = {"XXS", "XS", "S", "M", "L", "XL", "XXL", "XXXL", "2XL", "3XL", "4XL"}

    @staticmethod
    def normalize(sizes: Iterable[str]) -> List[str]:
        """Expand compound size labels into individual sizes.

        - "36-37" -> "36", "37"
        - "38 2/3" -> "38", "39"
        - "42.5" -> "42", "43"
        - "s/m" -> "S", "M"

        Order is preserved and duplicates removed.
        """
        result: List[str] = []

        def add(value: str) -> None:
            if value and value not in result:
                result.append(value)

        for raw in sizes:
            size = (raw or "").strip()
            if not size:
                continue

            m = re.fullmatch(r"(\d+)\s*-\s*(\d+)", size)
            if m:
                start, end = int(m.group(1)), int(m.group(2))
                if start <= end and end - start <= 10:
                    for n in range(start, end + 1):
                        add(str(n))
                    continue

            m = re.fullmatch(r"(\d+)\s+\d/\d", size)
            if m:
                whole = int(m.group(1))
                add(str(whole))
                add(str(whole + 1))
                continue

            m = re.fullmatch(r"(\d+)[.,](\d+)", size)
            if m:
                whole = int(m.group(1))
                add(str(whole))
                add(str(whole + 1))
                continue

            if "/" in size and re.fullmatch(r"[A-Za-z0-9]+(/[A-Za-z0-9]+)+", size):
                for part in size.split("/"):
                    add(part.strip().upper())
                continue

            add(size)

        return result

    @classmethod
    def is_mixed(cls, sizes: Iterable[str]) -> bool:
        """True when a list holds both shoe sizes and letter clothing sizes.

        Such a list comes from a mis-rendered page, not a real product.
        """
        has_shoe = False
        has_letter = False
        for size in sizes:
            value = size.strip().upper()
            if value in cls.LETTER_SIZES:
                has_letter = True
            else:
                m = re.match(r"(\d+)", value)
                if m and int(m.group(1)) >= 15:
                    has_shoe = True
        return has_shoe and has_letter


def absolute_url(href: Optional[str], base_url: str) -> Optional[str]:
    """Resolve a possibly relative link against the store's base URL."""
    if not href:
        return None
    href = href.strip()
    if href.startswith("//"):
        return "https:" + href
    return urljoin(base_url, href)


def normalize_url(url: str) -> str:
    """Normalize a URL by removing tracking parameters and fragments.

    Args:
        url: URL to normalize

    Returns:
        Normalized URL
    """
    if not url:
        return url

    tracking_params = {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_content",
        "utm_term",
        "fbclid",
        "gclid",
    }

    parsed = urlparse(url.strip())
    query = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k not in tracking_params]
    return urlunparse(parsed._replace(query=urlencode(query), fragment=""))


def make_deal_id(store: str, url: str) -> str:
    """Derive a stable deal id from the store and product URL.

    Pure function of its inputs: the last path segment, slugified, plus a
    short hash of the whole URL so two products sharing a slug differ.
    """
    path = urlparse(url).path.rstrip("/")
    segment = path.rsplit("/", 1)[-1] if path else ""
    segment = re.sub(r"\.html?$", "", segment.lower())
    slug = re.sub(r"[^a-z0-9]+", "-", segment).strip("-")[:80]
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:8]
    if slug:
        return f"{store}-{slug}-{digest}"
    return f"{store}-{digest}"
