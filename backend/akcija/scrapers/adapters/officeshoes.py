"""Office Shoes scraper adapter.

Three "50% and more" footwear sections sorted by discount descending, each
grown with #loadMoreButton. Loading stops once the newest cards fall below
the minimum discount, since nothing after them can qualify.

Listing:
  - .product-article_wrapper or article[data-product_id]
    - h2 / .product-name (name), first link (URL)
    - .old-price (original), .price:not(.old-price) (sale)
    - img[src*="ssrs55"] discount badge image, img[src*="brandlogos/"]
Product page:
  - ul.sizes li[data-product-size]
  - .content-details ul li such as "Ženske patike" (gender + category)
  - .tags .tag-item
"""

import re
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from akcija.classifiers import normalize_text
from akcija.models.deal import Deal, Gender, Store
from akcija.scrapers.base import DealDetails, DetailScraper, ListScraper, RawListing, StoreSection
from akcija.scrapers.utils.dom import clean_text, image_url, select_attr, select_text, unique
from akcija.scrapers.utils.fetchers import BaseFetcher
from akcija.scrapers.utils.normalizer import absolute_url

BASE_URL = "https://www.officeshoes.rs"

SALE_SECTIONS = (
    StoreSection(
        url=f"{BASE_URL}/obuca-discount-popust-50-muske/10392237/48/discount_desc/",
        label="men",
        gender=Gender.MEN.value,
    ),
    StoreSection(
        url=f"{BASE_URL}/obuca-discount-popust-50-zenske/10406903/48/discount_desc/",
        label="women",
        gender=Gender.WOMEN.value,
    ),
    StoreSection(
        url=f"{BASE_URL}/obuca-discount-popust-50-decije/11121149/48/discount_desc/",
        label="kids",
        gender=Gender.KIDS.value,
    ),
)

_CARD_SELECTOR = ".product-article_wrapper, article[data-product_id]"
_BADGE_RE = re.compile(r"ssrs(\d+)")
_BRAND_LOGO_RE = re.compile(r"brandlogos/([^./]+)")

# Footwear type words, keyed without diacritics
FOOTWEAR_TYPES = (
    ("patike", "obuca/patike"),
    ("cipele", "obuca/cipele"),
    ("cizme", "obuca/cizme"),
    ("gleznjace", "obuca/cizme"),
    ("sandale", "obuca/sandale"),
    ("papuce", "obuca/papuce"),
    ("japanke", "obuca/papuce"),
    ("klompe", "obuca/papuce"),
    ("mokasine", "obuca/cipele"),
    ("espadrile", "obuca/cipele"),
    ("baletanke", "obuca/baletanke"),
)

PRODUCT_TYPE_GENDERS = {
    "zenske": Gender.WOMEN.value,
    "muske": Gender.MEN.value,
    "decije": Gender.KIDS.value,
    "decje": Gender.KIDS.value,
    "unisex": Gender.UNISEX.value,
}

_PRODUCT_TYPE_RE = re.compile(
    r"^(" + "|".join(PRODUCT_TYPE_GENDERS) + r")\s+(" + "|".join(word for word, _ in FOOTWEAR_TYPES) + r")"
)


def card_badge(card: Tag) -> Optional[int]:
    """Discount encoded in the badge image name, e.g. .../ssrs60.png -> 60."""
    for img in card.select('img[src*="ssrs"]'):
        match = _BADGE_RE.search(img.get("src", ""))
        if match:
            return int(match.group(1))
    return None


def parse_product_type(text: str) -> Tuple[Optional[str], Optional[str]]:
    """Split a product type such as "Ženske patike" into (gender, category)."""
    match = _PRODUCT_TYPE_RE.match(normalize_text(text))
    if not match:
        return None, None

    category = next(path for word, path in FOOTWEAR_TYPES if word == match.group(2))
    return PRODUCT_TYPE_GENDERS[match.group(1)], category


class OfficeShoesListScraper(ListScraper):
    """Discount-sorted footwear sections with load-more paging."""

    store = Store.OFFICESHOES.value
    base_url = BASE_URL
    uses_browser = True
    max_pages = 1
    sorted_by_discount = True
    wait_selector = _CARD_SELECTOR

    def sections(self) -> List[StoreSection]:
        return list(SALE_SECTIONS)

    def newest_below_threshold(self, html: str) -> bool:
        """True when the last loaded batch already holds a sub-threshold badge."""
        cards = BeautifulSoup(html, "html.parser").select(_CARD_SELECTOR)
        badges = [b for b in (card_badge(c) for c in cards[-10:]) if b is not None]
        return bool(badges) and min(badges) < self.min_discount

    async def fetch_page(self, fetcher: BaseFetcher, section: StoreSection, page_number: int) -> str:
        return await fetcher.load_more(
            section.url,
            button_selector="#loadMoreButton",
            item_selector=_CARD_SELECTOR,
            max_clicks=50,
            should_stop=self.newest_below_threshold,
            delay=self.delay,
        )

    def parse_listing(self, soup: BeautifulSoup, section: StoreSection) -> List[RawListing]:
        listings = []
        for card in soup.select(_CARD_SELECTOR):
            url = absolute_url(select_attr(card, 'a[href*="/"]', "href"), BASE_URL)
            name = select_text(card, "h2, .product-name, .product-title")
            if not name or not url:
                continue

            brand = card.get("data-brand")
            if not brand:
                logo = select_attr(card, 'img[src*="brandlogos"]', "src") or ""
                match = _BRAND_LOGO_RE.search(logo)
                brand = match.group(1) if match else None

            sale = ""
            for el in card.select(".price"):
                if "old-price" not in (el.get("class") or []):
                    sale = clean_text(el.get_text(" "))
                    break

            listings.append(RawListing(
                name=name,
                url=url,
                original_price=select_text(card, ".old-price"),
                sale_price=sale,
                image_url=image_url(card.select_one('img.product_item_img, img[src*="/products/"]'), BASE_URL),
                brand=brand,
                discount_hint=card_badge(card),
                gender=section.gender,
            ))
        return listings

    def has_next_page(self, soup: BeautifulSoup, section: StoreSection, page_number: int, raw_count: int) -> bool:
        return False


class OfficeShoesDetailScraper(DetailScraper):
    """Sizes plus gender and category from the product type line."""

    store = Store.OFFICESHOES.value
    uses_browser = True
    wait_selector = "ul.sizes li"
    card_selector = _CARD_SELECTOR
    detail_selector = "ul.sizes, .content-details"
    zero_size_policy = "keep"

    def extract_details(self, soup: BeautifulSoup, deal: Deal) -> DealDetails:
        sizes = [
            li["data-product-size"].strip()
            for li in soup.select("ul.sizes li[data-product-size]")
            if "unavailable" not in (li.get("class") or []) and li["data-product-size"].strip()
        ]
        if not sizes:
            for el in soup.select(".size-list .size-item, .sizes-wrapper .size"):
                if "unavailable" not in (el.get("class") or []):
                    sizes.append(clean_text(el.get_text()))

        gender, category = None, None
        for li in soup.select(".content-details ul li"):
            gender, category = parse_product_type(clean_text(li.get_text(" ")))
            if category:
                break

        categories = [category] if category else []
        for tag in soup.select(".tags .tag-item"):
            word = normalize_text(clean_text(tag.get_text()))
            for type_word, path in FOOTWEAR_TYPES[:3]:
                if word == type_word:
                    categories.append(path)

        description = select_text(soup, ".content-about .brandinfo-text p") or None
        detail_image = None
        img = soup.select_one(".aniimated-thumbnials img, img[src*='cdn.officeshoes'], img[src*='big/'], .gallery img")
        if img is not None and "brandlogo" not in (img.get("src") or ""):
            detail_image = image_url(img, BASE_URL)

        return DealDetails(
            sizes=sizes,
            description=description,
            detail_image_url=detail_image,
            categories=unique(categories),
            gender=gender,
        )
