"""Sport Vision scraper adapter.

Listing: /proizvodi/outlet-ponuda?limit=48, paginated with &p=N
  - .product-item[data-productid] carries name, prices, discount and brand
    as data attributes
    - a.product-link
    - img.img-responsive
Product page:
  - ul.product-attributes li:not(.disabled) span.original-size
  - .breadcrumb a
"""

import re
from typing import List, Optional

from bs4 import BeautifulSoup

from akcija.core.exceptions import PriceParseError
from akcija.models.deal import Deal, Store
from akcija.scrapers.base import DealDetails, DetailScraper, ListScraper, RawListing, StoreSection
from akcija.scrapers.utils.dom import (
    breadcrumb_texts,
    classify_page,
    clean_text,
    image_url,
    select_attr,
    select_text,
)
from akcija.scrapers.utils.normalizer import PriceNormalizer, absolute_url

BASE_URL = "https://www.sportvision.rs"
OUTLET_URL = f"{BASE_URL}/proizvodi/outlet-ponuda"
PAGE_SIZE = 48

_CARD_SELECTOR = ".product-item[data-productid]"
# Data attributes sometimes hold machine numbers ("4499.00") instead of display text
_PLAIN_NUMBER_RE = re.compile(r"^\d+(\.\d{1,2})?$")


class SportVisionListScraper(ListScraper):
    """Outlet listing, 48 products per page."""

    store = Store.SPORTVISION.value
    base_url = BASE_URL
    uses_browser = True
    max_pages = 20
    page_size = PAGE_SIZE
    wait_selector = ".product-item"

    def sections(self) -> List[StoreSection]:
        return [StoreSection(url=f"{OUTLET_URL}?limit={PAGE_SIZE}", label="outlet")]

    def page_url(self, section: StoreSection, page_number: int) -> str:
        if page_number == 1:
            return section.url
        return f"{section.url}&p={page_number}"

    def parse_price(self, raw: Optional[str]) -> int:
        value = (raw or "").strip()
        if _PLAIN_NUMBER_RE.match(value):
            price = PriceNormalizer.parse_price(value, thousands=",", decimal=".")
            if price is None:
                raise PriceParseError(value)
            return price
        return super().parse_price(raw)

    def parse_listing(self, soup: BeautifulSoup, section: StoreSection) -> List[RawListing]:
        listings = []
        for card in soup.select(_CARD_SELECTOR):
            name = clean_text(card.get("data-productname"))
            sale = card.get("data-productprice") or ""
            original = card.get("data-productprevprice") or ""
            href = select_attr(card, "a.product-link", "href") or select_attr(card, 'a[href*="sportvision.rs"]', "href")
            url = absolute_url(href, BASE_URL)
            if not (name and url and original and sale):
                continue

            listings.append(RawListing(
                name=name,
                url=url,
                original_price=original,
                sale_price=sale,
                image_url=image_url(card.select_one("img.img-responsive"), BASE_URL),
                brand=card.get("data-productbrand") or None,
                discount_hint=PriceNormalizer.parse_badge(card.get("data-productdiscount")),
                gender=section.gender,
            ))
        return listings

    def has_next_page(self, soup: BeautifulSoup, section: StoreSection, page_number: int, raw_count: int) -> bool:
        if soup.select_one('.pages-item-next a, a.next, [class*="next-page"]'):
            return True
        return raw_count >= PAGE_SIZE


class SportVisionDetailScraper(DetailScraper):
    """In-stock sizes and breadcrumb classification for Sport Vision products."""

    store = Store.SPORTVISION.value
    uses_browser = True
    wait_selector = "ul.product-attributes li"
    card_selector = _CARD_SELECTOR
    detail_selector = "ul.product-attributes, .product-details-info"
    zero_size_policy = "keep"

    def extract_details(self, soup: BeautifulSoup, deal: Deal) -> DealDetails:
        sizes = []
        for li in soup.select("ul.product-attributes li"):
            if "disabled" in (li.get("class") or []):
                continue
            if "display:none" in (li.get("style") or "").replace(" ", ""):
                continue
            # original-size holds S/M/L or 42; eur-size holds ages such as "9-10g."
            size = select_text(li, "span.original-size")
            if size:
                sizes.append(size)

        crumbs = breadcrumb_texts(soup, '.breadcrumb a, .breadcrumbs a, nav[aria-label="breadcrumb"] a')
        gender_label = select_text(soup, ".product-gender") or select_attr(soup, "[data-gender]", "data-gender") or ""
        title = select_text(soup, "h1") or deal.name
        categories, gender = classify_page([gender_label, *crumbs], title, deal.url)

        return DealDetails(
            sizes=sizes,
            description=select_text(soup, ".product-description, .description") or None,
            detail_image_url=image_url(
                soup.select_one(".product-gallery img, .main-image img, .swiper-slide img"), BASE_URL
            ),
            categories=categories,
            gender=gender,
        )
