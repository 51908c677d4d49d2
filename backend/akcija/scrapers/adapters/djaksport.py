"""Djak Sport scraper adapter.

Magento storefront behind Cloudflare, so pages are rendered in a browser.

Listing: /akcija, paginated with ?p=N
  - li.item.product.product-item
    - a.product-item-link (name + URL)
    - img.product-image-photo
    - .old-price .price (original), .normal-price .price (sale)
    - .discount-badge span (badge, hint only)
Product page:
  - .swatch-attribute.size .swatch-option.text[data-option-label]
  - .product.attribute.description .value
  - .breadcrumbs a
"""

import re
from typing import List

from bs4 import BeautifulSoup

from akcija.models.deal import Deal, Store
from akcija.scrapers.base import DealDetails, DetailScraper, ListScraper, RawListing, StoreSection
from akcija.scrapers.utils.dom import (
    breadcrumb_texts,
    classify_page,
    clean_text,
    image_url,
    select_text,
)
from akcija.scrapers.utils.normalizer import PriceNormalizer, absolute_url

BASE_URL = "https://www.djaksport.com"
AKCIJA_URL = f"{BASE_URL}/akcija"

_CARD_SELECTOR = ".item.product.product-item"
_SIZE_RE = re.compile(r"^[A-Za-z0-9./]+$")


class DjakSportListScraper(ListScraper):
    """Sale listing at /akcija."""

    store = Store.DJAKSPORT.value
    base_url = BASE_URL
    uses_browser = True
    max_pages = 10
    wait_selector = _CARD_SELECTOR

    def sections(self) -> List[StoreSection]:
        return [StoreSection(url=AKCIJA_URL, label="akcija")]

    def page_url(self, section: StoreSection, page_number: int) -> str:
        if page_number == 1:
            return section.url
        return f"{section.url}?p={page_number}"

    def parse_listing(self, soup: BeautifulSoup, section: StoreSection) -> List[RawListing]:
        listings = []
        for card in soup.select(_CARD_SELECTOR):
            link = card.select_one(".product-item-link")
            if link is None:
                continue
            name = clean_text(link.get_text(" "))
            url = absolute_url(link.get("href"), BASE_URL)
            if not name or not url:
                continue

            listings.append(RawListing(
                name=name,
                url=url,
                original_price=select_text(card, ".old-price .price"),
                sale_price=select_text(card, ".normal-price .price"),
                image_url=image_url(card.select_one(".product-image-photo"), BASE_URL),
                discount_hint=PriceNormalizer.parse_badge(
                    select_text(card, ".discount-badge span, .discount-percentage")
                ),
                gender=section.gender,
            ))
        return listings

    def has_next_page(self, soup: BeautifulSoup, section: StoreSection, page_number: int, raw_count: int) -> bool:
        # Magento keeps serving the last page for p beyond the end
        return soup.select_one('a.action.next, link[rel="next"]') is not None


class DjakSportDetailScraper(DetailScraper):
    """Sizes, description and breadcrumb category for Djak Sport products."""

    store = Store.DJAKSPORT.value
    uses_browser = True
    wait_selector = ".product-info-main"
    card_selector = _CARD_SELECTOR
    detail_selector = ".product-info-main"
    zero_size_policy = "keep"

    def extract_details(self, soup: BeautifulSoup, deal: Deal) -> DealDetails:
        sizes = []
        for el in soup.select(".swatch-attribute.size .swatch-option.text"):
            if "disabled" in (el.get("class") or []):
                continue
            size = (el.get("data-option-label") or clean_text(el.get_text())).strip()
            # Color swatches share the markup; sizes are short tokens
            if size and len(size) <= 5 and _SIZE_RE.match(size):
                sizes.append(size)

        crumbs = breadcrumb_texts(soup, ".breadcrumbs a, .breadcrumb-item a")
        title = select_text(soup, ".page-title, h1.product-name") or deal.name
        categories, gender = classify_page(crumbs, title, deal.url)

        return DealDetails(
            sizes=sizes,
            description=select_text(soup, ".product.attribute.description .value, .product-description") or None,
            detail_image_url=image_url(soup.select_one(".gallery-placeholder img, .product.media img"), BASE_URL),
            categories=categories,
            gender=gender,
        )
