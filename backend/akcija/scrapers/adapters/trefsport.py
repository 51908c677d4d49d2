"""Tref Sport scraper adapter.

A Shopware storefront rendered server-side. Prices use English separators
("RSD 47,000.00*").

Listing: /Outlet, paged by ?p=N
  - .card.product-box
    - a.product-name (name + URL)
    - img.product-image
    - .list-price-price (original), .product-price (sale)
    - .badge-discount span, .badge-manufacturer span
  - .pagination .page-next:not(.disabled)
Product page:
  - .product-detail-configurator-option with an is-combinable input
  - .product-detail-properties-table rows "Pol" and "Kategorije"
  - ol.breadcrumb .breadcrumb-title
"""

import re
from typing import Dict, List

from bs4 import BeautifulSoup

from akcija.models.deal import Deal, Store
from akcija.scrapers.base import DealDetails, DetailScraper, ListScraper, RawListing, StoreSection
from akcija.scrapers.utils.dom import breadcrumb_texts, classify_page, clean_text, image_url, select_attr, select_text
from akcija.scrapers.utils.normalizer import PriceNormalizer, absolute_url

BASE_URL = "https://trefsport.com"
OUTLET_URL = f"{BASE_URL}/Outlet"

_CARD_SELECTOR = ".card.product-box"
_SALE_PRICE_RE = re.compile(r"RSD[\s\xa0]*[\d,]+\.\d+\*")
_NEXT_SELECTOR = '.pagination .page-next:not(.disabled), .pagination-nav .page-next:not(.disabled), a[rel="next"]'


def read_properties(soup: BeautifulSoup) -> Dict[str, str]:
    """Property table as {label: "value, value"} with the trailing colon removed."""
    props = {}
    for row in soup.select(".product-detail-properties-table tr.properties-row"):
        label = select_text(row, "th.properties-label").rstrip(":").strip()
        value_el = row.select_one("td.properties-value")
        if not label or value_el is None:
            continue
        values = [clean_text(span.get_text()) for span in value_el.select("span")]
        props[label] = ", ".join(v for v in values if v) or clean_text(value_el.get_text(" "))
    return props


class TrefSportListScraper(ListScraper):
    """Outlet listing."""

    store = Store.TREFSPORT.value
    base_url = BASE_URL
    uses_browser = False
    max_pages = 50
    price_thousands = ","
    price_decimal = "."

    def sections(self) -> List[StoreSection]:
        return [StoreSection(url=OUTLET_URL, label="outlet")]

    def page_url(self, section: StoreSection, page_number: int) -> str:
        if page_number == 1:
            return section.url
        return f"{section.url}?p={page_number}"

    def parse_listing(self, soup: BeautifulSoup, section: StoreSection) -> List[RawListing]:
        listings = []
        for card in soup.select(_CARD_SELECTOR):
            link = card.select_one("a.product-name")
            if link is None:
                continue
            name = clean_text(link.get_text())
            url = absolute_url(link.get("href"), BASE_URL)

            # The price block also contains the list price; take the starred sale amount
            sale = ""
            for price_el in card.select(".product-price.with-list-price, .product-price"):
                match = _SALE_PRICE_RE.search(price_el.get_text(" "))
                if match:
                    sale = match.group(0)
                    break

            if not name or not url:
                continue

            listings.append(RawListing(
                name=name,
                url=url,
                original_price=select_text(card, ".list-price-price"),
                sale_price=sale,
                image_url=image_url(card.select_one("img.product-image"), BASE_URL),
                brand=select_text(card, ".badge-manufacturer span") or None,
                discount_hint=PriceNormalizer.parse_badge(select_text(card, ".badge-discount span")),
                gender=section.gender,
            ))
        return listings

    def has_next_page(self, soup: BeautifulSoup, section: StoreSection, page_number: int, raw_count: int) -> bool:
        return soup.select_one(_NEXT_SELECTOR) is not None


class TrefSportDetailScraper(DetailScraper):
    """Combinable sizes plus the Pol/Kategorije property rows."""

    store = Store.TREFSPORT.value
    uses_browser = False
    card_selector = _CARD_SELECTOR
    detail_selector = ".product-detail-buy, .product-detail-properties-table, .product-detail-configurator"
    zero_size_policy = "delete"

    def extract_details(self, soup: BeautifulSoup, deal: Deal) -> DealDetails:
        sizes = []
        for option in soup.select(".product-detail-configurator-option"):
            input_el = option.select_one("input.product-detail-configurator-option-input")
            if input_el is None or "is-combinable" not in (input_el.get("class") or []):
                continue
            size = select_text(option, "label")
            if size:
                sizes.append(size)

        props = read_properties(soup)
        crumbs = " ".join(breadcrumb_texts(soup, "ol.breadcrumb .breadcrumb-title"))
        categories, gender = classify_page(
            [props.get("Pol", ""), crumbs, props.get("Kategorije", "")],
            deal.name,
            deal.url,
        )

        description = select_text(soup, ".product-detail-description-text")
        return DealDetails(
            sizes=sizes,
            description=description[:500] or None,
            detail_image_url=image_url(soup.select_one(".gallery-slider-image, .product-detail-media img"), BASE_URL),
            categories=categories,
            gender=gender,
            brand=select_attr(soup, ".product-detail-manufacturer-link", "title"),
        )
