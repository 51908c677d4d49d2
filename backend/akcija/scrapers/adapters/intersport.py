"""Intersport scraper adapter.

Server-rendered, so plain HTTP is enough. Three gender sections sorted by
saving percentage; a section ends at the first card below the minimum.

Listing: /zene, /muskarci, /deca with ?sort=saving_percent, paged by &pg=N
  - .product[itemprop="itemListElement"]
    - a[itemprop="url"] (URL), a[itemprop="name"] (name)
    - img[itemprop="image"]
    - .product-old-price (original), span[itemprop="price"] (sale)
    - .percent_flake (badge), meta[itemprop="brand"]
Product page:
  - input.fnc-product-cart-size[data-size]
  - .breadcrumbs a
  - #product-declaration p
"""

import re
from typing import List

from bs4 import BeautifulSoup

from akcija.models.deal import Deal, Gender, Store
from akcija.scrapers.base import DealDetails, DetailScraper, ListScraper, RawListing, StoreSection
from akcija.scrapers.utils.dom import (
    breadcrumb_texts,
    classify_page,
    clean_text,
    image_url,
    select_attr,
    select_text,
    unique,
)
from akcija.scrapers.utils.normalizer import PriceNormalizer, absolute_url

BASE_URL = "https://www.intersport.rs"

SALE_SECTIONS = (
    StoreSection(url=f"{BASE_URL}/zene?sort=saving_percent", label="women", gender=Gender.WOMEN.value),
    StoreSection(url=f"{BASE_URL}/muskarci?sort=saving_percent", label="men", gender=Gender.MEN.value),
    StoreSection(url=f"{BASE_URL}/deca?sort=saving_percent", label="kids", gender=Gender.KIDS.value),
)

_CARD_SELECTOR = '.product[itemprop="itemListElement"]'
_SIZE_TEXT_RE = re.compile(r"^[\dA-Za-z][\dA-Za-z\-/.\s]*$")


class IntersportListScraper(ListScraper):
    """Gender sections sorted by saving percentage."""

    store = Store.INTERSPORT.value
    base_url = BASE_URL
    uses_browser = False
    max_pages = 50
    sorted_by_discount = True

    def sections(self) -> List[StoreSection]:
        return list(SALE_SECTIONS)

    def page_url(self, section: StoreSection, page_number: int) -> str:
        if page_number == 1:
            return section.url
        return f"{section.url}&pg={page_number}"

    def parse_listing(self, soup: BeautifulSoup, section: StoreSection) -> List[RawListing]:
        listings = []
        for card in soup.select(_CARD_SELECTOR):
            url = absolute_url(select_attr(card, 'a[itemprop="url"]', "href"), BASE_URL)
            name = select_text(card, 'a[itemprop="name"]')
            original = select_text(card, ".product-old-price")
            sale = select_text(card, 'span[itemprop="price"]')
            if not (name and url and original and sale):
                continue

            listings.append(RawListing(
                name=name,
                url=url,
                original_price=original,
                sale_price=sale,
                image_url=image_url(card.select_one('img[itemprop="image"]'), BASE_URL),
                brand=select_attr(card, 'meta[itemprop="brand"]', "content"),
                discount_hint=PriceNormalizer.parse_badge(select_text(card, ".percent_flake")),
                gender=section.gender,
            ))
        return listings


class IntersportDetailScraper(DetailScraper):
    """Sizes from the add-to-cart inputs; sold-out apparel is removed."""

    store = Store.INTERSPORT.value
    uses_browser = False
    card_selector = _CARD_SELECTOR
    detail_selector = "input.fnc-product-cart-size, #product-declaration"
    zero_size_policy = "delete"

    def extract_details(self, soup: BeautifulSoup, deal: Deal) -> DealDetails:
        sizes = [
            el["data-size"].strip()
            for el in soup.select("input.fnc-product-cart-size[data-size]")
            if el["data-size"].strip()
        ]
        if not sizes:
            for el in soup.select(".size-list li, .size-values"):
                size = clean_text(el.get_text())
                if size and _SIZE_TEXT_RE.match(size):
                    sizes.append(size)

        crumbs = breadcrumb_texts(soup, ".breadcrumbs a, .breadcrumb a")
        categories, gender = classify_page(crumbs, deal.name, deal.url)

        description = select_text(soup, "#product-declaration p")
        return DealDetails(
            sizes=unique(sizes),
            description=description[:500] or None,
            categories=categories,
            gender=gender,
        )
