"""N Sport scraper adapter.

Two promo listings; page 1 lives at a friendly URL, later pages at an
index.php browse URL with &pg=N.

Listing:
  - .product[itemprop="itemListElement"]
    - a[itemprop="url"], .product-name a
    - img.product-image[data-image-info="main-image"]
    - .product-old-price (original), .product-price (sale)
    - meta[itemprop="brand"]
  - .paginationTG a with ">>" when another page exists
Product page:
  - ul.size-list li input[data-size]
"""

from typing import List

from bs4 import BeautifulSoup

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

BASE_URL = "https://www.n-sport.net"

_BROWSE_URL = f"{BASE_URL}/index.php?mod=catalog&op=browse&view=promo"
# (landing URL, browse URL used for page 2+)
PROMO_PAGES = (
    (
        f"{BASE_URL}/promos/popusti-od-40-do-70-sport.html",
        f"{_BROWSE_URL}&sef_name=popusti-od-40-do-70-sport"
        "&filters%5Bpromo%5D%5B0%5D=Popusti+od+40%25+do+70%25+Sport",
    ),
    (
        f"{BASE_URL}/promos/popusti-do--60.html",
        f"{_BROWSE_URL}&sef_name=popusti-do--60&filters%5Bpromo%5D%5B0%5D=Popusti+do+-60%25",
    ),
)

_CARD_SELECTOR = '.product[itemprop="itemListElement"]'
_NEXT_LABELS = {">>", "»"}


class NSportListScraper(ListScraper):
    """Promo listings, de-duplicated across both promos."""

    store = Store.NSPORT.value
    base_url = BASE_URL
    uses_browser = True
    max_pages = 10
    wait_selector = ".product, .product-item"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._browse_urls = dict(PROMO_PAGES)

    def sections(self) -> List[StoreSection]:
        return [StoreSection(url=landing, label=landing.rsplit("/", 1)[-1]) for landing, _ in PROMO_PAGES]

    def page_url(self, section: StoreSection, page_number: int) -> str:
        if page_number == 1:
            return section.url
        return f"{self._browse_urls[section.url]}&pg={page_number}"

    def parse_listing(self, soup: BeautifulSoup, section: StoreSection) -> List[RawListing]:
        listings = []
        for card in soup.select(_CARD_SELECTOR):
            url = absolute_url(select_attr(card, 'a[itemprop="url"]', "href"), BASE_URL)
            name = select_text(card, ".product-name a, h3.product-name a")
            original = select_text(card, ".product-old-price, .promo-box-old-price")
            sale = ""
            for el in card.select(".product-price, .promo-box-price"):
                if "product-old-price" not in (el.get("class") or []):
                    sale = clean_text(el.get_text(" "))
                    break
            if not (name and url and original and sale):
                continue

            listings.append(RawListing(
                name=name,
                url=url,
                original_price=original,
                sale_price=sale,
                image_url=image_url(card.select_one('img.product-image[data-image-info="main-image"]'), BASE_URL),
                brand=select_attr(card, 'meta[itemprop="brand"]', "content"),
                discount_hint=PriceNormalizer.parse_badge(
                    select_text(card, '.discount-label, .promo-badge, [class*="discount"]')
                ),
                gender=section.gender,
            ))
        return listings

    def has_next_page(self, soup: BeautifulSoup, section: StoreSection, page_number: int, raw_count: int) -> bool:
        return any(clean_text(a.get_text()) in _NEXT_LABELS for a in soup.select(".paginationTG a"))


class NSportDetailScraper(DetailScraper):
    """Sizes from the size list, category and gender from breadcrumbs."""

    store = Store.NSPORT.value
    uses_browser = True
    wait_selector = "ul.size-list li"
    card_selector = _CARD_SELECTOR
    detail_selector = "ul.size-list, .product-details"
    zero_size_policy = "keep"

    def extract_details(self, soup: BeautifulSoup, deal: Deal) -> DealDetails:
        sizes = [
            el["data-size"].strip()
            for el in soup.select("ul.size-list li input[data-size]")
            if not el.has_attr("disabled") and el["data-size"].strip()
        ]
        if not sizes:
            for el in soup.select(".size-select option:not([disabled]), .product-size, .available-size"):
                if "out-of-stock" in (el.get("class") or []):
                    continue
                size = clean_text(el.get_text()) or el.get("value") or ""
                if size and size not in ("-", "Izaberi veličinu"):
                    sizes.append(size)

        crumbs = breadcrumb_texts(soup, ".breadcrumb a, nav.breadcrumbs a")
        title = select_text(soup, "h1, .product-title, .product-name") or deal.name
        categories, gender = classify_page(crumbs, title, deal.url)

        return DealDetails(
            sizes=sizes,
            description=select_text(soup, ".product-description, .description") or None,
            detail_image_url=image_url(soup.select_one(".product-image img, .main-image img, .gallery img"), BASE_URL),
            categories=categories,
            gender=gender,
        )
