"""Buzz Sneakers scraper adapter.

Three gender sections, each a single page grown with a "load more" button.

Listing:
  - .product-item[data-productid] with data-productname, data-productbrand,
    data-productprice, data-productprevprice, data-productdiscount
    - a[href*="/patike/"] or .img-wrapper a (URL)
    - img (src or data-original-img)
  - a.load-more / .show-more
Product page:
  - li[data-productsize-name]:not(.disabled)

A product page without sizes means the item sold out, so footwear and
clothing without sizes are removed from the catalog.
"""

from typing import List

from bs4 import BeautifulSoup

from akcija.classifiers import classify_category
from akcija.models.deal import Deal, Gender, Store
from akcija.scrapers.base import DealDetails, DetailScraper, ListScraper, RawListing, StoreSection
from akcija.scrapers.utils.dom import clean_text, select_attr
from akcija.scrapers.utils.fetchers import BaseFetcher
from akcija.scrapers.utils.normalizer import PriceNormalizer, absolute_url

BASE_URL = "https://www.buzzsneakers.rs"

SALE_SECTIONS = (
    StoreSection(url=f"{BASE_URL}/proizvodi/buzz-sale-men", label="men", gender=Gender.MEN.value),
    StoreSection(url=f"{BASE_URL}/proizvodi/buzz-sale-women", label="women", gender=Gender.WOMEN.value),
    StoreSection(url=f"{BASE_URL}/proizvodi/buzz-sale-kids", label="kids", gender=Gender.KIDS.value),
)

_CARD_SELECTOR = ".product-item[data-productid]"
_LOAD_MORE_SELECTOR = 'a.load-more, button.load-more, .show-more, [class*="load-more"]'


class BuzzListScraper(ListScraper):
    """Men, women and kids sale pages."""

    store = Store.BUZZ.value
    base_url = BASE_URL
    uses_browser = True
    max_pages = 1
    wait_selector = ".product-item, [data-productid]"

    def sections(self) -> List[StoreSection]:
        return list(SALE_SECTIONS)

    async def fetch_page(self, fetcher: BaseFetcher, section: StoreSection, page_number: int) -> str:
        return await fetcher.load_more(
            section.url,
            button_selector=_LOAD_MORE_SELECTOR,
            item_selector=_CARD_SELECTOR,
            max_clicks=50,
            delay=self.delay,
        )

    def parse_listing(self, soup: BeautifulSoup, section: StoreSection) -> List[RawListing]:
        listings = []
        for card in soup.select(_CARD_SELECTOR):
            name = clean_text(card.get("data-productname"))
            href = select_attr(card, 'a[href*="/patike/"], a[href*="/odeca/"], a[href*="/obu"]', "href") or select_attr(
                card, ".img-wrapper a[href]", "href"
            )
            url = absolute_url(href, BASE_URL)
            if not name or not url:
                continue

            img = card.select_one("img")
            img_src = (img.get("src") or img.get("data-original-img")) if img is not None else None

            listings.append(RawListing(
                name=name,
                url=url,
                original_price=card.get("data-productprevprice") or "",
                sale_price=card.get("data-productprice") or "",
                image_url=absolute_url(img_src, BASE_URL),
                brand=card.get("data-productbrand") or None,
                discount_hint=PriceNormalizer.parse_badge(card.get("data-productdiscount")),
                gender=section.gender,
            ))
        return listings

    def has_next_page(self, soup: BeautifulSoup, section: StoreSection, page_number: int, raw_count: int) -> bool:
        return False


class BuzzDetailScraper(DetailScraper):
    """In-stock sizes; gender comes from the sale section and is kept."""

    store = Store.BUZZ.value
    uses_browser = True
    wait_selector = "ul.product-attributes li, [data-productsize-name]"
    card_selector = _CARD_SELECTOR
    detail_selector = "ul.product-attributes, [data-productsize-name]"
    zero_size_policy = "delete"

    def extract_details(self, soup: BeautifulSoup, deal: Deal) -> DealDetails:
        sizes = []
        for li in soup.select("li[data-productsize-name]"):
            if "disabled" in (li.get("class") or []):
                continue
            size = clean_text(li.get_text()) or li.get("data-productsize-name", "").strip()
            if size:
                sizes.append(size)

        category = classify_category(f"{deal.name} {deal.url}")
        return DealDetails(
            sizes=sizes,
            categories=[category] if category else [],
        )
