"""Planeta Sport scraper adapter.

Magento storefront; the listing needs a browser to render prices.

Listing: /snizeno, paginated with ?page=N
  - .product-item-info
    - .product-item-name a (name + URL, only .html URLs are products)
    - .normal-price.special-price .price (sale)
    - .normal-price.old-price .price or .regular-price .price (original)
    - .product-brand a
Product page:
  - #product-attribute-specs-table rows: BREND, POL, VRSTA, SPORT
  - .swatch-attribute.size .swatch-option
"""

from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from akcija.classifiers import classify_category, classify_gender, normalize_brand, normalize_text
from akcija.models.deal import Deal, Gender, Store
from akcija.scrapers.base import DealDetails, DetailScraper, ListScraper, RawListing, StoreSection
from akcija.scrapers.utils.dom import clean_text, image_url, select_text, unique
from akcija.scrapers.utils.normalizer import PriceNormalizer, absolute_url

BASE_URL = "https://planetasport.rs"
SNIZENO_URL = f"{BASE_URL}/snizeno"

_CARD_SELECTOR = ".product-item-info"

# Planeta "Vrsta" values, keyed without diacritics
VRSTA_CATEGORIES: Dict[str, str] = {
    "patike": "obuca/patike",
    "cipele": "obuca/cipele",
    "cizme": "obuca/cizme",
    "papuce": "obuca/papuce",
    "sandale": "obuca/sandale",
    "japanke": "obuca/papuce",
    "majice kratak rukav": "odeca/majice",
    "majice dugih rukava": "odeca/majice",
    "majice": "odeca/majice",
    "duksevi": "odeca/duksevi",
    "dukserice": "odeca/duksevi",
    "gornji delovi trenerki": "odeca/duksevi",
    "jakne": "odeca/jakne",
    "vetrovke": "odeca/jakne",
    "prsluci": "odeca/prsluci",
    "pantalone": "odeca/pantalone",
    "trenerke": "odeca/trenerke",
    "donji delovi trenerki": "odeca/trenerke",
    "helanke": "odeca/helanke",
    "sortevi": "odeca/sortevi",
    "bermude": "odeca/sortevi",
    "kupaci kostimi": "odeca/kupaci",
    "kape": "oprema/kape",
    "kacketi": "oprema/kape",
    "carape": "oprema/carape",
    "torbe": "oprema/torbe",
    "rancevi": "oprema/torbe",
    "rukavice": "oprema/rukavice",
    "salovi": "oprema/salovi",
}


def map_vrsta(value: str) -> Optional[str]:
    """Map a "Vrsta" value to a category path, falling back to the classifier."""
    key = normalize_text(value)
    return VRSTA_CATEGORIES.get(key) or classify_category(value)


def map_pol(value: str) -> Optional[str]:
    if normalize_text(value) == "unisex":
        return Gender.UNISEX.value
    return classify_gender(value)


class PlanetaListScraper(ListScraper):
    """Sale listing at /snizeno."""

    store = Store.PLANETA.value
    base_url = BASE_URL
    uses_browser = True
    max_pages = 10
    wait_selector = _CARD_SELECTOR

    def sections(self) -> List[StoreSection]:
        return [StoreSection(url=SNIZENO_URL, label="snizeno")]

    def page_url(self, section: StoreSection, page_number: int) -> str:
        if page_number == 1:
            return section.url
        return f"{section.url}?page={page_number}"

    def parse_listing(self, soup: BeautifulSoup, section: StoreSection) -> List[RawListing]:
        listings = []
        for card in soup.select(_CARD_SELECTOR):
            name_link = card.select_one(".product-item-name a")
            link = card.select_one("a.product-img") or name_link
            if name_link is None or link is None:
                continue
            name = clean_text(name_link.get_text(" "))
            url = absolute_url(link.get("href"), BASE_URL)
            if not name or not url or ".html" not in url:
                continue

            sale = select_text(card, ".normal-price.special-price .price, .zsdev-special-price .price")
            # No special price means the card is not discounted
            original = ""
            if sale:
                original = select_text(card, ".normal-price.old-price .price") or select_text(
                    card, ".normal-price.regular-price .price"
                )

            listings.append(RawListing(
                name=name,
                url=url,
                original_price=original,
                sale_price=sale,
                image_url=image_url(card.select_one("img.product-image-photo"), BASE_URL),
                brand=select_text(card, ".product-brand a") or None,
                discount_hint=PriceNormalizer.parse_badge(select_text(card, ".action-box.action-box-1")),
                gender=section.gender,
            ))
        return listings

    def has_next_page(self, soup: BeautifulSoup, section: StoreSection, page_number: int, raw_count: int) -> bool:
        if soup.select_one('a.next, a[rel="next"], .pagination .next a'):
            return True
        return raw_count > 0


class PlanetaDetailScraper(DetailScraper):
    """Brand, gender, category and sport from the Planeta specification table."""

    store = Store.PLANETA.value
    uses_browser = True
    wait_selector = "#product-attribute-specs-table"
    card_selector = _CARD_SELECTOR
    detail_selector = ".product-info-main, #product-attribute-specs-table"
    zero_size_policy = "keep"

    @staticmethod
    def read_specs(soup: BeautifulSoup) -> Dict[str, str]:
        """Specification table as {LABEL: value}."""
        specs: Dict[str, str] = {}
        for row in soup.select("#product-attribute-specs-table tr"):
            label = row.select_one("th")
            value = row.select_one("td")
            if label is None or value is None:
                continue
            link = value.select_one("a")
            text = clean_text((link or value).get_text(" "))
            specs[clean_text(label.get_text()).upper()] = text
        return specs

    def extract_details(self, soup: BeautifulSoup, deal: Deal) -> DealDetails:
        specs = self.read_specs(soup)

        categories = []
        for vrsta in specs.get("VRSTA", "").split(","):
            if vrsta.strip():
                path = map_vrsta(vrsta.strip())
                if path:
                    categories.append(path)
        if specs.get("SPORT"):
            categories.append(f"sport/{normalize_text(specs['SPORT']).replace(' ', '-')}")

        sizes = []
        for el in soup.select(".swatch-attribute.size .swatch-option, .size-option"):
            classes = el.get("class") or []
            if "disabled" in classes or "unavailable" in classes:
                continue
            size = el.get("data-option-label") or clean_text(el.get_text())
            if size:
                sizes.append(size)
        if not sizes:
            for opt in soup.select('select[id*="size"] option, select[name*="size"] option'):
                if opt.get("value") and not opt.has_attr("disabled"):
                    sizes.append(clean_text(opt.get_text()))

        return DealDetails(
            sizes=sizes,
            description=select_text(soup, ".product.attribute.description .value") or None,
            detail_image_url=image_url(soup.select_one(".gallery-placeholder img, .product.media img"), BASE_URL),
            categories=unique(categories),
            gender=map_pol(specs["POL"]) if specs.get("POL") else None,
            brand=normalize_brand(specs.get("BREND")),
        )
