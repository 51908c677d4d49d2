"""Detect product URLs that render a multi-product listing.

Retailers redirect discontinued products to their category page. Sizes
extracted from such a page belong to other products, so detail
extraction must stop before reading them.
"""

from typing import Optional

from bs4 import BeautifulSoup

from akcija.core.exceptions import ListingPageError


def count_cards(soup: BeautifulSoup, card_selector: str) -> int:
    """Number of product cards matching ``card_selector``."""
    return len(soup.select(card_selector))


def is_listing_page(
    soup: BeautifulSoup,
    card_selector: str,
    detail_selector: Optional[str] = None,
) -> bool:
    """True when the page shows several product cards and no product detail block.

    Product pages often carry a "related products" strip, so cards alone
    are not enough when ``detail_selector`` is given: the detail block
    must also be missing.
    """
    if count_cards(soup, card_selector) < 2:
        return False
    if detail_selector and soup.select_one(detail_selector) is not None:
        return False
    return True


def ensure_product_page(
    soup: BeautifulSoup,
    store: str,
    url: str,
    card_selector: str,
    detail_selector: Optional[str] = None,
) -> None:
    """Raise ``ListingPageError`` if ``soup`` is a listing, not a product page."""
    if is_listing_page(soup, card_selector, detail_selector):
        raise ListingPageError(store, url, count_cards(soup, card_selector))
