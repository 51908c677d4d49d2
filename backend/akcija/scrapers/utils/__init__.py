"""Scraper utilities: normalization, delays, fetchers and page checks."""

from .normalizer import (
    PriceNormalizer,
    SizeNormalizer,
    absolute_url,
    normalize_url,
    make_deal_id,
)
from .delay import DelayPolicy
from .listing_detector import is_listing_page, ensure_product_page
from .user_agents import get_random_user_agent, get_default_headers, USER_AGENTS


__all__ = [
    # Normalization
    "PriceNormalizer",
    "SizeNormalizer",
    "absolute_url",
    "normalize_url",
    "make_deal_id",
    # Politeness
    "DelayPolicy",
    # Page checks
    "is_listing_page",
    "ensure_product_page",
    # User agents
    "get_random_user_agent",
    "get_default_headers",
    "USER_AGENTS",
]
