"""Store scrapers for Serbian sports retailers.

This package provides:
- Base list and detail scraper classes with shared paging and filtering
- One adapter module per store
- Utilities for price parsing, delays, fetchers and page checks
- Factory for creating scrapers by store slug

The orchestrator (``scraper_service``) and scheduler are imported from
their modules directly.
"""

from .base import (
    DealCandidate,
    DealDetails,
    DetailRunStats,
    DetailScraper,
    ListScraper,
    PassState,
    RawListing,
    ScrapeRunResult,
    StorePass,
    StoreSection,
)
from .factory import ScraperFactory, get_scraper_factory, scraper_factory

__all__ = [
    # Base classes
    "ListScraper",
    "DetailScraper",
    # Data structures
    "StoreSection",
    "RawListing",
    "DealCandidate",
    "DealDetails",
    "ScrapeRunResult",
    "DetailRunStats",
    # Pass state machine
    "PassState",
    "StorePass",
    # Factory
    "ScraperFactory",
    "scraper_factory",
    "get_scraper_factory",
]
