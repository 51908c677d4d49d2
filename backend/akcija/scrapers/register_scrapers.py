"""Register every store with the scraper factory.

The order below is the order of a full run.
"""

from typing import Optional

import structlog

from akcija.models.deal import Store
from akcija.scrapers.adapters import (
    BuzzDetailScraper,
    BuzzListScraper,
    DjakSportDetailScraper,
    DjakSportListScraper,
    IntersportDetailScraper,
    IntersportListScraper,
    NSportDetailScraper,
    NSportListScraper,
    OfficeShoesDetailScraper,
    OfficeShoesListScraper,
    PlanetaDetailScraper,
    PlanetaListScraper,
    SportVisionDetailScraper,
    SportVisionListScraper,
    TrefSportDetailScraper,
    TrefSportListScraper,
)
from akcija.scrapers.factory import ScraperFactory

logger = structlog.get_logger(__name__)

STORE_SCRAPERS = (
    (Store.DJAKSPORT.value, DjakSportListScraper, DjakSportDetailScraper),
    (Store.PLANETA.value, PlanetaListScraper, PlanetaDetailScraper),
    (Store.SPORTVISION.value, SportVisionListScraper, SportVisionDetailScraper),
    (Store.NSPORT.value, NSportListScraper, NSportDetailScraper),
    (Store.BUZZ.value, BuzzListScraper, BuzzDetailScraper),
    (Store.OFFICESHOES.value, OfficeShoesListScraper, OfficeShoesDetailScraper),
    (Store.INTERSPORT.value, IntersportListScraper, IntersportDetailScraper),
    (Store.TREFSPORT.value, TrefSportListScraper, TrefSportDetailScraper),
)


def register_all_scrapers(factory: Optional[ScraperFactory] = None) -> ScraperFactory:
    """Register all store scrapers with the factory.

    Args:
        factory: Factory to populate; the global factory when omitted

    Returns:
        The populated factory
    """
    if factory is None:
        from akcija.scrapers.factory import scraper_factory

        factory = scraper_factory

    for store, list_class, detail_class in STORE_SCRAPERS:
        factory.register(store, list_class, detail_class)

    logger.info(
        "all_scrapers_registered",
        count=len(factory.get_registered_stores()),
        stores=factory.get_registered_stores(),
    )
    return factory
