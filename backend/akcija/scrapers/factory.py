"""Factory for creating list and detail scrapers by store slug."""

from typing import Dict, List, Optional, Type

import structlog

from akcija.core.exceptions import UnknownStoreError
from akcija.scrapers.base import DetailScraper, ListScraper
from akcija.scrapers.utils.delay import DelayPolicy

logger = structlog.get_logger(__name__)


class ScraperFactory:
    """Registry of store scraper classes.

    Stores run in registration order, which is also the order of the
    daily run.
    """

    def __init__(self):
        self._list_registry: Dict[str, Type[ListScraper]] = {}
        self._detail_registry: Dict[str, Type[DetailScraper]] = {}

    def register(
        self,
        store: str,
        list_class: Type[ListScraper],
        detail_class: Optional[Type[DetailScraper]] = None,
    ) -> None:
        """Register the scraper classes for a store.

        Args:
            store: Store slug (e.g., "djaksport")
            list_class: ListScraper subclass for the store's sale listings
            detail_class: Optional DetailScraper subclass for product pages

        Raises:
            ValueError: If a class does not inherit from the expected base
        """
        if not issubclass(list_class, ListScraper):
            raise ValueError(f"List scraper must inherit from ListScraper: {list_class}")
        if detail_class is not None and not issubclass(detail_class, DetailScraper):
            raise ValueError(f"Detail scraper must inherit from DetailScraper: {detail_class}")

        self._list_registry[store] = list_class
        if detail_class is not None:
            self._detail_registry[store] = detail_class
        logger.debug("scraper_registered", store=store, has_details=detail_class is not None)

    def create_list_scraper(self, store: str, delay: Optional[DelayPolicy] = None, **kwargs) -> ListScraper:
        """Instantiate the list scraper for a store.

        Raises:
            UnknownStoreError: If no list scraper is registered
        """
        scraper_class = self._list_registry.get(store)
        if scraper_class is None:
            raise UnknownStoreError(store)
        return scraper_class(delay=delay, **kwargs)

    def create_detail_scraper(self, store: str, delay: Optional[DelayPolicy] = None, **kwargs) -> DetailScraper:
        """Instantiate the detail scraper for a store.

        Raises:
            UnknownStoreError: If no detail scraper is registered
        """
        scraper_class = self._detail_registry.get(store)
        if scraper_class is None:
            raise UnknownStoreError(store)
        return scraper_class(delay=delay, **kwargs)

    def get_registered_stores(self) -> List[str]:
        return list(self._list_registry)

    def get_detail_stores(self) -> List[str]:
        return list(self._detail_registry)

    def has_store(self, store: str) -> bool:
        return store in self._list_registry


# Global factory instance
scraper_factory = ScraperFactory()


def get_scraper_factory() -> ScraperFactory:
    """Get the global scraper factory, registering stores on first use."""
    if not scraper_factory.get_registered_stores():
        from akcija.scrapers.register_scrapers import register_all_scrapers

        register_all_scrapers(scraper_factory)
    return scraper_factory
