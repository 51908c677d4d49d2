"""Custom exception classes for the ingestion pipeline."""


class AkcijaException(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class UnknownStoreError(AkcijaException):
    """Raised when a store slug has no registered scraper."""

    def __init__(self, store: str):
        self.store = store
        super().__init__(f"No scraper registered for store '{store}'")


class ScraperError(AkcijaException):
    """Raised when a scraper fails to fetch or render a page."""

    def __init__(self, store: str, message: str):
        self.store = store
        super().__init__(f"Scraper error for {store}: {message}")


class BlockedError(ScraperError):
    """Raised when a store answers with an anti-bot interstitial."""

    def __init__(self, store: str, url: str):
        self.url = url
        super().__init__(store, f"blocked by anti-bot protection at {url}")


class ExtractionError(AkcijaException):
    """Raised when page markup does not have the expected shape."""

    def __init__(self, store: str, message: str):
        self.store = store
        super().__init__(f"Extraction error for {store}: {message}")


class ListingPageError(ExtractionError):
    """Raised when a product URL renders a multi-product listing."""

    def __init__(self, store: str, url: str, card_count: int):
        self.url = url
        self.card_count = card_count
        super().__init__(store, f"{url} rendered a listing with {card_count} product cards")


class MixedSizesError(ExtractionError):
    """Raised when a product page lists shoe and clothing sizes together."""

    def __init__(self, store: str, url: str, sizes: list):
        self.url = url
        self.sizes = sizes
        super().__init__(store, f"{url} mixes shoe and clothing sizes: {', '.join(sizes)}")


class PriceParseError(AkcijaException):
    """Raised when a price string cannot be turned into a positive amount."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Cannot parse price from '{raw}'")


class PersistenceError(AkcijaException):
    """Raised when the catalog cannot be written."""
