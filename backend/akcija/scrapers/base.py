"""Base scraper interfaces.

Every retailer is one ``ListScraper`` (sale listings to candidate deals)
and optionally one ``DetailScraper`` (product pages to sizes, description,
category and gender). Store modules implement only the markup-specific
hooks; pagination, filtering, persistence and failure handling live here
so they behave the same for every store.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Set, Tuple
from urllib.parse import urlparse

import structlog
from bs4 import BeautifulSoup

from akcija.classifiers import (
    classify_first,
    extract_brand_from_name,
    is_apparel,
    normalize_brand,
    resolve_gender,
)
from akcija.config import settings
from akcija.core.exceptions import (
    AkcijaException,
    BlockedError,
    ExtractionError,
    ListingPageError,
    MixedSizesError,
    PriceParseError,
    ScraperError,
)
from akcija.models.deal import Gender
from akcija.scrapers.utils.delay import DelayPolicy
from akcija.scrapers.utils.fetchers import BaseFetcher, BrowserFetcher, HttpFetcher
from akcija.scrapers.utils.listing_detector import ensure_product_page
from akcija.scrapers.utils.normalizer import PriceNormalizer, SizeNormalizer, make_deal_id, normalize_url

if TYPE_CHECKING:
    from akcija.models.deal import Deal
    from akcija.services.deal_writer import DealWriter


logger = structlog.get_logger(__name__)

_GENDER_VALUES = {g.value for g in Gender}


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StoreSection:
    """One sale entry point of a store (e.g. the women's outlet)."""

    url: str
    label: str = "sale"
    gender: Optional[str] = None  # attributed to every card in the section


@dataclass
class RawListing:
    """A product card as extracted from a listing page, before validation."""

    name: str
    url: str
    original_price: Optional[str]
    sale_price: Optional[str]
    image_url: Optional[str] = None
    brand: Optional[str] = None
    discount_hint: Optional[int] = None  # site badge, used only to stop paging
    gender: Optional[str] = None
    gender_hints: List[str] = field(default_factory=list)
    category_hints: List[str] = field(default_factory=list)


@dataclass
class DealCandidate:
    """A validated deal ready to be upserted.

    ``discount_percent`` is always derived from the two prices.
    """

    store: str
    name: str
    url: str
    original_price: int
    sale_price: int
    image_url: Optional[str] = None
    brand: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    gender: str = Gender.UNISEX.value
    discount_percent: int = field(init=False)

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.name:
            raise ValueError("name is required")
        if not self.url:
            raise ValueError("url is required")
        if not PriceNormalizer.is_valid_pair(self.original_price, self.sale_price):
            raise ValueError(
                f"sale price {self.sale_price} must be positive and below original {self.original_price}"
            )
        if self.gender not in _GENDER_VALUES:
            raise ValueError(f"Invalid gender: {self.gender}")
        self.discount_percent = PriceNormalizer.calc_discount(self.original_price, self.sale_price)

    @property
    def id(self) -> str:
        return make_deal_id(self.store, self.url)


@dataclass
class DealDetails:
    """Enrichment extracted from a product page."""

    sizes: List[str] = field(default_factory=list)
    description: Optional[str] = None
    detail_image_url: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    gender: Optional[str] = None
    brand: Optional[str] = None


@dataclass
class ScrapeRunResult:
    """Outcome of one store's list pass."""

    store: str
    started_at: datetime
    total_scraped: int = 0
    filtered_count: int = 0
    errors: List[str] = field(default_factory=list)
    completed_at: Optional[datetime] = None
    state: str = "pending"
    cleanup_deleted: Optional[int] = None


@dataclass
class DetailRunStats:
    """Counters for one store's detail pass."""

    pending: int = 0
    enriched: int = 0
    deleted: int = 0
    listing_pages: int = 0
    mixed_sizes: int = 0
    errors: int = 0


# ---------------------------------------------------------------------------
# Pass state machine
# ---------------------------------------------------------------------------


class PassState(str, Enum):
    """States of a list pass."""

    PENDING = "pending"
    PAGINATING = "paginating"
    EXTRACTING = "extracting"
    FILTERING = "filtering"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: Dict[PassState, Set[PassState]] = {
    PassState.PENDING: {PassState.PAGINATING, PassState.DONE, PassState.FAILED},
    PassState.PAGINATING: {PassState.EXTRACTING, PassState.PAGINATING, PassState.DONE, PassState.FAILED},
    PassState.EXTRACTING: {PassState.FILTERING, PassState.PAGINATING, PassState.DONE, PassState.FAILED},
    PassState.FILTERING: {PassState.PERSISTING, PassState.FAILED},
    PassState.PERSISTING: {PassState.PAGINATING, PassState.DONE, PassState.FAILED},
    PassState.DONE: set(),
    PassState.FAILED: set(),
}


class StorePass:
    """Tracks the state of one list pass and rejects illegal transitions."""

    def __init__(self, store: str):
        self.store = store
        self.state = PassState.PENDING
        self.history: List[PassState] = [PassState.PENDING]

    def advance(self, new_state: PassState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"{self.store}: illegal transition {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    @property
    def finished(self) -> bool:
        return self.state in (PassState.DONE, PassState.FAILED)


# ---------------------------------------------------------------------------
# List scraper
# ---------------------------------------------------------------------------


class ListScraper(ABC):
    """Abstract base class for store sale-listing scrapers.

    Subclasses define ``sections()``, ``page_url()`` and
    ``parse_listing()``; stores with a "load more" button or unusual
    paging override ``fetch_page()`` and ``has_next_page()``.
    """

    store: str = ""  # Must be overridden in subclass (e.g., "djaksport")
    base_url: str = ""
    uses_browser: bool = True
    max_pages: int = 10
    page_size: Optional[int] = None
    wait_selector: Optional[str] = None
    # Listings sorted by discount descending stop at the first card below threshold
    sorted_by_discount: bool = False
    price_thousands: str = "."
    price_decimal: str = ","

    def __init__(
        self,
        fetcher: Optional[BaseFetcher] = None,
        delay: Optional[DelayPolicy] = None,
        min_discount: Optional[int] = None,
    ):
        self._fetcher = fetcher
        self.delay = delay or (DelayPolicy.browser() if self.uses_browser else DelayPolicy.http())
        self.min_discount = settings.MIN_DISCOUNT_PERCENT if min_discount is None else min_discount
        self.logger = logger.bind(store=self.store, scraper="list")

    # -- hooks ---------------------------------------------------------------

    @abstractmethod
    def sections(self) -> List[StoreSection]:
        """Sale entry points, scraped in order."""

    def page_url(self, section: StoreSection, page_number: int) -> str:
        """URL of the given 1-based page within a section."""
        return section.url

    @abstractmethod
    def parse_listing(self, soup: BeautifulSoup, section: StoreSection) -> List[RawListing]:
        """Extract raw product cards from a listing page."""

    def has_next_page(self, soup: BeautifulSoup, section: StoreSection, page_number: int, raw_count: int) -> bool:
        """Whether another page follows. Defaults to 'the page was full'."""
        if self.page_size is not None:
            return raw_count >= self.page_size
        return raw_count > 0

    async def fetch_page(self, fetcher: BaseFetcher, section: StoreSection, page_number: int) -> str:
        """Fetch the HTML of one listing page."""
        return await fetcher.get(self.page_url(section, page_number), self.wait_selector)

    def create_fetcher(self) -> BaseFetcher:
        if self.uses_browser:
            return BrowserFetcher(self.store)
        return HttpFetcher(self.store)

    # -- candidate building --------------------------------------------------

    def parse_price(self, raw: Optional[str]) -> int:
        price = PriceNormalizer.parse_price(raw, self.price_thousands, self.price_decimal)
        if price is None:
            raise PriceParseError(raw or "")
        return price

    def to_candidate(self, raw: RawListing) -> DealCandidate:
        """Validate a raw card and classify it.

        Raises:
            PriceParseError: If either price is missing or unparseable
            ValueError: If the sale price is not below the original price
        """
        original = self.parse_price(raw.original_price)
        sale = self.parse_price(raw.sale_price)

        brand = normalize_brand(raw.brand) or extract_brand_from_name(raw.name)

        url_path = urlparse(raw.url).path.replace("-", " ").replace("/", " ")
        category = classify_first([*raw.category_hints, url_path, raw.name])

        if raw.gender in _GENDER_VALUES:
            gender = raw.gender
        else:
            gender, _tier = resolve_gender(*raw.gender_hints, name=raw.name, url=raw.url)

        return DealCandidate(
            store=self.store,
            name=raw.name.strip(),
            url=normalize_url(raw.url),
            original_price=original,
            sale_price=sale,
            image_url=raw.image_url,
            brand=brand,
            categories=[category] if category else [],
            gender=gender,
        )

    def filter_listings(
        self,
        raws: List[RawListing],
        seen_urls: Set[str],
    ) -> Tuple[List[DealCandidate], bool]:
        """Turn raw cards into candidates that meet the discount threshold.

        Returns:
            Tuple of (candidates, stop_section). ``stop_section`` is True when a
            discount-sorted listing reached a card below the threshold.
        """
        candidates: List[DealCandidate] = []
        for raw in raws:
            if normalize_url(raw.url) in seen_urls:
                continue

            try:
                candidate = self.to_candidate(raw)
            except (PriceParseError, ValueError) as e:
                self.logger.debug("listing_dropped", url=raw.url, reason=str(e))
                continue

            discount = candidate.discount_percent
            if discount < self.min_discount:
                hint = raw.discount_hint if raw.discount_hint is not None else discount
                if self.sorted_by_discount and hint < self.min_discount:
                    return candidates, True
                continue

            seen_urls.add(candidate.url)
            candidates.append(candidate)
        return candidates, False

    # -- pass driver ---------------------------------------------------------

    async def scrape_store(self, writer: "DealWriter") -> ScrapeRunResult:
        """Run a full list pass and persist qualifying deals.

        Page fetch failures end the pass early; deals already persisted
        are kept, the run is logged, but stale cleanup is skipped because
        the catalog was not fully observed. Any other exception is logged
        as a failed run before it propagates.
        """
        run = ScrapeRunResult(store=self.store, started_at=datetime.now(timezone.utc))
        state = StorePass(self.store)
        seen_urls: Set[str] = set()
        fetch_failed = False

        self.logger.info("list_pass_started", min_discount=self.min_discount)

        fetcher = self._fetcher or self.create_fetcher()
        try:
            async with fetcher:
                for section in self.sections():
                    if fetch_failed:
                        break
                    fetch_failed = await self._scrape_section(fetcher, section, state, run, seen_urls, writer)
        except AkcijaException as e:
            # Fetcher startup failures land here
            run.errors.append(str(e))
            fetch_failed = True
            self.logger.error("list_pass_aborted", error=str(e))
        except Exception as e:
            run.errors.append(f"{type(e).__name__}: {e}")
            state.advance(PassState.FAILED)
            run.state = state.state.value
            run.completed_at = datetime.now(timezone.utc)
            self.logger.error("list_pass_crashed", error=str(e), exc_info=True)
            await writer.log_run(run)
            await writer.commit()
            raise

        if fetch_failed and run.filtered_count == 0:
            state.advance(PassState.FAILED)
        else:
            state.advance(PassState.DONE)
        run.state = state.state.value
        run.completed_at = datetime.now(timezone.utc)

        await writer.log_run(run)
        if not fetch_failed:
            run.cleanup_deleted = await writer.cleanup_stale(self.store, run.started_at, run.filtered_count)
        else:
            self.logger.warning("cleanup_skipped_partial_run", errors=len(run.errors))
        await writer.commit()

        self.logger.info(
            "list_pass_complete",
            state=run.state,
            total_scraped=run.total_scraped,
            filtered_count=run.filtered_count,
            errors=len(run.errors),
            cleanup_deleted=run.cleanup_deleted,
        )
        return run

    async def _scrape_section(
        self,
        fetcher: BaseFetcher,
        section: StoreSection,
        state: StorePass,
        run: ScrapeRunResult,
        seen_urls: Set[str],
        writer: "DealWriter",
    ) -> bool:
        """Page through one section. Returns True if a page fetch failed."""
        page_number = 1
        section_urls: Set[str] = set()
        while page_number <= self.max_pages:
            state.advance(PassState.PAGINATING)
            try:
                html = await self.fetch_page(fetcher, section, page_number)
            except ScraperError as e:
                run.errors.append(f"{section.label} page {page_number}: {e.message}")
                self.logger.error("page_fetch_failed", section=section.label, page=page_number, error=str(e))
                return True

            state.advance(PassState.EXTRACTING)
            soup = BeautifulSoup(html, "html.parser")
            raws = self.parse_listing(soup, section)
            if not raws:
                self.logger.info("empty_page", section=section.label, page=page_number)
                break
            page_urls = {raw.url for raw in raws}
            if page_urls <= section_urls:
                # Past the last page some stores repeat it
                self.logger.info("duplicate_page", section=section.label, page=page_number)
                break
            section_urls |= page_urls
            run.total_scraped += len(raws)

            state.advance(PassState.FILTERING)
            candidates, stop = self.filter_listings(raws, seen_urls)

            state.advance(PassState.PERSISTING)
            for candidate in candidates:
                try:
                    await writer.upsert_deal(candidate)
                    run.filtered_count += 1
                except AkcijaException as e:
                    run.errors.append(f"{candidate.url}: {e.message}")
                    self.logger.error("deal_upsert_failed", url=candidate.url, error=str(e))
            await writer.commit()

            self.logger.info(
                "page_scraped",
                section=section.label,
                page=page_number,
                cards=len(raws),
                kept=len(candidates),
                total_kept=run.filtered_count,
            )

            if stop:
                self.logger.info("below_threshold_stop", section=section.label, page=page_number)
                break
            if not self.has_next_page(soup, section, page_number, len(raws)):
                break

            page_number += 1
            await self.delay.wait()

        await self.delay.wait()
        return False


# ---------------------------------------------------------------------------
# Detail scraper
# ---------------------------------------------------------------------------


class DetailScraper(ABC):
    """Abstract base class for product-page enrichment.

    ``zero_size_policy`` decides what happens when a fully loaded product
    page lists no sizes: "keep" updates the deal with what was found,
    "delete" removes footwear and clothing deals as out of stock.
    """

    store: str = ""
    uses_browser: bool = True
    wait_selector: Optional[str] = None
    # Cards that identify a listing page, and the block only a product page has
    card_selector: str = ""
    detail_selector: Optional[str] = None
    zero_size_policy: str = "keep"

    def __init__(
        self,
        fetcher: Optional[BaseFetcher] = None,
        delay: Optional[DelayPolicy] = None,
        commit_batch: Optional[int] = None,
    ):
        self._fetcher = fetcher
        self.delay = delay or DelayPolicy.detail()
        self.commit_batch = commit_batch or settings.DETAIL_COMMIT_BATCH
        self.stats = DetailRunStats()
        self.logger = logger.bind(store=self.store, scraper="detail")

    @abstractmethod
    def extract_details(self, soup: BeautifulSoup, deal: "Deal") -> DealDetails:
        """Extract enrichment from a product page."""

    def create_fetcher(self) -> BaseFetcher:
        if self.uses_browser:
            return BrowserFetcher(self.store)
        return HttpFetcher(self.store)

    def parse_product_page(self, html: str, deal: "Deal") -> DealDetails:
        """Check page shape, extract details and sanitize sizes.

        Raises:
            ListingPageError: If the URL rendered a multi-product listing
            MixedSizesError: If the page lists shoe and clothing sizes together
            ExtractionError: If the store-specific extraction fails
        """
        soup = BeautifulSoup(html, "html.parser")
        if self.card_selector:
            ensure_product_page(soup, self.store, deal.url, self.card_selector, self.detail_selector)

        details = self.extract_details(soup, deal)
        sizes = SizeNormalizer.normalize(details.sizes)
        if SizeNormalizer.is_mixed(sizes):
            # Picked up sizes of other products; nothing on the page is trusted
            raise MixedSizesError(self.store, deal.url, sizes)
        details.sizes = sizes
        return details

    def _should_delete(self, deal: "Deal", details: DealDetails) -> bool:
        if self.zero_size_policy != "delete" or details.sizes:
            return False
        categories = details.categories or list(deal.categories or [])
        if not categories:
            category = classify_first([f"{deal.name} {deal.url}"])
            categories = [category] if category else []
        return is_apparel(categories)

    async def enrich_pending(
        self,
        writer: "DealWriter",
        force: bool = False,
        max_age_hours: Optional[int] = None,
    ) -> int:
        """Enrich deals that lack a successful detail pass.

        Args:
            writer: Persistence writer bound to an open session
            force: Re-scrape every deal of the store
            max_age_hours: Also refresh deals enriched longer ago than this

        Returns:
            Number of deals enriched
        """
        self.stats = DetailRunStats()
        if max_age_hours is None:
            max_age_hours = settings.DETAIL_MAX_AGE_HOURS
        deals = await writer.get_pending_details(self.store, force=force, max_age_hours=max_age_hours)
        self.stats.pending = len(deals)
        self.logger.info("detail_pass_started", pending=len(deals), force=force)
        if not deals:
            return 0

        fetcher = self._fetcher or self.create_fetcher()
        processed = 0
        try:
            async with fetcher:
                for deal in deals:
                    await self._enrich_one(fetcher, writer, deal)
                    processed += 1
                    if processed % self.commit_batch == 0:
                        await writer.commit()
                        self.logger.info("detail_progress_saved", processed=processed, total=len(deals))
                    await self.delay.wait()
        finally:
            await writer.commit()

        self.logger.info(
            "detail_pass_complete",
            pending=self.stats.pending,
            enriched=self.stats.enriched,
            deleted=self.stats.deleted,
            listing_pages=self.stats.listing_pages,
            mixed_sizes=self.stats.mixed_sizes,
            errors=self.stats.errors,
        )
        return self.stats.enriched

    async def _enrich_one(self, fetcher: BaseFetcher, writer: "DealWriter", deal: "Deal") -> None:
        url = deal.url
        try:
            html = await fetcher.get(url, self.wait_selector)
            details = self.parse_product_page(html, deal)
        except BlockedError:
            raise
        except ListingPageError as e:
            self.stats.listing_pages += 1
            self.logger.warning("listing_page_skipped", url=url, cards=e.card_count)
            return
        except MixedSizesError as e:
            self.stats.mixed_sizes += 1
            self.logger.warning("mixed_sizes_skipped", url=url, sizes=e.sizes)
            return
        except (ScraperError, ExtractionError) as e:
            self.stats.errors += 1
            self.logger.error("detail_fetch_failed", url=url, error=str(e))
            return

        if self._should_delete(deal, details):
            await writer.delete_by_url(url)
            self.stats.deleted += 1
            self.logger.info("out_of_stock_deleted", url=url)
            return

        await writer.update_details(url, details)
        self.stats.enriched += 1
        self.logger.debug(
            "deal_enriched",
            url=url,
            sizes=len(details.sizes),
            categories=details.categories,
            gender=details.gender,
        )
