"""Scraper orchestration service.

Runs list passes for every store one after another, then detail passes
the same way. Each store gets its own session; a store that raises is
recorded as failed and the run moves on to the next store.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from akcija.db.session import async_session_factory
from akcija.scrapers.base import DetailRunStats, PassState, ScrapeRunResult
from akcija.scrapers.factory import ScraperFactory, get_scraper_factory
from akcija.scrapers.utils.delay import DelayPolicy
from akcija.services.catalog_maintenance import CatalogMaintenance, ReclassifyStats
from akcija.services.deal_writer import DealWriter

logger = structlog.get_logger(__name__)


@dataclass
class RunSummary:
    """Outcome of one orchestrated run.

    Entries are "<phase>:<store>", e.g. "list:djaksport" or "details:buzz".
    """

    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failed

    def format(self) -> str:
        minutes, seconds = divmod(int(self.elapsed_seconds), 60)
        lines = [
            f"Run finished in {minutes}m {seconds}s",
            f"Succeeded ({len(self.succeeded)}): {', '.join(self.succeeded) or '-'}",
            f"Failed ({len(self.failed)}): {', '.join(self.failed) or '-'}",
        ]
        return "\n".join(lines)


class ScraperService:
    """Service for running store scrapers against the database.

    Args:
        session_factory: Async session factory; the application factory by default
        factory: Scraper registry; the global factory by default
        delay: Delay policy forced on every scraper (tests pass ``DelayPolicy.none()``)
    """

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        factory: Optional[ScraperFactory] = None,
        delay: Optional[DelayPolicy] = None,
    ):
        self.session_factory = session_factory or async_session_factory
        self.factory = factory or get_scraper_factory()
        self.delay = delay
        self.logger = logger.bind(service="scraper_service")

    async def run_list(self, store: str) -> ScrapeRunResult:
        """Run the list pass for one store.

        Raises:
            UnknownStoreError: If the store is not registered
        """
        scraper = self.factory.create_list_scraper(store, delay=self.delay)
        async with self.session_factory() as db:
            return await scraper.scrape_store(DealWriter(db))

    async def run_details(self, store: str, force: bool = False) -> DetailRunStats:
        """Run the detail pass for one store.

        Raises:
            UnknownStoreError: If the store has no detail scraper
            BlockedError: If the store served an anti-bot page
        """
        scraper = self.factory.create_detail_scraper(store, delay=self.delay)
        async with self.session_factory() as db:
            await scraper.enrich_pending(DealWriter(db), force=force)
        return scraper.stats

    async def run_all(
        self,
        stores: Optional[Sequence[str]] = None,
        include_details: bool = True,
        force: bool = False,
    ) -> RunSummary:
        """Run every list pass, then every detail pass, one store at a time.

        Args:
            stores: Store slugs to run; all registered stores when omitted
            include_details: Also run detail passes after the list passes
            force: Re-enrich every deal instead of only pending ones

        Returns:
            RunSummary with succeeded and failed "<phase>:<store>" entries
        """
        started = time.monotonic()
        summary = RunSummary()
        list_stores = list(stores) if stores else self.factory.get_registered_stores()

        self.logger.info("run_started", stores=list_stores, include_details=include_details)

        for store in list_stores:
            entry = f"list:{store}"
            if not self.factory.has_store(store):
                summary.failed.append(entry)
                self.logger.error("store_failed", phase="list", store=store, error="unknown store")
                continue
            try:
                run = await self.run_list(store)
            except Exception as e:
                summary.failed.append(entry)
                self.logger.error("store_failed", phase="list", store=store, error=str(e), exc_info=True)
                continue
            if run.state == PassState.FAILED.value:
                summary.failed.append(entry)
            else:
                summary.succeeded.append(entry)

        if include_details:
            detail_stores = [s for s in list_stores if s in self.factory.get_detail_stores()]
            for store in detail_stores:
                entry = f"details:{store}"
                try:
                    await self.run_details(store, force=force)
                except Exception as e:
                    summary.failed.append(entry)
                    self.logger.error("store_failed", phase="details", store=store, error=str(e), exc_info=True)
                    continue
                summary.succeeded.append(entry)

        summary.elapsed_seconds = time.monotonic() - started
        self.logger.info(
            "run_summary",
            succeeded=summary.succeeded,
            failed=summary.failed,
            elapsed_seconds=round(summary.elapsed_seconds, 1),
        )
        return summary

    async def run_maintenance(self) -> ReclassifyStats:
        """Remove sold-out apparel, then re-classify the whole catalog."""
        async with self.session_factory() as db:
            maintenance = CatalogMaintenance(db)
            await maintenance.delete_out_of_stock()
            return await maintenance.reclassify()

    async def reset_details(self, store: str) -> int:
        """Mark every deal of a store for re-enrichment."""
        async with self.session_factory() as db:
            writer = DealWriter(db)
            count = await writer.reset_details(store)
            await writer.commit()
        return count
