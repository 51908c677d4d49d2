"""Deal writer: the single write path from scrapers into the catalog.

Deals are upserted by URL, every list pass leaves a ``ScrapeRun`` row, and
rows not seen by the latest pass are removed only when that pass found
enough deals to be trusted.
"""

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, List, Optional

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from akcija.config import settings
from akcija.core.exceptions import PersistenceError
from akcija.models.deal import Deal
from akcija.models.scrape_run import ScrapeRun
from akcija.scrapers.utils.normalizer import SizeNormalizer, make_deal_id

if TYPE_CHECKING:
    from akcija.scrapers.base import DealCandidate, DealDetails, ScrapeRunResult

logger = structlog.get_logger(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DealWriter:
    """Persistence operations used by list and detail scrapers.

    Writes are flushed immediately; callers decide when to ``commit()``
    so a list pass commits per page and a detail pass per batch.
    """

    def __init__(self, db: AsyncSession):
        """Initialize the writer.

        Args:
            db: Async database session
        """
        self.db = db
        self.logger = logger.bind(service="deal_writer")

    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"commit failed: {e}") from e

    async def get_by_url(self, url: str) -> Optional[Deal]:
        result = await self.db.execute(select(Deal).where(Deal.url == url))
        return result.scalar_one_or_none()

    async def upsert_deal(self, candidate: "DealCandidate") -> Optional[Deal]:
        """Insert or update a deal keyed by its URL.

        Price, name, brand and image always follow the latest listing.
        Category and gender are only replaced while the deal has not been
        enriched by a detail pass, whose values are more precise. Sizes and
        description are never touched here.

        Each write runs in a savepoint, so a failed deal leaves the session
        usable for the rest of the page.

        Args:
            candidate: Validated candidate from a list pass

        Returns:
            The stored Deal, or None if a concurrent insert won the race

        Raises:
            PersistenceError: If the database rejects the write
        """
        try:
            return await self._upsert(candidate)
        except IntegrityError:
            # Another writer inserted the same URL; its row stands
            self.logger.warning("duplicate_deal_ignored", url=candidate.url)
            return None
        except SQLAlchemyError as e:
            raise PersistenceError(f"upsert failed for {candidate.url}: {e}") from e

    async def _upsert(self, candidate: "DealCandidate") -> Deal:
        now = datetime.now(timezone.utc)
        deal = await self.get_by_url(candidate.url)

        if deal:
            async with self.db.begin_nested():
                deal.name = candidate.name
                deal.brand = candidate.brand
                deal.original_price = candidate.original_price
                deal.sale_price = candidate.sale_price
                deal.discount_percent = candidate.discount_percent
                deal.image_url = candidate.image_url
                deal.scraped_at = now
                if deal.details_scraped_at is None or not deal.categories:
                    if candidate.categories:
                        deal.categories = list(candidate.categories)
                if deal.details_scraped_at is None:
                    deal.gender = candidate.gender
            return deal

        deal = Deal(
            id=make_deal_id(candidate.store, candidate.url),
            store=candidate.store,
            name=candidate.name,
            brand=candidate.brand,
            original_price=candidate.original_price,
            sale_price=candidate.sale_price,
            discount_percent=candidate.discount_percent,
            url=candidate.url,
            image_url=candidate.image_url,
            sizes=[],
            categories=list(candidate.categories),
            gender=candidate.gender,
            scraped_at=now,
        )
        async with self.db.begin_nested():
            self.db.add(deal)

        self.logger.debug("deal_created", id=deal.id, discount=deal.discount_percent)
        return deal

    async def log_run(self, run: "ScrapeRunResult") -> ScrapeRun:
        """Record the outcome of a list pass."""
        record = ScrapeRun(
            store=run.store,
            total_scraped=run.total_scraped,
            filtered_count=run.filtered_count,
            errors=list(run.errors),
            started_at=run.started_at,
            completed_at=run.completed_at or datetime.now(timezone.utc),
        )
        self.db.add(record)
        await self.db.flush()
        return record

    async def cleanup_stale(
        self,
        store: str,
        run_started_at: datetime,
        found: int,
        threshold: Optional[int] = None,
    ) -> int:
        """Delete deals of a store that the latest pass did not see.

        Nothing is deleted when ``found`` is below the store's threshold:
        a pass that finds almost nothing is treated as a broken scraper,
        not an empty sale.

        Args:
            store: Store slug
            run_started_at: Start of the pass; rows scraped before it are stale
            found: Deals the pass persisted
            threshold: Override for the configured per-store floor

        Returns:
            Number of deleted deals
        """
        if threshold is None:
            threshold = settings.get_cleanup_threshold(store)

        if found < threshold:
            self.logger.warning("cleanup_skipped", store=store, found=found, threshold=threshold)
            return 0

        result = await self.db.execute(
            delete(Deal).where(Deal.store == store, Deal.scraped_at < run_started_at)
        )
        deleted = result.rowcount or 0
        if deleted:
            remaining = await self.count_for_store(store)
            self.logger.info("stale_deals_deleted", store=store, deleted=deleted, remaining=remaining)
        return deleted

    async def update_details(self, url: str, details: "DealDetails") -> Optional[Deal]:
        """Apply detail-pass enrichment to a deal.

        Empty values never overwrite stored ones.

        Returns:
            The updated Deal, or None if no deal has this URL
        """
        deal = await self.get_by_url(url)
        if deal is None:
            self.logger.warning("details_for_unknown_deal", url=url)
            return None

        sizes = SizeNormalizer.normalize(details.sizes)
        if sizes:
            deal.sizes = sizes
        if details.description:
            deal.description = details.description
        if details.detail_image_url:
            deal.detail_image_url = details.detail_image_url
        if details.categories:
            deal.categories = list(details.categories)
        if details.gender:
            deal.gender = details.gender
        if details.brand:
            deal.brand = details.brand
        deal.details_scraped_at = datetime.now(timezone.utc)

        await self.db.flush()
        return deal

    async def get_pending_details(
        self,
        store: str,
        force: bool = False,
        max_age_hours: int = 0,
    ) -> List[Deal]:
        """Deals of a store that need a detail pass.

        Pending means never enriched or enriched without sizes (the store
        may have restocked). With ``max_age_hours`` above zero, deals
        enriched longer ago are included too. ``force`` returns all.
        """
        result = await self.db.execute(
            select(Deal).where(Deal.store == store).order_by(Deal.discount_percent.desc())
        )
        deals = list(result.scalars().all())
        if force:
            return deals

        cutoff = None
        if max_age_hours and max_age_hours > 0:
            cutoff = datetime.now(timezone.utc) - timedelta(hours=max_age_hours)

        pending = []
        for deal in deals:
            scraped = _as_utc(deal.details_scraped_at)
            if scraped is None or not deal.sizes or (cutoff is not None and scraped < cutoff):
                pending.append(deal)
        return pending

    async def delete_by_url(self, url: str) -> bool:
        """Delete one deal. Returns False when the URL is unknown."""
        result = await self.db.execute(delete(Deal).where(Deal.url == url))
        return bool(result.rowcount)

    async def count_for_store(self, store: str) -> int:
        result = await self.db.execute(select(func.count()).select_from(Deal).where(Deal.store == store))
        return result.scalar_one()

    async def reset_details(self, store: str) -> int:
        """Clear sizes and enrichment timestamps so every deal is re-enriched."""
        result = await self.db.execute(
            update(Deal).where(Deal.store == store).values(sizes=[], details_scraped_at=None)
        )
        count = result.rowcount or 0
        self.logger.info("details_reset", store=store, count=count)
        return count
