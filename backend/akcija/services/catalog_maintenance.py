"""Catalog maintenance: out-of-stock removal and re-classification.

Runs against the whole catalog after classifier rules change or when a
detail pass left sold-out items behind.
"""

from dataclasses import dataclass
from typing import Dict, List

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from akcija.classifiers import classify_category, is_apparel, resolve_gender
from akcija.models.deal import Deal

logger = structlog.get_logger(__name__)

# Category paths that were renamed or merged
LEGACY_CATEGORY_PATHS: Dict[str, str] = {
    "oprema/rancevi": "oprema/torbe",
    "odeca/vetrovke": "odeca/jakne",
    "obuca/klompe": "obuca/papuce",
    "oprema/vrece": "oprema/torbe",
    "oprema/kacketi": "oprema/kape",
}


@dataclass
class ReclassifyStats:
    processed: int = 0
    paths_fixed: int = 0
    categories_added: int = 0
    gender_updated: int = 0


class CatalogMaintenance:
    """Bulk fixes over stored deals."""

    def __init__(self, db: AsyncSession, batch_size: int = 500):
        self.db = db
        self.batch_size = batch_size
        self.logger = logger.bind(service="catalog_maintenance")

    async def delete_out_of_stock(self) -> int:
        """Delete enriched footwear and clothing deals that list no sizes.

        Accessories stay, since they are often sold one-size.

        Returns:
            Number of deleted deals
        """
        result = await self.db.execute(select(Deal).where(Deal.details_scraped_at.is_not(None)))
        deleted = 0
        for deal in result.scalars().all():
            if deal.sizes:
                continue
            categories = list(deal.categories or [])
            mapped = classify_category(f"{deal.name} {deal.url}")
            if mapped:
                categories.append(mapped)
            if is_apparel(categories):
                await self.db.delete(deal)
                deleted += 1

        await self.db.commit()
        self.logger.info("out_of_stock_deleted", deleted=deleted)
        return deleted

    async def reclassify(self) -> ReclassifyStats:
        """Rewrite legacy category paths and re-run the classifiers.

        Gender is only replaced when name or URL gives a definite answer;
        a unisex fallback never overwrites a stored gender.
        """
        stats = ReclassifyStats()
        result = await self.db.execute(select(Deal).order_by(Deal.id))
        deals = list(result.scalars().all())

        for i, deal in enumerate(deals, start=1):
            categories = self._replace_legacy_paths(list(deal.categories or []))
            if categories != list(deal.categories or []):
                stats.paths_fixed += 1

            mapped = classify_category(f"{deal.name} {deal.url}")
            if mapped and mapped not in categories:
                categories.append(mapped)
                stats.categories_added += 1

            if categories != list(deal.categories or []):
                deal.categories = categories

            gender, tier = resolve_gender(name=deal.name, url=deal.url)
            if tier == "name_url" and gender != deal.gender:
                deal.gender = gender
                stats.gender_updated += 1

            stats.processed += 1
            if i % self.batch_size == 0:
                await self.db.commit()
                self.logger.info("reclassify_progress", processed=i, total=len(deals))

        await self.db.commit()
        self.logger.info(
            "reclassify_complete",
            processed=stats.processed,
            paths_fixed=stats.paths_fixed,
            categories_added=stats.categories_added,
            gender_updated=stats.gender_updated,
        )
        return stats

    @staticmethod
    def _replace_legacy_paths(categories: List[str]) -> List[str]:
        replaced = [LEGACY_CATEGORY_PATHS.get(c, c) for c in categories]
        # Order-preserving dedupe
        return list(dict.fromkeys(replaced))
