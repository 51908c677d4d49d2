"""Tests for the detail pass: enrichment, listing pages and zero-size policies."""

from datetime import datetime, timezone
from typing import List

import pytest
from bs4 import BeautifulSoup
from sqlalchemy.ext.asyncio import AsyncSession

from akcija.core.exceptions import BlockedError, MixedSizesError, ScraperError
from akcija.scrapers.base import DealDetails, DetailScraper
from akcija.scrapers.utils.dom import clean_text, select_text
from akcija.services.deal_writer import DealWriter

URL = "https://www.djaksport.com/nike-air-max-patike"


def product_page(sizes: List[str], description: str = "Lagane patike", crumbs=("Muškarci", "Patike")) -> str:
    size_html = "".join(f'<span class="size">{s}</span>' for s in sizes)
    crumb_html = "".join(f"<a>{c}</a>" for c in crumbs)
    return (
        f'<html><body><nav class="crumbs">{crumb_html}</nav>'
        f'<div class="product-detail">{size_html}<p class="desc">{description}</p></div>'
        '<div class="card">related</div><div class="card">related</div></body></html>'
    )


LISTING_PAGE = "<html><body>" + '<div class="card">x</div>' * 12 + "</body></html>"


class FakeDetailScraper(DetailScraper):
    store = "djaksport"
    uses_browser = False
    card_selector = ".card"
    detail_selector = ".product-detail"
    zero_size_policy = "keep"

    def extract_details(self, soup: BeautifulSoup, deal) -> DealDetails:
        crumbs = [clean_text(a.get_text()) for a in soup.select(".crumbs a")]
        return DealDetails(
            sizes=[clean_text(s.get_text()) for s in soup.select(".size")],
            description=select_text(soup, ".desc") or None,
            categories=["obuca/patike"] if "Patike" in crumbs else [],
            gender="muski" if "Muškarci" in crumbs else None,
        )


class DeletingDetailScraper(FakeDetailScraper):
    store = "buzz"
    zero_size_policy = "delete"


def make_scraper(fetcher, no_delay, scraper_class=FakeDetailScraper):
    return scraper_class(fetcher=fetcher, delay=no_delay, commit_batch=2)


class TestParseProductPage:
    """Tests for parse_product_page."""

    def test_sizes_normalized(self, make_deal, no_delay):
        scraper = FakeDetailScraper(delay=no_delay)
        details = scraper.parse_product_page(product_page(["40-41", "42.5"]), make_deal(url=URL))
        assert details.sizes == ["40", "41", "42", "43"]

    def test_mixed_sizes_rejected(self, make_deal, no_delay):
        scraper = FakeDetailScraper(delay=no_delay)
        with pytest.raises(MixedSizesError) as exc_info:
            scraper.parse_product_page(product_page(["42", "43", "M", "L"]), make_deal(url=URL))
        assert exc_info.value.url == URL
        assert "M" in exc_info.value.sizes


class TestEnrichPending:
    """Tests for enrich_pending against the database."""

    async def test_enriches_pending_deals(self, test_db: AsyncSession, make_deal, fake_fetcher, no_delay):
        test_db.add(make_deal(url=URL))
        await test_db.commit()
        fetcher = fake_fetcher({URL: product_page(["42", "43"])})
        scraper = make_scraper(fetcher, no_delay)
        writer = DealWriter(test_db)

        enriched = await scraper.enrich_pending(writer)

        assert enriched == 1
        deal = await writer.get_by_url(URL)
        assert deal.sizes == ["42", "43"]
        assert deal.description == "Lagane patike"
        assert deal.categories == ["obuca/patike"]
        assert deal.gender == "muski"
        assert deal.details_scraped_at is not None

    async def test_listing_page_keeps_existing_enrichment(
        self, test_db: AsyncSession, make_deal, fake_fetcher, no_delay
    ):
        """A product URL that renders a listing never overwrites stored details."""
        enriched_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
        test_db.add(make_deal(url=URL, sizes=["44"], description="Opis", details_scraped_at=enriched_at))
        await test_db.commit()
        fetcher = fake_fetcher({URL: LISTING_PAGE})
        scraper = make_scraper(fetcher, no_delay)
        writer = DealWriter(test_db)

        enriched = await scraper.enrich_pending(writer, force=True)

        assert enriched == 0
        assert scraper.stats.listing_pages == 1
        deal = await writer.get_by_url(URL)
        assert deal.sizes == ["44"]
        assert deal.description == "Opis"

    async def test_keep_policy_updates_without_sizes(
        self, test_db: AsyncSession, make_deal, fake_fetcher, no_delay
    ):
        test_db.add(make_deal(url=URL))
        await test_db.commit()
        fetcher = fake_fetcher({URL: product_page([])})
        scraper = make_scraper(fetcher, no_delay)
        writer = DealWriter(test_db)

        await scraper.enrich_pending(writer)

        deal = await writer.get_by_url(URL)
        assert deal is not None
        assert deal.sizes == []
        assert deal.details_scraped_at is not None

    async def test_delete_policy_removes_sold_out_apparel(
        self, test_db: AsyncSession, make_deal, fake_fetcher, no_delay
    ):
        bag_url = "https://www.buzzsneakers.rs/ranac-nike"
        test_db.add(make_deal(url=URL, store="buzz"))
        test_db.add(make_deal(url=bag_url, store="buzz", name="Ranac Nike Heritage"))
        await test_db.commit()
        fetcher = fake_fetcher({
            URL: product_page([]),
            bag_url: product_page([], crumbs=("Oprema",)),
        })
        scraper = make_scraper(fetcher, no_delay, DeletingDetailScraper)
        writer = DealWriter(test_db)

        await scraper.enrich_pending(writer)

        assert scraper.stats.deleted == 1
        assert await writer.get_by_url(URL) is None
        assert await writer.get_by_url(bag_url) is not None

    async def test_mixed_sizes_never_delete(self, test_db: AsyncSession, make_deal, fake_fetcher, no_delay):
        """A page showing sizes of other products is skipped, not read as sold out."""
        test_db.add(make_deal(url=URL, store="buzz", categories=["obuca/patike"]))
        await test_db.commit()
        fetcher = fake_fetcher({URL: product_page(["42", "M"])})
        scraper = make_scraper(fetcher, no_delay, DeletingDetailScraper)
        writer = DealWriter(test_db)

        enriched = await scraper.enrich_pending(writer)

        assert enriched == 0
        assert scraper.stats.deleted == 0
        assert scraper.stats.mixed_sizes == 1
        deal = await writer.get_by_url(URL)
        assert deal is not None
        assert deal.details_scraped_at is None

    async def test_mixed_sizes_keep_stored_details(
        self, test_db: AsyncSession, make_deal, fake_fetcher, no_delay
    ):
        enriched_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
        test_db.add(make_deal(
            url=URL,
            sizes=["44"],
            categories=["obuca/patike"],
            gender="zenski",
            details_scraped_at=enriched_at,
        ))
        await test_db.commit()
        fetcher = fake_fetcher({URL: product_page(["42", "M"], description="Drugi proizvod")})
        scraper = make_scraper(fetcher, no_delay)
        writer = DealWriter(test_db)

        await scraper.enrich_pending(writer, force=True)

        deal = await writer.get_by_url(URL)
        assert deal.sizes == ["44"]
        assert deal.gender == "zenski"
        assert deal.description is None
        assert deal.details_scraped_at.replace(tzinfo=timezone.utc) == enriched_at

    async def test_crash_loses_at_most_one_batch(
        self, test_db: AsyncSession, session_factory, make_deal, fake_fetcher, no_delay
    ):
        """Batches committed before a crash survive it."""
        urls = [f"https://www.djaksport.com/patike-{i}" for i in range(5)]
        for i, url in enumerate(urls):
            # Descending discount keeps the pending order equal to urls
            test_db.add(make_deal(url=url, sale_price=2000 + i * 1000))
        await test_db.commit()

        class CrashingWriter(DealWriter):
            """Writes nothing once the process is gone."""

            crashed = False

            async def commit(self) -> None:
                if self.crashed:
                    await self.db.rollback()
                    return
                await super().commit()

        writer = CrashingWriter(test_db)

        class CrashingFetcher(fake_fetcher):
            async def get(self, url, wait_selector=None):
                if url == urls[4]:
                    writer.crashed = True
                    raise BlockedError("djaksport", url)
                return await super().get(url, wait_selector)

        fetcher = CrashingFetcher({url: product_page(["42"]) for url in urls[:4]})
        scraper = make_scraper(fetcher, no_delay)

        with pytest.raises(BlockedError):
            await scraper.enrich_pending(writer)

        async with session_factory() as fresh:
            fresh_writer = DealWriter(fresh)
            for url in urls[:4]:
                deal = await fresh_writer.get_by_url(url)
                assert deal.details_scraped_at is not None, url
                assert deal.sizes == ["42"]
            assert (await fresh_writer.get_by_url(urls[4])).details_scraped_at is None

    async def test_fetch_errors_are_counted(self, test_db: AsyncSession, make_deal, fake_fetcher, no_delay):
        other = "https://www.djaksport.com/jakna"
        test_db.add(make_deal(url=URL, sale_price=3000))
        test_db.add(make_deal(url=other, name="Jakna"))
        await test_db.commit()
        fetcher = fake_fetcher({URL: ScraperError("djaksport", "timeout"), other: product_page(["M"])})
        scraper = make_scraper(fetcher, no_delay)

        enriched = await scraper.enrich_pending(DealWriter(test_db))

        assert enriched == 1
        assert scraper.stats.errors == 1
        assert scraper.stats.pending == 2

    async def test_blocked_store_aborts_pass(self, test_db: AsyncSession, make_deal, fake_fetcher, no_delay):
        test_db.add(make_deal(url=URL))
        await test_db.commit()
        fetcher = fake_fetcher({URL: BlockedError("djaksport", URL)})
        scraper = make_scraper(fetcher, no_delay)

        with pytest.raises(BlockedError):
            await scraper.enrich_pending(DealWriter(test_db))
        assert fetcher.closed

    async def test_nothing_pending(self, test_db: AsyncSession, fake_fetcher, no_delay):
        fetcher = fake_fetcher({})
        scraper = make_scraper(fetcher, no_delay)

        assert await scraper.enrich_pending(DealWriter(test_db)) == 0
        assert fetcher.requested == []
