"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from akcija.models import Base, Deal
from akcija.scrapers.utils.delay import DelayPolicy
from akcija.scrapers.utils.fetchers import BaseFetcher
from akcija.scrapers.utils.normalizer import PriceNormalizer, make_deal_id


class FakeFetcher(BaseFetcher):
    """Serves canned HTML by URL; an exception value is raised instead."""

    def __init__(self, pages: Dict[str, Union[str, Exception]], store: str = "test"):
        super().__init__(store)
        self.pages = pages
        self.requested: List[str] = []
        self.opened = False
        self.closed = False

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True

    async def get(self, url: str, wait_selector: Optional[str] = None) -> str:
        self.requested.append(url)
        page = self.pages.get(url, "<html><body></body></html>")
        if isinstance(page, Exception):
            raise page
        return page


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


@pytest.fixture
def no_delay() -> DelayPolicy:
    return DelayPolicy.none()


@pytest.fixture
def fake_fetcher():
    """Factory for FakeFetcher instances."""
    return FakeFetcher


# ============================================================================
# DATABASE
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_db(session_factory):
    """Create an in-memory SQLite database for testing."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_deal():
    """Build a Deal row with sensible defaults."""

    def _make(
        url: str = "https://www.djaksport.com/nike-air-max-patike",
        store: str = "djaksport",
        name: str = "NIKE AIR MAX PATIKE",
        original_price: int = 10000,
        sale_price: int = 4500,
        **kwargs,
    ) -> Deal:
        now = datetime.now(timezone.utc)
        values = dict(
            id=make_deal_id(store, url),
            store=store,
            name=name,
            original_price=original_price,
            sale_price=sale_price,
            discount_percent=PriceNormalizer.calc_discount(original_price, sale_price),
            url=url,
            sizes=[],
            categories=[],
            gender="unisex",
            scraped_at=now,
            created_at=now,
        )
        values.update(kwargs)
        return Deal(**values)

    return _make
