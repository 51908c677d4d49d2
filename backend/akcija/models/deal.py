"""Deal model: one discounted product offer, keyed by its store URL."""

import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from akcija.models.base import Base, utcnow


class Store(str, enum.Enum):
    """Supported retailers."""

    DJAKSPORT = "djaksport"
    PLANETA = "planeta"
    SPORTVISION = "sportvision"
    NSPORT = "nsport"
    BUZZ = "buzz"
    OFFICESHOES = "officeshoes"
    INTERSPORT = "intersport"
    TREFSPORT = "trefsport"


class Gender(str, enum.Enum):
    """Gender buckets as stored in the catalog."""

    MEN = "muski"
    WOMEN = "zenski"
    KIDS = "deciji"
    UNISEX = "unisex"


class Deal(Base):
    """A discounted product seen on a store's sale listing.

    The URL is the natural identity: re-scraping the same URL updates the
    row in place. ``details_scraped_at`` stays null until the detail pass
    has enriched the deal with sizes and description.
    """

    __tablename__ = "deals"

    id: Mapped[str] = mapped_column(String(200), primary_key=True)
    store: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(500), nullable=False)
    brand: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)

    # Prices in whole dinars
    original_price: Mapped[int] = mapped_column(Integer, nullable=False)
    sale_price: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_percent: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="round((original - sale) / original * 100)"
    )

    url: Mapped[str] = mapped_column(String(2000), nullable=False, unique=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    detail_image_url: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    sizes: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    categories: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Category paths such as 'obuca/patike'"
    )
    gender: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=Gender.UNISEX.value,
        comment="muski, zenski, deciji or unisex"
    )

    scraped_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        comment="Last time a list pass saw this deal"
    )
    details_scraped_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Last completed detail pass"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        Index("idx_deals_store_scraped_at", "store", "scraped_at"),
        Index("idx_deals_discount", "discount_percent"),
    )

    def __repr__(self) -> str:
        return f"<Deal(id={self.id}, store={self.store}, name='{self.name[:40]}', discount={self.discount_percent})>"
