"""Audit record of one list-scraper execution."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from akcija.models.base import Base


class ScrapeRun(Base):
    """One store's list pass: how many candidates were seen and kept.

    Rows are written once when the pass finishes and never updated.
    """

    __tablename__ = "scrape_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    total_scraped: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Raw candidates seen on listing pages"
    )
    filtered_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Candidates that passed the discount threshold and were persisted"
    )
    errors: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<ScrapeRun(id={self.id}, store={self.store}, total={self.total_scraped}, filtered={self.filtered_count})>"
