"""SQLAlchemy models for the deal catalog.

All models are imported here so metadata.create_all sees every table.
"""

from akcija.models.base import Base, utcnow
from akcija.models.deal import Deal, Gender, Store
from akcija.models.scrape_run import ScrapeRun

__all__ = [
    "Base",
    "utcnow",
    "Deal",
    "Gender",
    "Store",
    "ScrapeRun",
]
