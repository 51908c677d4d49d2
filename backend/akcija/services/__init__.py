"""Catalog persistence services."""

from akcija.services.deal_writer import DealWriter
from akcija.services.catalog_maintenance import CatalogMaintenance, ReclassifyStats

__all__ = ["DealWriter", "CatalogMaintenance", "ReclassifyStats"]
