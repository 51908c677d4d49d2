"""Akcija: discount-deal ingestion pipeline for Serbian sports retailers."""

__version__ = "0.1.0"
