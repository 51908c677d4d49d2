"""Store-specific scraper implementations.

Each module implements a ListScraper for the store's sale listings and a
DetailScraper for its product pages.
"""

# Browser-rendered stores
from .djaksport import DjakSportListScraper, DjakSportDetailScraper
from .planeta import PlanetaListScraper, PlanetaDetailScraper
from .sportvision import SportVisionListScraper, SportVisionDetailScraper
from .nsport import NSportListScraper, NSportDetailScraper
from .buzz import BuzzListScraper, BuzzDetailScraper
from .officeshoes import OfficeShoesListScraper, OfficeShoesDetailScraper

# Server-rendered stores (plain HTTP)
from .intersport import IntersportListScraper, IntersportDetailScraper
from .trefsport import TrefSportListScraper, TrefSportDetailScraper

__all__ = [
    "DjakSportListScraper",
    "DjakSportDetailScraper",
    "PlanetaListScraper",
    "PlanetaDetailScraper",
    "SportVisionListScraper",
    "SportVisionDetailScraper",
    "NSportListScraper",
    "NSportDetailScraper",
    "BuzzListScraper",
    "BuzzDetailScraper",
    "OfficeShoesListScraper",
    "OfficeShoesDetailScraper",
    "IntersportListScraper",
    "IntersportDetailScraper",
    "TrefSportListScraper",
    "TrefSportDetailScraper",
]
