"""Per-store listing and product-page parsing against static HTML."""

import pytest
from bs4 import BeautifulSoup

from akcija.models import Deal
from akcija.scrapers.adapters.buzz import SALE_SECTIONS as BUZZ_SECTIONS, BuzzDetailScraper, BuzzListScraper
from akcija.scrapers.adapters.djaksport import DjakSportDetailScraper, DjakSportListScraper
from akcija.scrapers.adapters.intersport import (
    SALE_SECTIONS as INTERSPORT_SECTIONS,
    IntersportDetailScraper,
    IntersportListScraper,
)
from akcija.scrapers.adapters.nsport import NSportDetailScraper, NSportListScraper
from akcija.scrapers.adapters.officeshoes import (
    SALE_SECTIONS as OFFICESHOES_SECTIONS,
    OfficeShoesDetailScraper,
    OfficeShoesListScraper,
    parse_product_type,
)
from akcija.scrapers.adapters.planeta import PlanetaDetailScraper, PlanetaListScraper, map_pol, map_vrsta
from akcija.scrapers.adapters.sportvision import SportVisionDetailScraper, SportVisionListScraper
from akcija.scrapers.adapters.trefsport import TrefSportDetailScraper, TrefSportListScraper
from akcija.scrapers.base import DealDetails


def soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def deal(url: str, name: str = "Proizvod", store: str = "djaksport") -> Deal:
    return Deal(id="x", store=store, name=name, url=url, sizes=[], categories=[], gender="unisex")


# ============================================================================
# DJAK SPORT
# ============================================================================

DJAKSPORT_LISTING = """
<ol>
  <li class="item product product-item">
    <a class="product-item-link" href="https://www.djaksport.com/nike-air-max-270.html">NIKE AIR MAX 270 PATIKE</a>
    <img class="product-image-photo" src="https://www.djaksport.com/media/a.jpg">
    <span class="old-price"><span class="price">18.990,00 RSD</span></span>
    <span class="normal-price"><span class="price">8.990,00 RSD</span></span>
    <div class="discount-badge"><span>-53%</span></div>
  </li>
  <li class="item product product-item"><span>no link</span></li>
</ol>
<a class="action next" href="?p=2">Sledeća</a>
"""

DJAKSPORT_PRODUCT = """
<div class="breadcrumbs"><a>Početna</a><a>Muškarci</a><a>Patike</a></div>
<div class="product-info-main">
  <h1 class="page-title">Nike Air Max 270</h1>
  <div class="swatch-attribute size">
    <div class="swatch-option text" data-option-label="42">42</div>
    <div class="swatch-option text disabled" data-option-label="43">43</div>
    <div class="swatch-option text" data-option-label="Crna boja">Crna</div>
  </div>
</div>
<div class="product attribute description"><div class="value">Udobne patike</div></div>
"""


class TestDjakSport:
    def test_listing(self, no_delay):
        scraper = DjakSportListScraper(delay=no_delay)
        section = scraper.sections()[0]
        page = soup(DJAKSPORT_LISTING)

        raws = scraper.parse_listing(page, section)

        assert len(raws) == 1
        assert raws[0].url == "https://www.djaksport.com/nike-air-max-270.html"
        assert raws[0].discount_hint == 53
        assert scraper.has_next_page(page, section, 1, len(raws))
        assert scraper.page_url(section, 2) == "https://www.djaksport.com/akcija?p=2"

        candidate = scraper.to_candidate(raws[0])
        assert candidate.discount_percent == 53
        assert candidate.brand == "NIKE"
        assert candidate.categories == ["obuca/patike"]

    def test_product_page(self, no_delay):
        scraper = DjakSportDetailScraper(delay=no_delay)
        details = scraper.parse_product_page(
            DJAKSPORT_PRODUCT, deal("https://www.djaksport.com/nike-air-max-270.html")
        )

        assert details.sizes == ["42"]
        assert details.categories == ["obuca/patike"]
        assert details.gender == "muski"
        assert details.description == "Udobne patike"


# ============================================================================
# PLANETA
# ============================================================================

PLANETA_LISTING = """
<div class="product-item-info">
  <a class="product-img" href="https://planetasport.rs/adidas-runfalcon.html"></a>
  <img class="product-image-photo" src="https://planetasport.rs/m.jpg">
  <div class="product-brand"><a>adidas</a></div>
  <strong class="product-item-name"><a href="https://planetasport.rs/adidas-runfalcon.html">Patike Runfalcon</a></strong>
  <span class="normal-price special-price"><span class="price">4.999 RSD</span></span>
  <span class="normal-price old-price"><span class="price">9.999 RSD</span></span>
</div>
<div class="product-item-info">
  <strong class="product-item-name"><a href="https://planetasport.rs/kategorija">Kategorija</a></strong>
</div>
<div class="product-item-info">
  <strong class="product-item-name"><a href="https://planetasport.rs/puma-duks.html">Puma duks</a></strong>
  <span class="normal-price regular-price"><span class="price">5.999 RSD</span></span>
</div>
"""

PLANETA_PRODUCT = """
<div class="product-info-main">
  <div class="swatch-attribute size">
    <div class="swatch-option" data-option-label="38">38</div>
    <div class="swatch-option disabled" data-option-label="39">39</div>
  </div>
</div>
<table id="product-attribute-specs-table">
  <tr><th>Brend</th><td>ADIDAS</td></tr>
  <tr><th>Pol</th><td>Ženski</td></tr>
  <tr><th>Vrsta</th><td><a>Patike</a></td></tr>
  <tr><th>Sport</th><td>Trčanje</td></tr>
</table>
"""


class TestPlaneta:
    def test_listing(self, no_delay):
        scraper = PlanetaListScraper(delay=no_delay)
        raws = scraper.parse_listing(soup(PLANETA_LISTING), scraper.sections()[0])

        assert [r.url for r in raws] == [
            "https://planetasport.rs/adidas-runfalcon.html",
            "https://planetasport.rs/puma-duks.html",
        ]
        # Without a special price the card carries no discount
        assert raws[1].original_price == ""

        candidate = scraper.to_candidate(raws[0])
        assert candidate.brand == "ADIDAS"
        assert candidate.discount_percent == 50

    def test_product_page(self, no_delay):
        scraper = PlanetaDetailScraper(delay=no_delay)
        details = scraper.parse_product_page(PLANETA_PRODUCT, deal("https://planetasport.rs/adidas-runfalcon.html"))

        assert details.sizes == ["38"]
        assert details.categories == ["obuca/patike", "sport/trcanje"]
        assert details.gender == "zenski"
        assert details.brand == "ADIDAS"

    def test_value_maps(self):
        assert map_vrsta("Majice kratak rukav") == "odeca/majice"
        assert map_vrsta("Kupaći kostimi") == "odeca/kupaci"
        assert map_vrsta("Zimska jakna") == "odeca/jakne"
        assert map_pol("Unisex") == "unisex"
        assert map_pol("Muški") == "muski"


# ============================================================================
# SPORT VISION
# ============================================================================

SPORTVISION_LISTING = """
<div class="product-item" data-productid="1" data-productname="Patike Nike Court"
     data-productprice="4499.00" data-productprevprice="8999.00"
     data-productdiscount="-50%" data-productbrand="NIKE">
  <a class="product-link" href="/proizvodi/patike-nike-court/123"></a>
  <img class="img-responsive" src="/img/1.jpg">
</div>
<div class="product-item" data-productid="2" data-productname="Jakna Puma"
     data-productprice="3.000,00 RSD" data-productprevprice="10.000,00 RSD">
  <a class="product-link" href="/proizvodi/jakna-puma/456"></a>
</div>
"""

SPORTVISION_PRODUCT = """
<div class="breadcrumb"><a>Početna</a><a>Muškarci</a><a>Obuća</a><a>Patike</a></div>
<h1>Patike Nike Court</h1>
<ul class="product-attributes">
  <li><span class="original-size">42</span><span class="eur-size">8</span></li>
  <li class="disabled"><span class="original-size">43</span></li>
  <li style="display: none"><span class="original-size">44</span></li>
</ul>
"""


class TestSportVision:
    def test_listing_parses_machine_and_display_prices(self, no_delay):
        scraper = SportVisionListScraper(delay=no_delay)
        raws = scraper.parse_listing(soup(SPORTVISION_LISTING), scraper.sections()[0])

        assert len(raws) == 2
        first = scraper.to_candidate(raws[0])
        second = scraper.to_candidate(raws[1])
        assert (first.original_price, first.sale_price, first.discount_percent) == (8999, 4499, 50)
        assert (second.original_price, second.sale_price) == (10000, 3000)
        assert first.url == "https://www.sportvision.rs/proizvodi/patike-nike-court/123"

    def test_paging(self, no_delay):
        scraper = SportVisionListScraper(delay=no_delay)
        section = scraper.sections()[0]
        assert scraper.page_url(section, 3) == "https://www.sportvision.rs/proizvodi/outlet-ponuda?limit=48&p=3"
        assert scraper.has_next_page(soup(""), section, 1, 48)
        assert not scraper.has_next_page(soup(""), section, 1, 12)

    def test_product_page(self, no_delay):
        scraper = SportVisionDetailScraper(delay=no_delay)
        details = scraper.parse_product_page(
            SPORTVISION_PRODUCT, deal("https://www.sportvision.rs/proizvodi/patike-nike-court/123")
        )

        assert details.sizes == ["42"]
        assert details.categories == ["obuca/patike"]
        assert details.gender == "muski"


# ============================================================================
# N SPORT
# ============================================================================

NSPORT_LISTING = """
<div class="product" itemprop="itemListElement">
  <a itemprop="url" href="https://www.n-sport.net/patike-puma-rs-x.html"></a>
  <h3 class="product-name"><a>Puma RS-X patike</a></h3>
  <img class="product-image" data-image-info="main-image" src="/img/p.jpg">
  <div class="product-old-price">12.990,00 RSD</div>
  <div class="product-price">5.990,00 RSD</div>
  <meta itemprop="brand" content="PUMA">
</div>
<div class="product" itemprop="itemListElement">
  <a itemprop="url" href="https://www.n-sport.net/bez-popusta.html"></a>
  <h3 class="product-name"><a>Bez popusta</a></h3>
  <div class="product-price">1.990,00 RSD</div>
</div>
<div class="paginationTG"><a>1</a><a>2</a><a>&gt;&gt;</a></div>
"""

NSPORT_PRODUCT = """
<div class="breadcrumb"><a>Žene</a><a>Patike</a></div>
<h1>Puma RS-X</h1>
<ul class="size-list">
  <li><input data-size="40"></li>
  <li><input data-size="41" disabled></li>
</ul>
"""


class TestNSport:
    def test_listing(self, no_delay):
        scraper = NSportListScraper(delay=no_delay)
        section = scraper.sections()[0]
        page = soup(NSPORT_LISTING)

        raws = scraper.parse_listing(page, section)

        assert len(raws) == 1
        assert raws[0].sale_price == "5.990,00 RSD"
        assert raws[0].brand == "PUMA"
        assert scraper.has_next_page(page, section, 1, 1)
        assert scraper.page_url(section, 1) == section.url
        assert scraper.page_url(section, 2).endswith("&pg=2")
        assert "index.php" in scraper.page_url(section, 2)

    def test_product_page(self, no_delay):
        scraper = NSportDetailScraper(delay=no_delay)
        details = scraper.parse_product_page(NSPORT_PRODUCT, deal("https://www.n-sport.net/patike-puma-rs-x.html"))

        assert details.sizes == ["40"]
        assert details.gender == "zenski"
        assert details.categories == ["obuca/patike"]


# ============================================================================
# BUZZ
# ============================================================================

BUZZ_LISTING = """
<div class="product-item" data-productid="9" data-productname="Nike Air Force 1 GS"
     data-productbrand="NIKE" data-productprice="7.990,00" data-productprevprice="15.990,00"
     data-productdiscount="50">
  <div class="img-wrapper"><a href="/patike/nike-air-force-1-gs/123"><img src="/img/af1.jpg"></a></div>
</div>
"""

BUZZ_PRODUCT = """
<ul class="product-attributes">
  <li data-productsize-name="36">36</li>
  <li data-productsize-name="37" class="disabled">37</li>
  <li data-productsize-name="38 2/3">38 2/3</li>
</ul>
"""


class TestBuzz:
    async def test_listing_via_load_more(self, fake_fetcher, no_delay):
        kids = BUZZ_SECTIONS[2]
        fetcher = fake_fetcher({kids.url: BUZZ_LISTING})
        scraper = BuzzListScraper(fetcher=fetcher, delay=no_delay)

        html = await scraper.fetch_page(fetcher, kids, 1)
        raws = scraper.parse_listing(soup(html), kids)

        assert len(raws) == 1
        candidate = scraper.to_candidate(raws[0])
        assert candidate.url == "https://www.buzzsneakers.rs/patike/nike-air-force-1-gs/123"
        assert candidate.gender == "deciji"
        assert candidate.discount_percent == 50
        assert not scraper.has_next_page(soup(html), kids, 1, 1)

    def test_product_page(self, no_delay):
        scraper = BuzzDetailScraper(delay=no_delay)
        details = scraper.parse_product_page(
            BUZZ_PRODUCT,
            deal("https://www.buzzsneakers.rs/patike/nike-air-force-1-gs/123", "Nike Air Force 1 GS", "buzz"),
        )

        assert details.sizes == ["36", "38", "39"]
        assert details.categories == ["obuca/patike"]
        assert details.gender is None


# ============================================================================
# OFFICE SHOES
# ============================================================================

OFFICESHOES_LISTING = """
<article data-product_id="5" data-brand="Nike">
  <a href="/obuca/nike-revolution-6/12345/"><h2>Nike Revolution 6</h2></a>
  <img src="https://www.officeshoes.rs/images/ssrs60.png">
  <img class="product_item_img" src="https://www.officeshoes.rs/products/123.jpg">
  <span class="old-price">9.990 RSD</span>
  <span class="price">3.990 RSD</span>
</article>
"""

OFFICESHOES_PRODUCT = """
<ul class="sizes">
  <li data-product-size="38">38</li>
  <li data-product-size="39" class="unavailable">39</li>
</ul>
<div class="content-details"><ul><li>Šifra: 123</li><li>Ženske patike</li></ul></div>
<div class="tags"><span class="tag-item">Cipele</span></div>
"""


class TestOfficeShoes:
    def test_listing(self, no_delay):
        scraper = OfficeShoesListScraper(delay=no_delay)
        men = OFFICESHOES_SECTIONS[0]
        raws = scraper.parse_listing(soup(OFFICESHOES_LISTING), men)

        assert len(raws) == 1
        assert raws[0].discount_hint == 60
        candidate = scraper.to_candidate(raws[0])
        assert candidate.brand == "NIKE"
        assert candidate.gender == "muski"
        assert candidate.discount_percent == 60

    def test_load_more_stop_condition(self, no_delay):
        scraper = OfficeShoesListScraper(delay=no_delay, min_discount=50)
        assert not scraper.newest_below_threshold(OFFICESHOES_LISTING)
        assert scraper.newest_below_threshold(OFFICESHOES_LISTING.replace("ssrs60", "ssrs40"))

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Ženske patike", ("zenski", "obuca/patike")),
            ("Muške gležnjače", ("muski", "obuca/cizme")),
            ("Dečje čizme", ("deciji", "obuca/cizme")),
            ("Torba", (None, None)),
        ],
    )
    def test_product_type(self, text, expected):
        assert parse_product_type(text) == expected

    def test_product_page(self, no_delay):
        scraper = OfficeShoesDetailScraper(delay=no_delay)
        details = scraper.parse_product_page(
            OFFICESHOES_PRODUCT, deal("https://www.officeshoes.rs/obuca/nike-revolution-6/12345/")
        )

        assert details.sizes == ["38"]
        assert details.gender == "zenski"
        assert details.categories == ["obuca/patike", "obuca/cipele"]


# ============================================================================
# INTERSPORT
# ============================================================================

INTERSPORT_LISTING = """
<div class="product" itemprop="itemListElement">
  <a itemprop="url" href="/adidas-duks-essentials"></a>
  <a itemprop="name">Adidas Duks Essentials</a>
  <img itemprop="image" src="//cdn.intersport.rs/d.jpg">
  <span class="product-old-price">7.999,00 RSD</span>
  <span itemprop="price">3.199,00 RSD</span>
  <span class="percent_flake">-60%</span>
  <meta itemprop="brand" content="adidas">
</div>
"""

INTERSPORT_PRODUCT = """
<div class="breadcrumbs"><a>Muškarci</a><a>Duksevi</a></div>
<input class="fnc-product-cart-size" data-size="M">
<input class="fnc-product-cart-size" data-size="L">
<div id="product-declaration"><p>Pamuk</p></div>
"""


class TestIntersport:
    def test_listing(self, no_delay):
        scraper = IntersportListScraper(delay=no_delay)
        women = INTERSPORT_SECTIONS[0]
        raws = scraper.parse_listing(soup(INTERSPORT_LISTING), women)

        assert len(raws) == 1
        assert raws[0].image_url == "https://cdn.intersport.rs/d.jpg"
        assert raws[0].discount_hint == 60
        candidate = scraper.to_candidate(raws[0])
        assert candidate.url == "https://www.intersport.rs/adidas-duks-essentials"
        assert candidate.gender == "zenski"
        assert candidate.discount_percent == 60
        assert scraper.page_url(women, 3) == "https://www.intersport.rs/zene?sort=saving_percent&pg=3"

    def test_product_page(self, no_delay):
        scraper = IntersportDetailScraper(delay=no_delay)
        details = scraper.parse_product_page(
            INTERSPORT_PRODUCT, deal("https://www.intersport.rs/adidas-duks-essentials", "Adidas Duks Essentials")
        )

        assert details.sizes == ["M", "L"]
        assert details.categories == ["odeca/duksevi"]
        assert details.gender == "muski"
        assert details.description == "Pamuk"

    def test_sold_out_apparel_is_deleted(self, no_delay):
        scraper = IntersportDetailScraper(delay=no_delay)
        hoodie = deal("https://www.intersport.rs/adidas-duks", "Adidas Duks")
        bag = deal("https://www.intersport.rs/ranac", "Ranac Nike")

        assert scraper._should_delete(hoodie, DealDetails(sizes=[]))
        assert not scraper._should_delete(bag, DealDetails(sizes=[]))
        assert not scraper._should_delete(hoodie, DealDetails(sizes=["M"]))


# ============================================================================
# TREF SPORT
# ============================================================================

TREFSPORT_LISTING = """
<div class="card product-box">
  <a class="product-name" href="https://trefsport.com/Nike-Jakna/SW123">Nike Jakna Windrunner</a>
  <img class="product-image" src="https://trefsport.com/media/j.jpg">
  <div class="product-price with-list-price">RSD 4,500.00*
    <span class="list-price"><span class="list-price-price">RSD 10,000.00*</span></span>
  </div>
  <div class="badge-discount"><span>-55%</span></div>
  <div class="badge-manufacturer"><span>Nike</span></div>
</div>
<ul class="pagination"><li class="page-next disabled"><a>Next</a></li></ul>
"""

TREFSPORT_PRODUCT = """
<ol class="breadcrumb"><li><span class="breadcrumb-title">Outlet</span></li></ol>
<div class="product-detail-configurator">
  <div class="product-detail-configurator-option">
    <input class="product-detail-configurator-option-input is-combinable"><label>M</label>
  </div>
  <div class="product-detail-configurator-option">
    <input class="product-detail-configurator-option-input"><label>L</label>
  </div>
</div>
<table class="product-detail-properties-table">
  <tr class="properties-row"><th class="properties-label">Pol:</th>
      <td class="properties-value"><span>Žene</span></td></tr>
  <tr class="properties-row"><th class="properties-label">Kategorije:</th>
      <td class="properties-value"><span>Jakne</span><span>Outdoor</span></td></tr>
</table>
<div class="product-detail-description-text">Vetrootporna</div>
"""


class TestTrefSport:
    def test_listing(self, no_delay):
        scraper = TrefSportListScraper(delay=no_delay)
        section = scraper.sections()[0]
        page = soup(TREFSPORT_LISTING)

        raws = scraper.parse_listing(page, section)

        assert len(raws) == 1
        assert raws[0].sale_price.startswith("RSD 4,500.00")
        candidate = scraper.to_candidate(raws[0])
        assert (candidate.original_price, candidate.sale_price, candidate.discount_percent) == (10000, 4500, 55)
        assert candidate.brand == "NIKE"
        assert not scraper.has_next_page(page, section, 1, 1)
        assert scraper.page_url(section, 2) == "https://trefsport.com/Outlet?p=2"

    def test_sale_price_is_the_starred_amount(self, no_delay):
        scraper = TrefSportListScraper(delay=no_delay)
        section = scraper.sections()[0]
        page = soup("""
        <div class="card product-box">
          <a class="product-name" href="https://trefsport.com/Adidas-Duks/A77">Adidas Duks Entrada</a>
          <div class="product-price">RSD 6,000.00 RSD 2,400.00*</div>
          <span class="list-price-price">RSD 6,000.00</span>
        </div>
        """)

        raws = scraper.parse_listing(page, section)

        assert raws[0].sale_price == "RSD 2,400.00*"
        assert scraper.to_candidate(raws[0]).sale_price == 2400

    def test_product_page(self, no_delay):
        scraper = TrefSportDetailScraper(delay=no_delay)
        details = scraper.parse_product_page(
            TREFSPORT_PRODUCT, deal("https://trefsport.com/Nike-Jakna/SW123", "Nike Jakna Windrunner")
        )

        assert details.sizes == ["M"]
        assert details.gender == "zenski"
        assert details.categories == ["odeca/jakne"]
        assert details.description == "Vetrootporna"
