"""Tests for merchant profiles and the registry."""
import json

import pytest

from wishmeta.adapters.document import parse
from wishmeta.merchants import (
    ALIEXPRESS,
    AMAZON,
    CARREFOUR,
    DECATHLON,
    HM,
    MIRAVIA,
    ZARA,
    find_profile,
)
from wishmeta.merchants.aliexpress import image_templates as aliexpress_images
from wishmeta.merchants.amazon import read_dynamic_image
from wishmeta.merchants.hm import api_url, fetch_product_detail, largest_image, parse_product_detail
from wishmeta.merchants.zara import image_templates as zara_images
from wishmeta.models.extraction import FieldSource
from tests.conftest import page


class TestRegistry:

    @pytest.mark.parametrize(
        "url,profile",
        [
            ("https://www.amazon.es/dp/B0CXPJ3KMN", AMAZON),
            ("https://www.amazon.co.uk/dp/B0CXPJ3KMN", AMAZON),
            ("https://amzn.to/3xYz", AMAZON),
            ("https://amzn.eu/d/abc", AMAZON),
            ("https://es.aliexpress.com/item/1005006342357549.html", ALIEXPRESS),
            ("https://ae01.alicdn.com/kf/S1005006342357549_640x640.jpg", ALIEXPRESS),
            ("https://www2.hm.com/es_es/productpage.0970819001.html", HM),
            ("https://www.zara.com/es/es/camisa-p04087301.html", ZARA),
            ("https://www.decathlon.es/es/p/mochila/_/R-p-324547", DECATHLON),
            ("https://www.carrefour.es/tv-55/R-VC4AECOMM-123456/p", CARREFOUR),
            ("https://www.miravia.es/p/i3451029183.html", MIRAVIA),
            ("https://shop.example.com/p/1", None),
            ("https://notamazon.es/dp/B0CXPJ3KMN", None),
            ("https://amazon.es.example.com/dp/B0CXPJ3KMN", None),
            ("https://www.shm.com/productpage.0970819001.html", None),
        ],
    )
    def test_find_profile(self, url, profile):
        assert find_profile(url) is profile


class TestProductIds:

    @pytest.mark.parametrize(
        "profile,url,expected",
        [
            (AMAZON, "https://www.amazon.es/Auriculares/dp/B0CXPJ3KMN/ref=sr_1_1", "B0CXPJ3KMN"),
            (AMAZON, "https://www.amazon.com/gp/product/B08N5WRWNW?th=1", "B08N5WRWNW"),
            (AMAZON, "https://www.amazon.de/-/en/B07PGL2ZSL", "B07PGL2ZSL"),
            (AMAZON, "https://www.amazon.es/s?k=auriculares", None),
            (ALIEXPRESS, "https://es.aliexpress.com/item/1005006342357549.html", "1005006342357549"),
            (ALIEXPRESS, "https://www.aliexpress.com/i/1005006342357549.html", "1005006342357549"),
            (ALIEXPRESS, "https://m.aliexpress.com/p/detail.html?productId=1005006342357549", "1005006342357549"),
            (ALIEXPRESS, "https://a.aliexpress.com/_mKx?i=1005006342357549", "1005006342357549"),
            (ALIEXPRESS, "https://es.aliexpress.com/item/123.html", None),
            (HM, "https://www2.hm.com/es_es/productpage.0970819001.html", "0970819001"),
            (HM, "https://www2.hm.com/es_es/product/0970819001", "0970819001"),
            (ZARA, "https://www.zara.com/es/es/camisa-lino-p04087301.html?v1=364066520", "04087301"),
            (ZARA, "https://www.zara.com/es/es/share/camisa.html?v1=364066520", "364066520"),
            (MIRAVIA, "https://www.miravia.es/p/i3451029183.html", "3451029183"),
        ],
    )
    def test_patterns_in_priority_order(self, profile, url, expected):
        assert profile.extract_product_id(url) == expected

    def test_inline_asin(self):
        doc = parse(page(body='<script>var data = {"ASIN":"B0CXPJ3KMN"};</script>'))
        assert AMAZON.product_id_from_document(doc) == "B0CXPJ3KMN"


class TestConstructedImages:

    def test_aliexpress_templates_large_first(self):
        images = aliexpress_images("1005006342357549")
        assert len(images) == 9
        assert images[0] == "https://ae01.alicdn.com/kf/S1005006342357549_640x640.jpg"
        assert images[1] == "https://ae01.alicdn.com/kf/H1005006342357549_640x640.jpg"
        assert images[3].endswith("_1000x1000.jpg")
        assert images[-1] == "https://ae01.alicdn.com/kf/1005006342357549_220x220.jpg"

    def test_zara_photo_path(self):
        assert zara_images("04087301") == [
            "https://static.zara.net/photos///2024/V/0/1/p/0408/7301/2/w/563/04087301_1_1_1.jpg"
        ]
        assert zara_images("123456") == []

    def test_amazon_image(self):
        assert AMAZON.build_fallback_images("B0CXPJ3KMN") == [
            "https://images-na.ssl-images-amazon.com/images/P/B0CXPJ3KMN.jpg"
        ]

    def test_profiles_without_templates(self):
        assert DECATHLON.build_fallback_images("324547") == []
        assert ALIEXPRESS.build_fallback_images(None) == []

    def test_synthesized_title(self):
        assert ALIEXPRESS.synthesized_title("1005006342357549") == "Producto AliExpress (1005006342357549)"
        assert HM.synthesized_title(None) == "Producto H&M"


class TestAmazonDocument:

    def test_product_title_and_hires_image(self):
        doc = parse(page(body=(
            '<span id="productTitle">  Auriculares Bluetooth Pro  </span>'
            '<img id="landingImage" data-old-hires="https://m.media-amazon.com/images/I/hires.jpg"'
            ' src="https://m.media-amazon.com/images/I/small.jpg">'
        )), "https://www.amazon.es/dp/B0CXPJ3KMN")
        result = AMAZON.extract_from_document(doc)
        assert result.title.value == "Auriculares Bluetooth Pro"
        assert result.title.source == FieldSource.STORE_DOM
        assert result.image_url.value == "https://m.media-amazon.com/images/I/hires.jpg"

    def test_boilerplate_meta_title_skipped(self):
        doc = parse(page(
            '<meta name="title" content="Amazon.es">',
            '<span itemprop="name">Auriculares Pro</span>',
        ))
        assert AMAZON.title_candidates(doc) == ["Auriculares Pro"]

    def test_store_prefix_removed(self):
        doc = parse(page('<meta name="title" content="Amazon.es: Auriculares Bluetooth Pro">'))
        assert AMAZON.title_candidates(doc) == ["Auriculares Bluetooth Pro"]

    def test_dynamic_image_largest_wins(self):
        sizes = {
            "https://m.media-amazon.com/images/I/small.jpg": [200, 200],
            "https://m.media-amazon.com/images/I/big.jpg": [1500, 1500],
            "https://m.media-amazon.com/images/I/mid.jpg": [600, 600],
        }
        doc = parse(page(body=f"<img id=\"landingImage\" data-a-dynamic-image='{json.dumps(sizes)}'>"))
        assert read_dynamic_image(doc) == "https://m.media-amazon.com/images/I/big.jpg"

    def test_hires_script_value(self):
        doc = parse(page(body=(
            '<script>var colorImages = {"initial": [{"hiRes":"https://m.media-amazon.com/images/I/h.jpg",'
            '"large":"https://m.media-amazon.com/images/I/l.jpg"}]};</script>'
        )), "https://www.amazon.es/dp/B0CXPJ3KMN")
        assert AMAZON.extract_image(doc, doc.url) == "https://m.media-amazon.com/images/I/h.jpg"


class TestAliExpressDocument:

    def test_run_params(self):
        doc = parse(page(body=(
            r'<script>window.runParams = {"data":{"titleModule":{"subject":"Auriculares TWS Bluetooth 5.3"},'
            r'"imageModule":{"imagePathList":["https:\/\/ae01.alicdn.com\/kf\/Sabc123.jpg"]}}};</script>'
        )), "https://es.aliexpress.com/item/1005006342357549.html")
        result = ALIEXPRESS.extract_from_document(doc)
        assert result.title.value == "Auriculares TWS Bluetooth 5.3"
        assert result.image_url.value == "https://ae01.alicdn.com/kf/Sabc123.jpg"

    def test_cdn_url_in_markup(self):
        doc = parse(page(body='<div data-img="//ae01.alicdn.com/kf/Hxyz.png"></div>'),
                    "https://es.aliexpress.com/item/1005006342357549.html")
        assert ALIEXPRESS.extract_image(doc, doc.url) == "https://ae01.alicdn.com/kf/Hxyz.png"

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Auriculares TWS Bluetooth - AliExpress 44", "Auriculares TWS Bluetooth"),
            ("Buy Auriculares TWS on AliExpress", "Auriculares TWS"),
            ("Auriculares TWS, compra a precios bajos en AliExpress", "Auriculares TWS"),
            ("AliExpress", ""),
            ("Aliexpress.com", ""),
        ],
    )
    def test_title_boilerplate(self, title, expected):
        assert ALIEXPRESS.clean_store_title(title) == expected


class TestHM:

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Camiseta oversize | H&M ES", "Camiseta oversize"),
            ("Camiseta oversize | H&M", "Camiseta oversize"),
            ("Productpage", ""),
            ("Page not found", ""),
        ],
    )
    def test_title_filters(self, title, expected):
        assert HM.clean_store_title(title) == expected

    def test_largest_image_by_width(self):
        images = [
            {"url": "//image.hm.com/a.jpg", "width": 396},
            {"url": "//image.hm.com/b.jpg", "width": 1536},
            {"url": "//image.hm.com/c.jpg"},
            "not-an-image",
        ]
        assert largest_image(images) == "https://image.hm.com/b.jpg"
        assert largest_image(None) is None

    def test_parse_product_detail(self):
        result = parse_product_detail({
            "product": {
                "name": "Camiseta oversize",
                "images": [{"url": "https://image.hm.com/a.jpg", "width": 800}],
            }
        })
        assert result.title.value == "Camiseta oversize"
        assert result.title.source == FieldSource.STORE_API
        assert result.image_url.value == "https://image.hm.com/a.jpg"

    def test_parse_unexpected_payload(self):
        assert not parse_product_detail(["unexpected"]).title

    async def test_fetch_product_detail(self, web, fetcher):
        web.add(api_url("0970819001"), 200, json.dumps({"name": "Sudadera capucha", "images": []}))
        result = await fetch_product_detail(fetcher, "0970819001")
        assert result.title.value == "Sudadera capucha"
        assert web.urls() == ["https://www2.hm.com/hmwebservices/service/product/es/detail/0970819001.json"]

    async def test_fetch_product_detail_failure(self, web, fetcher):
        result = await fetch_product_detail(fetcher, "0970819001")
        assert not result.title
        assert not result.image_url
