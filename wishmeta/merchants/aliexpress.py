"""
AliExpress product pages.

Product pages often come back as an anti-bot shell, so besides the DOM and
the inline runParams data this profile can construct CDN image URLs from
the product ID and verify them with HEAD requests.
"""
import re
from typing import List

from wishmeta.merchants.base import MerchantProfile, compile_all, markup_value, script_value

PREFIXES = ("S", "H", "")
# Tried in this order: large, xlarge, medium
SIZES = ("_640x640.jpg", "_1000x1000.jpg", "_220x220.jpg")
CDN_BASE = "https://ae01.alicdn.com/kf/"

LOCALE_COOKIE = "aep_usuc_f=site=esp&c_tp=EUR&region=ES&b_locale=es_ES"

_SUBJECT_RE = re.compile(r'"subject"\s*:\s*"((?:[^"\\]|\\.)+)"')
_IMAGE_PATH_LIST_RE = re.compile(r'"imagePathList"\s*:\s*\[\s*"((?:[^"\\]|\\.)+)"')
_IMAGE_URL_RE = re.compile(r'"imageUrl"\s*:\s*"((?:[^"\\]|\\.)+)"')
_MAIN_IMAGE_RE = re.compile(r'"mainImage"\s*:\s*"((?:[^"\\]|\\.)+)"')
_CDN_IMAGE_RE = re.compile(r'((?:https?:)?//ae0\d\.alicdn\.com/kf/[^"\'\s<>]+?\.(?:jpg|jpeg|png|webp))', re.I)


def image_templates(product_id: str) -> List[str]:
    """CDN guesses for a product ID, best first. The first one is the unverified fallback."""
    return [
        f"{CDN_BASE}{prefix}{product_id}{size}"
        for size in SIZES
        for prefix in PREFIXES
    ]


ALIEXPRESS = MerchantProfile(
    name="AliExpress",
    host_pattern=re.compile(r"(?:^|\.)(?:aliexpress\.(?:com|us|ru|es)|alicdn\.com)$"),
    product_id_patterns=compile_all([
        r"/item/(\d{8,20})\.html",
        r"/product/(\d{8,20})\.html",
        r"/(\d{8,20})\.html",
        r"[?&]productId=(\d{8,20})",
        r"[?&]product_id=(\d{8,20})",
        r"[?&]i=(\d{8,20})",
        r"/(\d{8,20})_\d+x\d+",
        r"(?<!\d)(\d{8,20})(?!\d)",
    ]),
    min_product_id_length=8,
    title_selectors=(
        "h1[data-pl='product-title']",
        ".product-title-text",
        "h1.product-title",
        "meta[property='og:title']",
    ),
    title_readers=(script_value(_SUBJECT_RE),),
    title_filters=compile_all([
        r"\s*[|\-–]\s*Ali\s*Express.*$",
        r"[\s,;|\-–]*compra(?:r)?\s+a\s+precios\s+bajos.*$",
        r"\s+on\s+AliExpress.*$",
        r"^Buy\s+",
    ], re.I),
    rejected_titles=compile_all([
        r"ali\s*express(?:\.\w+)*",
        r"online shopping for.*",
        r"page not found",
    ], re.I),
    description_selectors=(
        "meta[property='og:description']",
    ),
    image_selectors=(
        "meta[property='og:image']",
        "img.magnifier-image",
        ".images-view-item img",
        ".image-view-magnifier-wrap img",
    ),
    image_readers=(
        script_value(_IMAGE_PATH_LIST_RE),
        script_value(_IMAGE_URL_RE),
        script_value(_MAIN_IMAGE_RE),
        markup_value(_CDN_IMAGE_RE),
    ),
    image_templates=image_templates,
    verify_constructed_image=True,
    synthesize_title=True,
    cookie=LOCALE_COOKIE,
)
