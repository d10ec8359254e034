"""Miravia marketplace product pages."""
import re

from wishmeta.merchants.base import MerchantProfile, compile_all

MIRAVIA = MerchantProfile(
    name="Miravia",
    host_pattern=re.compile(r"(?:^|\.)miravia\.es$"),
    product_id_patterns=compile_all([
        r"/p/i?(\d+)\.html",
        r"[?&]itemId=(\d+)",
    ]),
    title_selectors=(
        "h1.pdp-mod-product-badge-title",
        "h1[data-spm='product-title']",
        "meta[property='og:title']",
    ),
    title_filters=compile_all([
        r"\s*[|\-]\s*(?:es\.)?Miravia(?:\.es|\.com)?\s*$",
    ], re.I),
    rejected_titles=compile_all([
        r"(?:es\.)?miravia(?:\.es|\.com)?",
    ], re.I),
    image_selectors=(
        "meta[property='og:image']",
        ".gallery-preview-panel img",
        ".pdp-mod-common-image img",
    ),
)
