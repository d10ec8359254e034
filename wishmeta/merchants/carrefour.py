"""Carrefour online store product pages."""
import re

from wishmeta.merchants.base import MerchantProfile, compile_all, jsonld_field

CARREFOUR = MerchantProfile(
    name="Carrefour",
    host_pattern=re.compile(r"(?:^|\.)carrefour\.(?:es|fr|com)$"),
    product_id_patterns=compile_all([
        r"/(R-[A-Za-z0-9]+)/p",
        r"/p/(\d{6,})",
        r"-(\d{8,})(?:[/?#]|$)",
    ]),
    title_selectors=(
        "h1.product-header__name",
        "h1.pdp-title",
        "h1[itemprop='name']",
    ),
    title_readers=(jsonld_field("name"),),
    title_filters=compile_all([
        r"\s*[|\-]\s*Carrefour(?:\.[a-z]+)?\s*$",
    ], re.I),
    rejected_titles=compile_all([
        r"carrefour(?:\.[a-z]+)?",
    ], re.I),
    description_selectors=(
        ".product-details__description",
        "meta[name='description']",
    ),
    image_selectors=(
        "meta[property='og:image']",
        ".main-image img",
        ".pdp-image img",
    ),
    image_readers=(jsonld_field("image"),),
)
