"""Decathlon product pages. Served most reliably to a mobile Safari client."""
import re

from wishmeta.config import MOBILE_SAFARI_USER_AGENT
from wishmeta.merchants.base import MerchantProfile, compile_all, jsonld_field

DECATHLON = MerchantProfile(
    name="Decathlon",
    host_pattern=re.compile(r"(?:^|\.)decathlon\.(?:es|com|fr|co\.uk|de|it|mx|pt)$"),
    product_id_patterns=compile_all([
        r"/_/R-p-([A-Za-z0-9-]+)",
        r"[?&]mc=(\d+)",
        r"/p/(\d{6,})",
    ]),
    title_selectors=(
        "h1[data-testid='product-name']",
        "h1.product-name",
        ".product-info h1",
    ),
    title_readers=(jsonld_field("name"),),
    title_filters=compile_all([
        r"\s*[|\-]\s*Decathlon(?:\.[a-z.]+)?\s*$",
    ], re.I),
    rejected_titles=compile_all([
        r"decathlon(?:\.[a-z.]+)?",
    ], re.I),
    description_selectors=(
        ".product-info__description",
        "meta[name='description']",
    ),
    image_selectors=(
        "meta[property='og:image']",
        ".product-gallery img",
        "img.product-image",
    ),
    image_readers=(jsonld_field("image"),),
    user_agent=MOBILE_SAFARI_USER_AGENT,
)
