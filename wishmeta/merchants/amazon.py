"""Amazon product pages (all marketplaces and amzn.to / a.co short links)."""
import json
import re
from typing import Optional

from wishmeta.adapters.document import Document
from wishmeta.merchants.base import MerchantProfile, compile_all, jsonld_field, markup_value, script_value

ASIN = r"([A-Z0-9]{10})"

_INLINE_ASIN_RE = re.compile(r'"ASIN"\s*:\s*"([A-Z0-9]{10})"')
_HIRES_RE = re.compile(r'"hiRes"\s*:\s*"(https?://[^"]+)"')
_LARGE_RE = re.compile(r'"large"\s*:\s*"(https?://[^"]+)"')


def read_inline_asin(doc: Document) -> Optional[str]:
    match = _INLINE_ASIN_RE.search(doc.markup)
    if match:
        return match.group(1)
    return doc.select_attr("input#ASIN, input[name='ASIN']", ("value",))


def read_dynamic_image(doc: Document) -> Optional[str]:
    """
    Largest image of the data-a-dynamic-image map.

    The attribute holds {"url": [width, height], ...}.
    """
    raw = doc.select_attr("#landingImage, #imgBlkFront, #main-image", ("data-a-dynamic-image",))
    if not raw:
        return None
    try:
        sizes = json.loads(raw)
    except (json.JSONDecodeError, ValueError):
        return None
    if not isinstance(sizes, dict) or not sizes:
        return None

    def area(item):
        dims = item[1]
        if isinstance(dims, list) and len(dims) >= 2:
            try:
                return int(dims[0]) * int(dims[1])
            except (TypeError, ValueError):
                return 0
        return 0

    return max(sizes.items(), key=area)[0]


def image_templates(asin: str):
    return [f"https://images-na.ssl-images-amazon.com/images/P/{asin}.jpg"]


AMAZON = MerchantProfile(
    name="Amazon",
    host_pattern=re.compile(r"(?:^|\.)(?:amazon\.[a-z]{2,3}(?:\.[a-z]{2})?|amzn\.to|amzn\.eu|a\.co)$"),
    product_id_patterns=compile_all([
        rf"/dp/{ASIN}",
        rf"/gp/product/{ASIN}",
        rf"/product/{ASIN}",
        rf"[?&]ASIN={ASIN}",
        r"/(B[0-9A-Z]{9})(?:[/?#]|$)",
    ]),
    product_id_reader=read_inline_asin,
    title_selectors=(
        "#productTitle",
        "#title",
        "meta[name='title']",
        "[itemprop='name']",
    ),
    title_readers=(jsonld_field("name"),),
    title_filters=compile_all([
        r"^Amazon\.[a-z.]+\s*:\s*",
        r"\s*:\s*Amazon\.[a-z.]+(?:\s*:\s*[^:]*)?$",
    ], re.I),
    rejected_titles=compile_all([
        r"amazon(?:\.[a-z]{2,3})+",
        r"amazon",
        r"page not found",
    ], re.I),
    description_selectors=(
        "#feature-bullets ul li span",
        "#productDescription p",
        "#productDescription",
    ),
    image_selectors=(
        "#landingImage",
        "#imgBlkFront",
        "#main-image",
    ),
    image_readers=(
        read_dynamic_image,
        script_value(_HIRES_RE),
        script_value(_LARGE_RE),
        markup_value(_HIRES_RE),
    ),
    image_templates=image_templates,
)
