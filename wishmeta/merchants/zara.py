"""Zara product pages (zara.com, every country path)."""
import re
from typing import List

from wishmeta.merchants.base import MerchantProfile, compile_all

PHOTO_TEMPLATE = "https://static.zara.net/photos///2024/V/0/1/p/{head}{mid}/{rest}/2/w/563/{code}_1_1_1.jpg"


def image_templates(code: str) -> List[str]:
    """
    Photo CDN URL for a product code such as 04087301.

    The path splits the code into 2/2/rest digits. Codes shorter than seven
    digits do not follow that layout.
    """
    if len(code) < 7 or not code.isdigit():
        return []
    return [PHOTO_TEMPLATE.format(head=code[:2], mid=code[2:4], rest=code[4:], code=code)]


ZARA = MerchantProfile(
    name="Zara",
    host_pattern=re.compile(r"(?:^|\.)zara\.com$"),
    product_id_patterns=compile_all([
        r"-p(\d{6,})\.html",
        r"[?&]v1=(\d{6,})",
    ]),
    title_selectors=(
        "h1.product-detail-info__header-name",
        "h1.product-detail-card-info__name",
        "h1.product-name",
        "meta[property='og:title']",
    ),
    title_filters=compile_all([
        r"\s*[|\-]\s*ZARA(?:\s+\w+)?\s*$",
    ], re.I),
    rejected_titles=compile_all([
        r"zara(?:\s+\w+)?",
    ], re.I),
    description_selectors=(
        ".product-detail-description p",
        "meta[property='og:description']",
    ),
    image_selectors=(
        "meta[property='og:image']",
        "img.media-image__image",
        "picture.media-image img",
        ".product-detail-images img",
    ),
    image_templates=image_templates,
)
