"""
H&M product pages.

H&M pages frequently render without product data for non-browser clients;
the product-detail JSON service keyed by article number fills the gap.
"""
import re
from typing import Any, List, Optional

from wishmeta.adapters.http_fetcher import HttpFetcher
from wishmeta.config import config
from wishmeta.merchants.base import MerchantProfile, compile_all, logger
from wishmeta.models.extraction import FieldSource, PartialExtraction

API_URL = "https://www2.hm.com/hmwebservices/service/product/{locale}/detail/{product_id}.json"

IMAGE_TEMPLATE = (
    "https://lp2.hm.com/hmgoepprod?set=quality[79],source[/product/{product_id}.jpg],"
    "origin[dam],category[],type[DESCRIPTIVESTILLLIFE],res[m],hmver[2]"
    "&call=url[file:/product/main]"
)


def api_url(product_id: str, locale: Optional[str] = None) -> str:
    return API_URL.format(locale=locale or config.HM_API_LOCALE, product_id=product_id)


def largest_image(images: Any) -> Optional[str]:
    """URL of the image with the largest declared width."""
    if not isinstance(images, list):
        return None

    best_url = None
    best_width = -1
    for image in images:
        if not isinstance(image, dict):
            continue
        url = image.get("url") or image.get("src") or image.get("baseUrl")
        if not isinstance(url, str) or not url:
            continue
        try:
            width = int(image.get("width") or 0)
        except (TypeError, ValueError):
            width = 0
        if width > best_width:
            best_url, best_width = url, width

    if best_url and best_url.startswith("//"):
        best_url = "https:" + best_url
    return best_url


def parse_product_detail(payload: Any) -> PartialExtraction:
    """Map a product-detail JSON payload to a partial result."""
    result = PartialExtraction()
    if not isinstance(payload, dict):
        return result

    product = payload.get("product") if isinstance(payload.get("product"), dict) else payload
    name = product.get("name")
    if isinstance(name, str):
        result.set_title(name.strip(), FieldSource.STORE_API)

    description = product.get("description")
    if isinstance(description, str):
        result.set_description(description.strip(), FieldSource.STORE_API)

    result.set_image(largest_image(product.get("images")), FieldSource.STORE_API)
    return result


async def fetch_product_detail(fetcher: HttpFetcher, product_id: str) -> PartialExtraction:
    """Query the product-detail service for one article number."""
    url = api_url(product_id)
    payload = await fetcher.fetch_json(url)
    if payload is None:
        logger.log_fallback("hm_api", "constructed", "no_payload", url=url)
        return PartialExtraction()

    result = parse_product_detail(payload)
    logger.log_action("hm_api", "completed", url=url, sources=result.sources())
    return result


def image_templates(product_id: str) -> List[str]:
    return [IMAGE_TEMPLATE.format(product_id=product_id)]


HM = MerchantProfile(
    name="H&M",
    host_pattern=re.compile(r"(?:^|\.)hm\.com$"),
    product_id_patterns=compile_all([
        r"productpage\.(\d+)\.html",
        r"/(\d{5,})/?(?:[?#]|$)",
    ]),
    title_selectors=(
        "h1.heading",
        "h1[data-testid='product-title']",
        "h1.product-item-headline",
        "title",
        "meta[property='og:title']",
    ),
    title_filters=compile_all([
        r"\s*\|\s*H&M(?:\s+\w{2})?\s*$",
    ], re.I),
    rejected_titles=compile_all([
        r"productpage",
        r"page not found",
        r"h&m(?:\s+\w{2})?",
    ], re.I),
    description_selectors=(
        "meta[property='og:description']",
        "p.pdp-description-text",
    ),
    image_selectors=(
        "meta[property='og:image']",
        ".product-detail-main-image-container img",
        ".product-detail-image img",
        "img[data-testid='product-image']",
    ),
    api_fallback=fetch_product_detail,
    image_templates=image_templates,
    synthesize_title=True,
)
