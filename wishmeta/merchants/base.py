"""
Merchant profile definition.

A MerchantProfile describes everything store-specific about a merchant:
which hosts it serves, how product IDs appear in its URLs, which selectors
hold the title and image, an optional JSON API and CDN image templates.
Profiles are plain data plus callables; the orchestrator runs them all
through the same steps.
"""
import json
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Pattern, Sequence, Tuple
from urllib.parse import urlsplit

from wishmeta.adapters.document import Document, clean_text
from wishmeta.adapters.generic_extractor import jsonld_image_url, resolve_url
from wishmeta.adapters.http_fetcher import HttpFetcher
from wishmeta.models.extraction import FieldSource, PartialExtraction
from wishmeta.utils.logger import LayerLogger

DocumentReader = Callable[[Document], Optional[str]]
ApiFallback = Callable[[HttpFetcher, str], Awaitable[PartialExtraction]]
ImageTemplates = Callable[[str], List[str]]

logger = LayerLogger("merchants")


@dataclass(frozen=True)
class MerchantProfile:
    """Store-specific extraction strategy."""

    name: str
    host_pattern: Pattern
    product_id_patterns: Tuple[Pattern, ...] = ()
    product_id_reader: Optional[DocumentReader] = None
    min_product_id_length: int = 1
    title_selectors: Tuple[str, ...] = ()
    title_readers: Tuple[DocumentReader, ...] = ()
    title_filters: Tuple[Pattern, ...] = ()
    rejected_titles: Tuple[Pattern, ...] = ()
    description_selectors: Tuple[str, ...] = ()
    image_selectors: Tuple[str, ...] = ()
    image_readers: Tuple[DocumentReader, ...] = ()
    api_fallback: Optional[ApiFallback] = None
    image_templates: Optional[ImageTemplates] = None
    verify_constructed_image: bool = False
    synthesize_title: bool = False
    user_agent: Optional[str] = None
    cookie: Optional[str] = None

    def matches(self, url: str) -> bool:
        try:
            host = urlsplit(url).hostname or ""
        except ValueError:
            return False
        return bool(self.host_pattern.search(host.lower()))

    def extract_product_id(self, url: Optional[str]) -> Optional[str]:
        """First product ID matched by the patterns, in declaration order."""
        if not url:
            return None
        for pattern in self.product_id_patterns:
            match = pattern.search(url)
            if match and len(match.group(1)) >= self.min_product_id_length:
                return match.group(1)
        return None

    def product_id_from_document(self, doc: Document) -> Optional[str]:
        if self.product_id_reader is None:
            return None
        return self.product_id_reader(doc)

    def clean_store_title(self, title: Optional[str]) -> str:
        """Drop store boilerplate and placeholder page titles."""
        if not title:
            return ""
        cleaned = title
        for pattern in self.title_filters:
            cleaned = pattern.sub("", cleaned).strip()
        if any(pattern.fullmatch(cleaned) for pattern in self.rejected_titles):
            return ""
        return cleaned

    def title_candidates(self, doc: Document) -> List[str]:
        """Store title candidates in priority order, boilerplate removed."""
        raw = [doc.select_text(selector) for selector in self.title_selectors]
        raw.extend(reader(doc) for reader in self.title_readers)

        candidates: List[str] = []
        for value in raw:
            cleaned = self.clean_store_title(clean_text(value))
            if cleaned and cleaned not in candidates:
                candidates.append(cleaned)
        return candidates

    def extract_image(self, doc: Document, base_url: Optional[str]) -> Optional[str]:
        for selector in self.image_selectors:
            image = resolve_url(doc.select_attr(selector), base_url)
            if image:
                return image
        for reader in self.image_readers:
            image = resolve_url(reader(doc), base_url)
            if image:
                return image
        return None

    def extract_description(self, doc: Document) -> Optional[str]:
        for selector in self.description_selectors:
            text = doc.select_text(selector)
            if text:
                return text
        return None

    def extract_from_document(self, doc: Document, base_url: Optional[str] = None) -> PartialExtraction:
        """Store DOM scrape: first non-empty value per field wins."""
        result = PartialExtraction()
        candidates = self.title_candidates(doc)
        if candidates:
            result.set_title(candidates[0], FieldSource.STORE_DOM)
        result.set_description(self.extract_description(doc), FieldSource.STORE_DOM)
        result.set_image(self.extract_image(doc, base_url or doc.url), FieldSource.STORE_DOM)

        logger.log_action(
            "store_dom_extraction",
            "completed",
            merchant=self.name,
            sources=result.sources(),
        )
        return result

    def build_fallback_images(self, product_id: Optional[str]) -> List[str]:
        """Constructed CDN image URLs, best guess first."""
        if not product_id or self.image_templates is None:
            return []
        return self.image_templates(product_id)

    def synthesized_title(self, product_id: Optional[str]) -> str:
        if product_id:
            return f"Producto {self.name} ({product_id})"
        return f"Producto {self.name}"


def compile_all(patterns: Sequence[str], flags: int = 0) -> Tuple[Pattern, ...]:
    return tuple(re.compile(pattern, flags) for pattern in patterns)


def script_value(pattern: Pattern) -> DocumentReader:
    """
    Reader that searches every inline script for a quoted JSON string value.

    The captured group is decoded as a JSON string so escapes such as \\u002F
    come out right.
    """
    def read(doc: Document) -> Optional[str]:
        for script in doc.scripts():
            match = pattern.search(script)
            if match:
                value = decode_json_string(match.group(1))
                if value:
                    return value
        return None
    return read


def markup_value(pattern: Pattern) -> DocumentReader:
    """Reader that searches the raw page markup, including attributes."""
    def read(doc: Document) -> Optional[str]:
        match = pattern.search(doc.markup)
        return decode_json_string(match.group(1)) if match else None
    return read


def jsonld_field(field: str) -> DocumentReader:
    """Reader returning a JSON-LD field, preferring Product nodes."""
    def read(doc: Document) -> Optional[str]:
        nodes = doc.jsonld_nodes()
        products = [node for node in nodes if _is_product(node)]
        for node in products + [node for node in nodes if node not in products]:
            value = node.get(field)
            if field == "image":
                value = jsonld_image_url(value)
            if isinstance(value, str) and value.strip():
                return clean_text(value)
        return None
    return read


def _is_product(node: dict) -> bool:
    kind = node.get("@type")
    if isinstance(kind, list):
        return "Product" in kind
    return kind == "Product"


def decode_json_string(raw: Optional[str]) -> Optional[str]:
    """Decode the body of a JSON string literal, tolerating bad escapes."""
    if not raw:
        return None
    try:
        value = json.loads(f'"{raw}"')
    except (json.JSONDecodeError, ValueError):
        value = raw
    return clean_text(value) or None
