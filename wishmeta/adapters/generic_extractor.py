"""
Generic metadata extractor.

Works on any product page using standard conventions: Open Graph, Twitter
Cards, meta tags, Schema.org JSON-LD and, for images, a scoring heuristic
over <img> elements. Also derives a last-resort title from the URL itself.
"""
import re
from typing import Any, List, Optional, Sequence
from urllib.parse import unquote, urljoin, urlsplit

from bs4 import Tag

from wishmeta.adapters.document import Document, clean_text
from wishmeta.models.extraction import FieldSource, PartialExtraction
from wishmeta.utils.logger import LayerLogger

IMAGE_KEYWORDS = ("product", "main", "hero", "featured", "gallery", "carousel", "slide")
REJECTED_IMAGE_MARKERS = ("placeholder", "logo", "icon", "blank.", "loading")
DEMOTED_IMAGE_MARKERS = ("avatar", "thumb")
IMAGE_EXTENSION_RE = re.compile(r"\.(jpe?g|png|webp)(?:$|[?#&;/])", re.I)

# Elements before this index in tree order count as "high in the page".
EARLY_NODE_LIMIT = 200

MIN_SCORE = 20
FALLBACK_MIN_DIMENSION = 200

# Trailing product-code tokens in URL slugs, e.g. "B0CXPJ3KMN" or "p04087301".
_ID_TOKEN_RE = re.compile(r"^(?=.*\d)[A-Za-z0-9]{6,}$")
_FILE_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9]{2,5}$")
_DIMENSION_RE = re.compile(r"(\d+)")


def title_from_url(url: str) -> str:
    """
    Build a readable title from the URL path.

    Walks path segments from last to first and uses the first one that is
    still meaningful after stripping extensions and product codes. Falls
    back to "Producto de {hostname}".
    """
    parts = urlsplit(url)
    segments = [unquote(segment) for segment in parts.path.split("/") if segment]

    for segment in reversed(segments):
        segment = _FILE_EXTENSION_RE.sub("", segment)
        words = [word for word in re.split(r"[-_.\s+]+", segment) if word]
        while words and _ID_TOKEN_RE.match(words[-1]):
            words.pop()
        candidate = " ".join(words)
        if len(candidate) < 3 or candidate.isdigit():
            continue
        return " ".join(word[:1].upper() + word[1:] for word in words)

    return f"Producto de {_display_host(url)}"


def description_from_url(url: str) -> str:
    return f"Enlace de {_display_host(url)}"


def _display_host(url: str) -> str:
    host = urlsplit(url).hostname or ""
    return re.sub(r"^www\.", "", host)


def resolve_url(value: Optional[str], base_url: Optional[str]) -> Optional[str]:
    """Resolve protocol-relative, root-relative and relative URLs against the page."""
    if not value:
        return None
    value = value.strip()
    if value.startswith("data:"):
        return None
    absolute = urljoin(base_url, value) if base_url else value
    if absolute.startswith("//"):
        absolute = "https:" + absolute
    if not absolute.lower().startswith(("http://", "https://")):
        return None
    return absolute


class GenericExtractor:
    """Extract title, description and image from standard page metadata."""

    def __init__(self):
        self.logger = LayerLogger("generic_extractor")

    def extract(
        self,
        doc: Document,
        url: str,
        image_selectors: Sequence[str] = (),
    ) -> PartialExtraction:
        """
        Run every cascade over one document.

        Args:
            doc: Parsed page
            url: URL the page was served from (used to resolve relative URLs)
            image_selectors: Store-specific image selectors for known domains

        Returns:
            PartialExtraction with GENERIC sources
        """
        result = PartialExtraction()
        result.set_title(self.extract_title(doc), FieldSource.GENERIC)
        result.set_description(self.extract_description(doc), FieldSource.GENERIC)
        result.set_image(self.extract_image(doc, url, image_selectors), FieldSource.GENERIC)
        return result

    def title_candidates(self, doc: Document) -> List[str]:
        """Every title candidate in cascade order, without duplicates."""
        candidates = [
            doc.meta("og:title"),
            doc.meta("twitter:title"),
            doc.meta("title"),
            doc.title_tag(),
            self._jsonld_title(doc),
            doc.select_text("h1"),
        ]
        unique: List[str] = []
        for candidate in candidates:
            if candidate and candidate not in unique:
                unique.append(candidate)
        return unique

    def extract_title(self, doc: Document) -> Optional[str]:
        candidates = self.title_candidates(doc)
        return candidates[0] if candidates else None

    def extract_description(self, doc: Document) -> Optional[str]:
        return doc.meta("og:description", "twitter:description", "description")

    def extract_image(
        self,
        doc: Document,
        url: str,
        image_selectors: Sequence[str] = (),
    ) -> Optional[str]:
        """Image cascade: meta tags, JSON-LD, store selectors, then scoring."""
        base_url = doc.url or url

        meta_image = doc.meta("og:image", "og:image:url", "og:image:secure_url", "twitter:image", "image")
        image = resolve_url(meta_image, base_url)
        if image:
            return image

        image = resolve_url(self._jsonld_image(doc), base_url)
        if image:
            return image

        for selector in image_selectors:
            image = resolve_url(doc.select_attr(selector), base_url)
            if image:
                self.logger.log_decision("image_source", "store_selector", url=url, selector=selector)
                return image

        image = self.best_image(doc, base_url)
        if image:
            return image

        self.logger.log_fallback("generic_image", "none", "no_image_candidates", url=url)
        return None

    def best_image(self, doc: Document, base_url: Optional[str]) -> Optional[str]:
        """
        Pick the most prominent product-looking <img>.

        The highest score wins and earlier images win ties. When nothing
        reaches MIN_SCORE, the first reasonably large image is used.
        """
        best_src = None
        best_score = None
        fallback_src = None

        for img in doc.images():
            src = resolve_url(self._image_src(img), base_url)
            if not src or not self._is_acceptable_src(src):
                continue

            score = self.score_image(img, doc)
            if best_score is None or score > best_score:
                best_src, best_score = src, score

            if fallback_src is None and max(self._dimensions(img)) >= FALLBACK_MIN_DIMENSION:
                fallback_src = src

        if best_score is not None and best_score >= MIN_SCORE:
            self.logger.log_decision("image_source", "scored", score=best_score, image=best_src)
            return best_src

        if fallback_src:
            self.logger.log_decision("image_source", "first_large_image", image=fallback_src)
        return fallback_src

    def score_image(self, img: Tag, doc: Document) -> int:
        """Score an <img> by size, keywords around it and position in the page."""
        score = 0
        width, height = self._dimensions(img)
        largest = max(width, height)
        if largest > 300:
            score += 20
        if largest > 500:
            score += 20

        parent = img.parent if isinstance(img.parent, Tag) else None
        locations = [
            self._attr_text(img, "class"),
            self._attr_text(img, "id"),
            self._attr_text(img, "alt"),
            self._attr_text(parent, "class"),
            self._attr_text(parent, "id"),
        ]
        for location in locations:
            for keyword in IMAGE_KEYWORDS:
                if keyword in location:
                    score += 15

        if doc.node_position(img) < EARLY_NODE_LIMIT:
            score += 15

        own = locations[0] + " " + locations[1]
        if any(marker in own for marker in DEMOTED_IMAGE_MARKERS):
            score -= 20

        return score

    def _is_acceptable_src(self, src: str) -> bool:
        lowered = src.lower()
        if any(marker in lowered for marker in REJECTED_IMAGE_MARKERS):
            return False
        return bool(IMAGE_EXTENSION_RE.search(lowered))

    def _image_src(self, img: Tag) -> Optional[str]:
        for attr in ("src", "data-src", "data-lazy-src"):
            value = img.get(attr)
            if value and not value.startswith("data:"):
                return value
        return None

    def _dimensions(self, img: Tag):
        return self._dimension(img.get("width")), self._dimension(img.get("height"))

    def _dimension(self, value: Any) -> int:
        if not value:
            return 0
        match = _DIMENSION_RE.search(str(value))
        return int(match.group(1)) if match else 0

    def _attr_text(self, tag: Optional[Tag], attr: str) -> str:
        if tag is None:
            return ""
        value = tag.get(attr)
        if isinstance(value, list):
            value = " ".join(value)
        return (value or "").lower()

    def _jsonld_title(self, doc: Document) -> Optional[str]:
        for node in doc.jsonld_nodes():
            for key in ("name", "headline"):
                value = node.get(key)
                if isinstance(value, str) and clean_text(value):
                    return clean_text(value)
        return None

    def _jsonld_image(self, doc: Document) -> Optional[str]:
        for node in doc.jsonld_nodes():
            image = jsonld_image_url(node.get("image"))
            if image:
                return image
        return None


def jsonld_image_url(value: Any) -> Optional[str]:
    """Normalize a JSON-LD image value (string, list or ImageObject) to a URL."""
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, list):
        for item in value:
            url = jsonld_image_url(item)
            if url:
                return url
    if isinstance(value, dict):
        return jsonld_image_url(value.get("url") or value.get("contentUrl"))
    return None
