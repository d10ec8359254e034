"""
Document parser adapter.

Wraps a BeautifulSoup tree with the handful of queries every extractor
needs: meta lookups, selector reads, script bodies and JSON-LD nodes.
"""
import html
import re
from typing import Any, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from wishmeta.adapters.http_fetcher import load_json
from wishmeta.utils.logger import LayerLogger

logger = LayerLogger("document")

# Attributes that can carry an image URL, read in this order.
IMAGE_ATTRIBUTES = ("content", "data-old-hires", "src", "data-src", "data-lazy-src", "href")

_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(value: Optional[str]) -> str:
    """Decode HTML entities and collapse whitespace (including &nbsp;)."""
    if not value:
        return ""
    text = html.unescape(value).replace("\xa0", " ")
    return _WHITESPACE_RE.sub(" ", text).strip()


class Document:
    """Queryable view over one parsed HTML page."""

    def __init__(self, soup: BeautifulSoup, markup: str, url: Optional[str] = None):
        self.soup = soup
        self.markup = markup
        self.url = url
        self._node_index: Optional[Dict[int, int]] = None
        self._jsonld: Optional[List[Dict[str, Any]]] = None

    def meta(self, *keys: str) -> Optional[str]:
        """
        Return the first non-empty meta content for the given keys.

        Each key is matched against property, name and itemprop, so
        "og:title" and "twitter:title" work the same way.
        """
        for key in keys:
            for attr in ("property", "name", "itemprop"):
                for tag in self.soup.find_all("meta", attrs={attr: key}):
                    content = clean_text(tag.get("content"))
                    if content:
                        return content
        return None

    def title_tag(self) -> Optional[str]:
        tag = self.soup.find("title")
        if tag:
            return clean_text(tag.get_text()) or None
        return None

    def select_all(self, selector: str) -> List[Tag]:
        return self.soup.select(selector)

    def select_text(self, selector: str) -> Optional[str]:
        """Text of the first matching element that has any."""
        for tag in self.soup.select(selector):
            text = clean_text(tag.get("content")) if tag.name == "meta" else clean_text(tag.get_text(" "))
            if text:
                return text
        return None

    def select_attr(self, selector: str, attrs: Iterable[str] = IMAGE_ATTRIBUTES) -> Optional[str]:
        """First non-empty attribute value among matching elements."""
        attrs = tuple(attrs)
        for tag in self.soup.select(selector):
            for attr in attrs:
                value = tag.get(attr)
                if isinstance(value, list):
                    value = " ".join(value)
                value = clean_text(value)
                # Lazy-loading placeholders carry inline data URIs
                if value and not value.startswith("data:"):
                    return value
        return None

    def scripts(self) -> List[str]:
        """Bodies of every <script> element, in document order."""
        bodies = []
        for script in self.soup.find_all("script"):
            body = script.string if script.string is not None else script.get_text()
            if body and body.strip():
                bodies.append(body)
        return bodies

    def jsonld_nodes(self) -> List[Dict[str, Any]]:
        """
        Every JSON-LD object on the page, with @graph containers flattened.

        Malformed scripts are skipped individually.
        """
        if self._jsonld is not None:
            return self._jsonld

        nodes: List[Dict[str, Any]] = []
        for script in self.soup.find_all("script", type="application/ld+json"):
            payload = load_json(script.string or script.get_text())
            if payload is None:
                logger.log_fallback("jsonld_script", "next_script", "json_parse_error")
                continue
            self._collect_jsonld(payload, nodes)

        self._jsonld = nodes
        return nodes

    def _collect_jsonld(self, payload: Any, nodes: List[Dict[str, Any]]):
        if isinstance(payload, list):
            for item in payload:
                self._collect_jsonld(item, nodes)
        elif isinstance(payload, dict):
            nodes.append(payload)
            if isinstance(payload.get("@graph"), list):
                for item in payload["@graph"]:
                    self._collect_jsonld(item, nodes)

    def images(self) -> List[Tag]:
        return self.soup.find_all("img")

    def node_position(self, tag: Tag) -> int:
        """Index of a tag among all elements of the document, in tree order."""
        if self._node_index is None:
            self._node_index = {
                id(node): index for index, node in enumerate(self.soup.find_all(True))
            }
        return self._node_index.get(id(tag), len(self._node_index))


def parse(markup: Optional[str], url: Optional[str] = None) -> Optional[Document]:
    """
    Parse raw HTML into a Document.

    Returns None when there is nothing to parse or the parser gives up, so
    callers treat it as "this source yielded nothing".
    """
    if not markup or not markup.strip():
        return None

    try:
        soup = BeautifulSoup(markup, "lxml")
    except (ParserRejectedMarkup, ValueError, TypeError) as e:
        logger.log_error(f"HTML parse failed: {e}", error_type="parse_error", url=url)
        return None

    return Document(soup, markup, url)
