"""
Title sanitization layer.

Strips store and domain noise from extracted titles ("... - Amazon.es",
"Comprar en ...", "| ZARA España") and rejects titles that are really just a
URL or a domain. An empty return value means "rejected, try the next
candidate".
"""
import html
import re
from typing import List, Optional, Pattern
from urllib.parse import urlsplit

from wishmeta.utils.logger import LayerLogger

logger = LayerLogger("sanitization")

TLD = r"(?:com|es|net|org|shop|co\.uk|de|fr|it|mx)"
SEPARATOR = r"[-–—|:]"

# A title matching any of these looks like a URL or a bare domain.
URL_LIKE_PATTERNS: List[Pattern] = [
    re.compile(r"^https?://", re.I),
    re.compile(r"^www\.", re.I),
    re.compile(r"^\s*\w+\.\w{2,}\s*$", re.I),
    re.compile(r"^es\.\w+\.com$", re.I),
    re.compile(r"^m\.\w+\.(com|es|net)$", re.I),
    re.compile(r"\.(com|es|net|org|shop)$", re.I),
    re.compile(r"\.(store|online|web)$", re.I),
    re.compile(r"^tienda\s+online$", re.I),
    re.compile(r"^shop\s+online$", re.I),
    re.compile(r"^official\s+store$", re.I),
    re.compile(r"^tienda\s+oficial$", re.I),
]

DOMAIN_NOISE_PATTERNS: List[Pattern] = [
    # Domain suffixes and prefixes joined by a separator
    re.compile(rf"\s*{SEPARATOR}\s*[a-z0-9.-]+\.{TLD}\s*$", re.I),
    re.compile(rf"\s+(?:en|at|on)\s+[a-z0-9.-]+\.{TLD}\s*$", re.I),
    re.compile(rf"\s*\(\s*[a-z0-9.-]+\.{TLD}\s*\)\s*$", re.I),
    re.compile(rf"^[a-z0-9.-]+\.{TLD}\s*{SEPARATOR}\s*", re.I),
    re.compile(rf"^\(\s*[a-z0-9.-]+\.{TLD}\s*\)\s*", re.I),
    # "Producto : Amazon.es : Electrónica"
    re.compile(r"\s*:\s*Amazon\.[a-z.]+(?:\s*:\s*[^:]*)?$", re.I),
    # Store and shopping prefixes
    re.compile(r"^(?:comprar en|buy from|shop at|kaufen bei)\s+[\w.&']+(?:\s[\w.&']+)?\s*[-:|]\s*", re.I),
    re.compile(r"^(?:comprar en|buy from|shop at|kaufen bei)\s+", re.I),
    re.compile(r"^(?:comprar online|tienda online|shop online|online shop)\s*[-:|]\s*", re.I),
    # "... - Nike Store", "... | Moda Tienda"
    re.compile(r"\s*[-–—]\s*\w+\s+(?:Web|Store|Shop|Tienda)\s*$", re.I),
    # Leftover raw URLs anywhere in the text
    re.compile(r"https?://\S+", re.I),
    re.compile(r"www\.\S+", re.I),
]

MERCHANT_NAMES = [
    r"ZARA(?:\s+\w+)?",
    r"Bershka(?:\s+\w+)?",
    r"Pull\s*&\s*Bear(?:\s+\w+)?",
    r"Massimo\s*Dutti(?:\s+\w+)?",
    r"Stradivarius(?:\s+\w+)?",
    r"Oysho(?:\s+\w+)?",
    r"El\s*Corte\s*Ingl[ée]s",
    r"ECI",
    r"Miravia",
    r"Decathlon",
    r"Media\s*Markt",
    r"PC\s*Componentes",
    r"Nike",
    r"Carrefour",
    r"IKEA",
    r"Leroy\s*Merlin",
    r"Mercadona",
    r"Adidas",
    r"Amazon",
    r"Walmart",
    r"eBay",
    r"Ali\s*Express",
    r"H&M(?:\s+\w{2})?",
]

# Merchant names are only stripped after a separator so that brand words
# inside a product name ("Zapatillas Nike Air") survive.
MERCHANT_SUFFIX_RE = re.compile(
    rf"\s*{SEPARATOR}\s*(?:{'|'.join(MERCHANT_NAMES)})\s*$",
    re.I,
)

# A lone "comprar" is part of titles like "Guía de qué comprar", so it only
# counts as boilerplate after a separator.
PURCHASE_PHRASES_RE = re.compile(
    rf"(?:\s*{SEPARATOR}?\s*(?:comprar online|buy now|buy online|al mejor precio|best price)"
    rf"|\s*{SEPARATOR}\s*comprar)\s*$",
    re.I,
)

EDGE_PUNCTUATION_RE = re.compile(r"^[\s\-–—:,|.]+|[\s\-–—:,|.]+$")
WHITESPACE_RE = re.compile(r"\s+")
BARE_TOKEN_RE = re.compile(r"^[a-zA-Z0-9.]+$")

MIN_TITLE_LENGTH = 5
SHORT_TITLE_LENGTH = 10


def title_looks_like_url(title: Optional[str]) -> bool:
    """Return True if a title is a URL, a bare domain or store boilerplate."""
    if not title:
        return False
    stripped = title.strip()
    return any(pattern.search(stripped) for pattern in URL_LIKE_PATTERNS)


def _source_domain(source_url: Optional[str]) -> str:
    if not source_url:
        return ""
    try:
        host = urlsplit(source_url).hostname or ""
    except ValueError:
        return ""
    return re.sub(r"^www\.", "", host.lower())


def _strip_once(title: str, domain: str) -> str:
    """Apply every stripping rule a single time."""
    text = WHITESPACE_RE.sub(" ", html.unescape(title)).strip()

    if domain:
        text = re.sub(rf"\s*{SEPARATOR}?\s*{re.escape(domain)}\s*$", "", text, flags=re.I)
        text = re.sub(rf"^{re.escape(domain)}\s*{SEPARATOR}\s*", "", text, flags=re.I)

    for pattern in DOMAIN_NOISE_PATTERNS:
        text = pattern.sub("", text)

    text = MERCHANT_SUFFIX_RE.sub("", text)
    text = PURCHASE_PHRASES_RE.sub("", text)
    text = EDGE_PUNCTUATION_RE.sub("", text)
    return WHITESPACE_RE.sub(" ", text).strip()


def strip_store_noise(title: str, source_url: Optional[str] = None) -> str:
    """
    Remove domain and store boilerplate until nothing else changes.

    Every rule only removes text, so the loop always terminates.
    """
    domain = _source_domain(source_url)
    current = title
    while True:
        cleaned = _strip_once(current, domain)
        if cleaned == current:
            return cleaned
        current = cleaned


def clean_title(raw_title: Optional[str], source_url: Optional[str] = None) -> str:
    """
    Clean a product title extracted from a store page.

    Args:
        raw_title: Title as extracted
        source_url: URL of the product page (its domain is stripped too)

    Returns:
        Cleaned title, or "" when the title must be rejected
    """
    if not raw_title or not raw_title.strip():
        return ""

    title = raw_title.strip()
    if len(title) < SHORT_TITLE_LENGTH and title_looks_like_url(title):
        logger.log_decision("reject_title", "short_url_like", title=title)
        return ""

    cleaned = strip_store_noise(title, source_url)

    if len(cleaned) < MIN_TITLE_LENGTH or BARE_TOKEN_RE.match(cleaned):
        logger.log_decision("reject_title", "too_short_or_bare", title=title, cleaned=cleaned)
        return ""

    if title_looks_like_url(cleaned):
        logger.log_decision("reject_title", "url_like", title=title, cleaned=cleaned)
        return ""

    return cleaned
