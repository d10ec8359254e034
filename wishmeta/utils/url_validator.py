"""
URL validation boundary for the extraction pipeline.

Every URL is checked here before any network call: only absolute http(s)
URLs with a public hostname get through. Tracking parameters are stripped
so the fetched page is the canonical product page.
"""
import ipaddress
import re
from typing import Optional
from urllib.parse import unquote_plus, urlsplit, urlunsplit


class InputRejected(ValueError):
    """Raised when a URL must not be fetched."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"URL rejected ({reason}): {url!r}")


ALLOWED_SCHEMES = ("http", "https")

BLOCKED_HOST_PATTERNS = [
    re.compile(r"^localhost$", re.I),
    re.compile(r"\.localhost$", re.I),
    re.compile(r"^127\."),
    re.compile(r"^10\."),
    re.compile(r"^192\.168\."),
    re.compile(r"^172\.(1[6-9]|2[0-9]|3[0-1])\."),
    re.compile(r"^169\.254\."),
    re.compile(r"^0\."),
    re.compile(r"^::1$"),
    re.compile(r"^fe80:", re.I),
]

TRACKING_PARAMS = {
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "fbclid",
    "gclid",
    "_ga",
    "_gl",
    "mc_eid",
    "mc_cid",
}


# Hosts made only of numeric parts are IPv4 addresses to the resolver,
# whatever their notation: "2130706433", "0x7f000001", "017700000001", "127.1".
_NUMERIC_HOST_RE = re.compile(r"^(?:0x[0-9a-f]*|\d+)(?:\.(?:0x[0-9a-f]*|\d+)){0,3}\.?$", re.I)


def _numeric_part(part: str) -> int:
    if part[:2].lower() == "0x":
        return int(part[2:] or "0", 16)
    if len(part) > 1 and part.startswith("0"):
        return int(part, 8)
    return int(part)


def canonical_ipv4(hostname: str) -> Optional[ipaddress.IPv4Address]:
    """
    Read a numeric host the way inet_aton does.

    Returns None for ordinary hostnames. Raises ValueError for numeric hosts
    that no resolver would accept (out of range parts, bad octal digits).
    """
    host = hostname.strip("[]").lower()
    if not _NUMERIC_HOST_RE.match(host):
        return None

    parts = [_numeric_part(part) for part in host.rstrip(".").split(".")]
    *leading, last = parts
    if any(value > 0xFF for value in leading) or last >= 256 ** (4 - len(leading)):
        raise ValueError(f"IPv4 part out of range: {hostname!r}")

    value = last
    for index, part in enumerate(leading):
        value += part << (8 * (3 - index))
    return ipaddress.IPv4Address(value)


def is_blocked_host(hostname: str) -> bool:
    """
    Check a hostname against loopback, private and link-local ranges.

    Numeric IPv4 spellings are canonicalized first; one that cannot be read
    as an address is blocked outright.
    """
    host = hostname.strip("[]").lower().rstrip(".")
    try:
        numeric = canonical_ipv4(host)
    except ValueError:
        return True
    if numeric is not None:
        host = str(numeric)

    if any(pattern.search(host) for pattern in BLOCKED_HOST_PATTERNS):
        return True

    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False

    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_unspecified
        or address.is_reserved
    )


def strip_tracking_params(url: str) -> str:
    """Remove analytics query parameters, keeping every other parameter in order."""
    parts = urlsplit(url)
    if not parts.query:
        return url

    # Raw "key=value" pieces are kept as written; only removals touch the query
    pieces = parts.query.split("&")
    kept = [piece for piece in pieces if _param_name(piece) not in TRACKING_PARAMS]
    if len(kept) == len(pieces):
        return url
    return urlunsplit(parts._replace(query="&".join(kept)))


def _param_name(piece: str) -> str:
    return unquote_plus(piece.split("=", 1)[0]).lower()


def validate_url(url: Optional[str]) -> str:
    """
    Validate and normalize a URL for extraction.

    Args:
        url: Raw URL as received from the caller

    Returns:
        Normalized URL (trimmed, lowercase host, tracking params removed)

    Raises:
        InputRejected: malformed URL, non-http(s) scheme or private host
    """
    if not url or not isinstance(url, str):
        raise InputRejected(str(url), "malformed")

    candidate = url.strip()
    if any(ch.isspace() for ch in candidate):
        raise InputRejected(candidate, "malformed")

    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
        # Accessing .port validates it
        parts.port
    except ValueError:
        raise InputRejected(candidate, "malformed")

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InputRejected(candidate, "scheme")

    if not hostname:
        raise InputRejected(candidate, "malformed")

    if is_blocked_host(hostname):
        raise InputRejected(candidate, "private_host")

    netloc = parts.netloc
    if "@" in netloc:
        userinfo, _, hostport = netloc.rpartition("@")
        netloc = f"{userinfo}@{hostport.lower()}"
    else:
        netloc = netloc.lower()

    normalized = urlunsplit((parts.scheme.lower(), netloc, parts.path or "/", parts.query, parts.fragment))
    return strip_tracking_params(normalized)
