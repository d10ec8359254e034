"""
HTTP fetch adapter for the wishlist metadata extractor.

Performs outbound requests with browser-like headers, a hard wall-clock
timeout and bounded retries. Failures never raise: callers receive a
FetchFailure value and move on to the next cascade source.
"""
import asyncio
import json
import random
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Union

import httpx

from wishmeta.config import config, USER_AGENTS, REFERRERS
from wishmeta.utils.logger import LayerLogger
from wishmeta.utils.url_validator import InputRejected, is_blocked_host

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8"
JSON_ACCEPT = "application/json,text/javascript,*/*;q=0.1"

# Server-side conditions worth another attempt. Any other non-2xx is final.
RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}


@dataclass(frozen=True)
class FetchResponse:
    """A successful (2xx) response."""
    url: str
    final_url: str
    status_code: int
    text: str
    headers: Dict[str, str] = field(default_factory=dict)

    def json(self) -> Optional[Any]:
        """Decode the body as JSON, or None if it is not valid JSON."""
        return load_json(self.text)


@dataclass(frozen=True)
class FetchFailure:
    """
    Normalized fetch failure.

    reason is one of: timeout, transport, http_status, too_many_redirects,
    blocked_redirect, invalid_url.
    """
    url: str
    reason: str
    status_code: Optional[int] = None

    def __bool__(self) -> bool:
        return False


FetchOutcome = Union[FetchResponse, FetchFailure]


def load_json(text: Optional[str]) -> Optional[Any]:
    """Parse JSON text, returning None instead of raising on bad input."""
    if not text:
        return None
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None


class HttpFetcher:
    """
    Outbound HTTP client used by every extractor.

    Holds no mutable shared state: each call opens its own client, so
    concurrent extractions never interfere with each other.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        backoff_base: Optional[float] = None,
        verify_timeout: Optional[float] = None,
        user_agents: Sequence[str] = USER_AGENTS,
        referrers: Sequence[str] = REFERRERS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else config.fetch_timeout()
        self.max_attempts = max_attempts if max_attempts is not None else config.max_attempts()
        self.backoff_base = backoff_base if backoff_base is not None else config.FETCH_BACKOFF_BASE
        self.verify_timeout = verify_timeout if verify_timeout is not None else config.IMAGE_VERIFY_TIMEOUT
        self.user_agents = tuple(user_agents)
        self.referrers = tuple(referrers)
        self.transport = transport
        self.logger = LayerLogger("http_fetcher")

    def random_user_agent(self) -> str:
        """Pick a User-Agent from the read-only pool."""
        return random.choice(self.user_agents)

    def build_headers(
        self,
        user_agent: Optional[str] = None,
        accept: str = HTML_ACCEPT,
        cookie: Optional[str] = None,
        extra: Optional[Dict[str, str]] = None,
    ) -> Dict[str, str]:
        """Get request headers mimicking a browser arriving from a search engine."""
        headers = {
            "User-Agent": user_agent or self.random_user_agent(),
            "Accept": accept,
            "Accept-Language": config.ACCEPT_LANGUAGE,
            "Referer": random.choice(self.referrers),
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        }
        if cookie:
            headers["Cookie"] = cookie
        if extra:
            headers.update(extra)
        return headers

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=self.transport,
            event_hooks={"request": [self._guard_request]},
        )

    async def _guard_request(self, request: httpx.Request):
        """Refuse redirects that point into private address space."""
        host = request.url.host
        if host and is_blocked_host(host):
            raise InputRejected(str(request.url), "private_host")

    async def fetch_page(
        self,
        url: str,
        user_agent: Optional[str] = None,
        cookie: Optional[str] = None,
        accept: str = HTML_ACCEPT,
        headers: Optional[Dict[str, str]] = None,
    ) -> FetchOutcome:
        """
        GET a URL with retries and exponential backoff.

        Args:
            url: Absolute, already validated URL
            user_agent: User-Agent for the first attempt (retries rotate)
            cookie: Optional Cookie header (locale/currency cookies)
            accept: Accept header
            headers: Extra headers merged over the defaults

        Returns:
            FetchResponse on 2xx, FetchFailure otherwise
        """
        failure = FetchFailure(url=url, reason="transport")

        for attempt in range(self.max_attempts):
            request_headers = self.build_headers(
                user_agent=user_agent if attempt == 0 else None,
                accept=accept,
                cookie=cookie,
                extra=headers,
            )

            try:
                async with self._client(self.timeout) as client:
                    response = await asyncio.wait_for(
                        client.get(url, headers=request_headers),
                        timeout=self.timeout,
                    )
            except InputRejected:
                self.logger.log_fetch(url, "GET", None, "blocked_redirect", attempt=attempt + 1)
                return FetchFailure(url=url, reason="blocked_redirect")
            except httpx.TooManyRedirects:
                self.logger.log_fetch(url, "GET", None, "too_many_redirects", attempt=attempt + 1)
                return FetchFailure(url=url, reason="too_many_redirects")
            except httpx.InvalidURL as e:
                self.logger.log_error(f"Invalid URL: {e}", error_type="invalid_url", url=url)
                return FetchFailure(url=url, reason="invalid_url")
            except (asyncio.TimeoutError, httpx.TimeoutException):
                self.logger.log_fetch(url, "GET", None, "timeout", attempt=attempt + 1)
                failure = FetchFailure(url=url, reason="timeout")
            except httpx.HTTPError as e:
                self.logger.log_fetch(url, "GET", None, "transport_error", attempt=attempt + 1, error=str(e))
                failure = FetchFailure(url=url, reason="transport")
            else:
                status_code = response.status_code
                if response.is_success:
                    self.logger.log_fetch(
                        url,
                        "GET",
                        status_code,
                        "success",
                        attempt=attempt + 1,
                        content_length=len(response.text),
                    )
                    return FetchResponse(
                        url=url,
                        final_url=str(response.url),
                        status_code=status_code,
                        text=response.text,
                        headers=dict(response.headers),
                    )

                self.logger.log_fetch(url, "GET", status_code, f"http_{status_code}", attempt=attempt + 1)
                failure = FetchFailure(url=url, reason="http_status", status_code=status_code)
                if status_code not in RETRYABLE_STATUS_CODES:
                    return failure

            if attempt < self.max_attempts - 1:
                await asyncio.sleep(self.backoff_base * (2 ** attempt))

        return failure

    async def fetch_json(
        self,
        url: str,
        user_agent: Optional[str] = None,
        cookie: Optional[str] = None,
    ) -> Optional[Any]:
        """
        GET a JSON document.

        Returns the decoded payload, or None when the fetch failed or the
        body was not valid JSON.
        """
        outcome = await self.fetch_page(url, user_agent=user_agent, cookie=cookie, accept=JSON_ACCEPT)
        if not outcome:
            return None

        payload = outcome.json()
        if payload is None:
            self.logger.log_error("Response body is not valid JSON", error_type="json_parse_error", url=url)
        return payload

    async def head_ok(self, url: str) -> bool:
        """
        Check that a resource exists with a single short HEAD request.

        No retries: this is used to verify guessed image URLs, where a miss
        simply means "try the next template".
        """
        try:
            async with self._client(self.verify_timeout) as client:
                response = await asyncio.wait_for(
                    client.head(url, headers=self.build_headers(accept="image/*,*/*;q=0.8")),
                    timeout=self.verify_timeout,
                )
        except (InputRejected, asyncio.TimeoutError, httpx.HTTPError, httpx.InvalidURL) as e:
            self.logger.log_fetch(url, "HEAD", None, "failed", error=type(e).__name__)
            return False

        self.logger.log_fetch(url, "HEAD", response.status_code, self._status_to_result(response.status_code))
        return response.status_code == 200

    async def first_existing(self, urls: Sequence[str], concurrency: Optional[int] = None) -> Optional[str]:
        """
        Return the first URL, in priority order, that answers HEAD with 200.

        Candidates are checked in batches of at most `concurrency` requests.
        A hit in one batch stops any later batch from being sent.
        """
        limit = max(1, concurrency or config.IMAGE_VERIFY_CONCURRENCY)
        candidates = list(urls)

        for start in range(0, len(candidates), limit):
            batch = candidates[start:start + limit]
            results = await asyncio.gather(*(self.head_ok(candidate) for candidate in batch))
            for candidate, ok in zip(batch, results):
                if ok:
                    self.logger.log_decision("image_verified", "head_200", url=candidate)
                    return candidate

        self.logger.log_decision("image_unverified", "no_candidate_answered", candidates=len(candidates))
        return None

    def _status_to_result(self, status_code: int) -> str:
        """Convert HTTP status to result string for logging."""
        if status_code == 200:
            return "success"
        elif status_code in [401, 403]:
            return "blocked"
        elif status_code == 404:
            return "not_found"
        else:
            return f"http_{status_code}"
