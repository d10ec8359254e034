"""Shared test configuration and fixtures.

Nothing in the suite touches the network: every HttpFetcher is built on an
httpx.MockTransport that serves canned pages and records each request.
"""
from typing import Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest

from wishmeta.adapters.http_fetcher import HttpFetcher
from wishmeta.layers.orchestrator import ExtractionOrchestrator

Route = Union[Tuple[int, str], Callable[[httpx.Request], httpx.Response]]


class FakeWeb:
    """
    Canned responses keyed by URL (without query string) plus a call log.

    Unknown URLs answer 404. A route can be a (status, body) pair or a
    callable receiving the request.
    """

    def __init__(self, routes: Optional[Dict[str, Route]] = None):
        self.routes: Dict[str, Route] = dict(routes or {})
        self.requests: List[httpx.Request] = []

    def add(self, url: str, status: int = 200, body: str = "", headers: Optional[dict] = None):
        self.routes[url] = lambda request: httpx.Response(status, text=body, headers=headers or {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url).split("?", 1)[0]
        route = self.routes.get(str(request.url)) or self.routes.get(url)
        if route is None:
            return httpx.Response(404, text="not found")
        if callable(route):
            return route(request)
        status, body = route
        return httpx.Response(status, text=body)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def methods(self) -> List[str]:
        return [request.method for request in self.requests]

    def urls(self, method: Optional[str] = None) -> List[str]:
        return [str(r.url) for r in self.requests if method is None or r.method == method]


def make_fetcher(handler, **overrides) -> HttpFetcher:
    """Fast fetcher on a mock transport: short timeouts, no backoff delay."""
    settings = dict(timeout=2.0, max_attempts=3, backoff_base=0.0, verify_timeout=1.0)
    settings.update(overrides)
    return HttpFetcher(transport=httpx.MockTransport(handler), **settings)


@pytest.fixture
def web() -> FakeWeb:
    return FakeWeb()


@pytest.fixture
def fetcher(web: FakeWeb) -> HttpFetcher:
    return make_fetcher(web.handler)


@pytest.fixture
def orchestrator(fetcher: HttpFetcher) -> ExtractionOrchestrator:
    return ExtractionOrchestrator(fetcher=fetcher)


def page(head: str = "", body: str = "") -> str:
    return f"<!DOCTYPE html><html><head>{head}</head><body>{body}</body></html>"
