"""Tests for the FastAPI surface."""
import pytest
from fastapi.testclient import TestClient

from wishmeta import main
from wishmeta.layers.orchestrator import ExtractionOrchestrator
from tests.conftest import FakeWeb, make_fetcher, page


@pytest.fixture
def site(monkeypatch):
    web = FakeWeb()
    monkeypatch.setattr(main, "orchestrator", ExtractionOrchestrator(fetcher=make_fetcher(web.handler)))
    return web


@pytest.fixture
def client():
    return TestClient(main.app)


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_extract_metadata_camel_case(client, site):
    url = "https://shop.example.com/products/headphones"
    site.add(url, 200, page(
        '<meta property="og:title" content="Blue Wireless Headphones">'
        '<meta property="og:image" content="https://cdn.example.com/img.jpg">'
    ))
    response = client.get("/api/extract-metadata", params={"url": url}, headers={"User-Agent": "Phone/2.0"})
    assert response.status_code == 200
    assert response.json() == {
        "title": "Blue Wireless Headphones",
        "description": "Enlace de shop.example.com",
        "imageUrl": "https://cdn.example.com/img.jpg",
        "price": "",
        "isTitleValid": True,
        "isImageValid": True,
    }
    assert site.requests[0].headers["User-Agent"] == "Phone/2.0"


def test_rejected_url_is_still_200(client, site):
    response = client.get("/api/extract-metadata", params={"url": "http://127.0.0.1/admin"})
    assert response.status_code == 200
    assert response.json()["isTitleValid"] is False
    assert site.calls == 0


def test_missing_url_is_422(client, site):
    assert client.get("/api/extract-metadata").status_code == 422
