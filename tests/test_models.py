"""Tests for extraction models."""
import pydantic
import pytest

from wishmeta.models.extraction import (
    ExtractionRequest,
    ExtractionResult,
    FieldSource,
    PartialExtraction,
)


def test_result_serializes_every_field_camel_case():
    result = ExtractionResult(title="Mesa", image_url="https://cdn.example.com/m.jpg", is_image_valid=True)
    assert result.to_dict() == {
        "title": "Mesa",
        "description": "",
        "imageUrl": "https://cdn.example.com/m.jpg",
        "price": "",
        "isTitleValid": False,
        "isImageValid": True,
    }


def test_result_is_immutable():
    result = ExtractionResult.empty()
    with pytest.raises(pydantic.ValidationError):
        result.title = "changed"


def test_request_accepts_camel_case_alias():
    request = ExtractionRequest(url="https://example.com/", clientUserAgent="UA/1")
    assert request.client_user_agent == "UA/1"


def test_partial_keeps_first_value():
    partial = PartialExtraction()
    assert partial.set_title("Primero", FieldSource.STORE_DOM) is True
    assert partial.set_title("Segundo", FieldSource.GENERIC) is False
    assert partial.set_image("", FieldSource.GENERIC) is False
    assert partial.title.value == "Primero"
    assert partial.sources() == {"title": "store_dom", "description": "none", "image_url": "none"}
