"""
Extraction models for the wishlist metadata extractor.

ExtractionResult is the only artifact that leaves the pipeline. It always
carries every field; an empty string means "not found".
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class FieldSource(str, Enum):
    """Where a field value came from, ordered roughly by confidence."""
    STORE_DOM = "store_dom"
    STORE_API = "store_api"
    GENERIC = "generic"
    CONSTRUCTED_VERIFIED = "constructed_verified"
    CONSTRUCTED = "constructed"
    SYNTHESIZED = "synthesized"
    URL_DERIVED = "url_derived"
    NONE = "none"


TRUSTED_TITLE_SOURCES = {
    FieldSource.STORE_DOM,
    FieldSource.STORE_API,
    FieldSource.GENERIC,
}

TRUSTED_IMAGE_SOURCES = {
    FieldSource.STORE_DOM,
    FieldSource.STORE_API,
    FieldSource.GENERIC,
    FieldSource.CONSTRUCTED_VERIFIED,
}


class ExtractionRequest(BaseModel):
    """One call to extract(). Created per call, never persisted."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: str
    client_user_agent: Optional[str] = Field(default=None, alias="clientUserAgent")


class ExtractionResult(BaseModel):
    """
    Uniform result of one extraction.

    Validity flags express confidence, not presence: a constructed image URL
    or a synthesized title is returned but flagged invalid so the UI can ask
    the user to confirm it. Price is never scraped.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str = ""
    description: str = ""
    image_url: str = Field(default="", alias="imageUrl")
    price: str = ""
    is_title_valid: bool = Field(default=False, alias="isTitleValid")
    is_image_valid: bool = Field(default=False, alias="isImageValid")

    @classmethod
    def empty(cls) -> "ExtractionResult":
        """Result returned for rejected input."""
        return cls()

    def to_dict(self) -> dict:
        """Return the camelCase JSON shape consumed by the wishlist UI."""
        return self.model_dump(by_alias=True)


@dataclass
class FieldValue:
    """A field candidate together with its provenance."""
    value: str = ""
    source: FieldSource = FieldSource.NONE

    def __bool__(self) -> bool:
        return bool(self.value)


@dataclass
class PartialExtraction:
    """
    Intermediate result produced by one extractor.

    Extractors only fill what they found; the orchestrator merges partials
    field by field.
    """
    title: FieldValue = field(default_factory=FieldValue)
    description: FieldValue = field(default_factory=FieldValue)
    image_url: FieldValue = field(default_factory=FieldValue)
    product_id: Optional[str] = None

    def set_title(self, value: Optional[str], source: FieldSource) -> bool:
        """Set the title if still empty. Returns True when the value was taken."""
        if value and not self.title:
            self.title = FieldValue(value, source)
            return True
        return False

    def set_description(self, value: Optional[str], source: FieldSource) -> bool:
        """Set the description if still empty."""
        if value and not self.description:
            self.description = FieldValue(value, source)
            return True
        return False

    def set_image(self, value: Optional[str], source: FieldSource) -> bool:
        """Set the image URL if still empty."""
        if value and not self.image_url:
            self.image_url = FieldValue(value, source)
            return True
        return False

    def sources(self) -> Dict[str, str]:
        """Return field -> source mapping for logging."""
        return {
            "title": self.title.source.value,
            "description": self.description.source.value,
            "image_url": self.image_url.source.value,
        }
