"""Models package initialization."""
from wishmeta.models.extraction import (
    ExtractionRequest,
    ExtractionResult,
    FieldSource,
    FieldValue,
    PartialExtraction,
    TRUSTED_IMAGE_SOURCES,
    TRUSTED_TITLE_SOURCES,
)

__all__ = [
    "ExtractionRequest",
    "ExtractionResult",
    "FieldSource",
    "FieldValue",
    "PartialExtraction",
    "TRUSTED_IMAGE_SOURCES",
    "TRUSTED_TITLE_SOURCES",
]
