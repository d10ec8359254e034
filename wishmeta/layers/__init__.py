"""Layers package initialization."""
from wishmeta.layers.sanitization import clean_title, title_looks_like_url
from wishmeta.layers.orchestrator import ExtractionOrchestrator, extract

__all__ = [
    "clean_title",
    "title_looks_like_url",
    "ExtractionOrchestrator",
    "extract",
]
