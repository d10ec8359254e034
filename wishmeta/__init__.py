"""Product metadata extraction for wishlist items."""
from wishmeta.layers.orchestrator import ExtractionOrchestrator, extract
from wishmeta.models.extraction import ExtractionResult

__version__ = "1.0.0"

__all__ = ["ExtractionOrchestrator", "ExtractionResult", "extract", "__version__"]
