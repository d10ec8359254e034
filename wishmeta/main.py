"""
Wishlist Metadata Extractor - FastAPI Application
Thin HTTP surface over the extraction pipeline.
"""
from typing import Optional

from fastapi import FastAPI, Header, Query
from fastapi.middleware.cors import CORSMiddleware

from wishmeta import __version__
from wishmeta.config import config
from wishmeta.layers.orchestrator import ExtractionOrchestrator
from wishmeta.models.extraction import ExtractionRequest
from wishmeta.utils.logger import get_logger


# Initialize FastAPI app
app = FastAPI(
    title="Wishlist Metadata Extractor",
    description="Extracts title, description and image from e-commerce product URLs",
    version=__version__,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

orchestrator = ExtractionOrchestrator()

logger = get_logger("main")


# API Routes
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/api/extract-metadata")
async def extract_metadata(
    url: str = Query(..., description="Product page URL"),
    user_agent: Optional[str] = Header(default=None),
):
    """
    Extract product metadata for a wishlist item.

    Always answers 200 with a complete result; rejected or unreachable URLs
    yield empty or low-confidence fields instead of an error.
    """
    request = ExtractionRequest(url=url, client_user_agent=user_agent)
    logger.info("extract_metadata_request", url=request.url)
    result = await orchestrator.handle(request)
    return result.to_dict()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
