"""Adapters package initialization."""
from wishmeta.adapters.http_fetcher import HttpFetcher, FetchResponse, FetchFailure
from wishmeta.adapters.document import Document, parse
from wishmeta.adapters.generic_extractor import GenericExtractor

__all__ = ["HttpFetcher", "FetchResponse", "FetchFailure", "Document", "parse", "GenericExtractor"]
