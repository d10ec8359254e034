"""
Configuration management for the wishlist metadata extractor.
Handles environment variables and extraction settings.
"""
import os
from typing import Tuple
from dotenv import load_dotenv

load_dotenv()


# Rotated per request. Read-only: random selection never mutates these.
USER_AGENTS: Tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Safari/605.1.15",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36 Edg/123.0.0.0",
)

MOBILE_SAFARI_USER_AGENT: str = USER_AGENTS[2]

REFERRERS: Tuple[str, ...] = (
    "https://www.google.com/",
    "https://www.google.es/",
    "https://www.bing.com/",
    "https://duckduckgo.com/",
)


class Config:
    """Application configuration loaded from environment variables."""

    # Server settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")  # json or console

    # Outbound fetch settings
    FETCH_TIMEOUT: float = float(os.getenv("FETCH_TIMEOUT", "10"))
    FETCH_MAX_ATTEMPTS: int = int(os.getenv("FETCH_MAX_ATTEMPTS", "3"))
    FETCH_BACKOFF_BASE: float = float(os.getenv("FETCH_BACKOFF_BASE", "0.5"))
    ACCEPT_LANGUAGE: str = os.getenv("ACCEPT_LANGUAGE", "es-ES,es;q=0.9,en;q=0.8")

    # Constructed-image verification (HEAD requests)
    IMAGE_VERIFY_TIMEOUT: float = float(os.getenv("IMAGE_VERIFY_TIMEOUT", "3"))
    IMAGE_VERIFY_CONCURRENCY: int = int(os.getenv("IMAGE_VERIFY_CONCURRENCY", "3"))

    # Merchant APIs
    HM_API_LOCALE: str = os.getenv("HM_API_LOCALE", "es")

    @classmethod
    def fetch_timeout(cls) -> float:
        """
        Wall-clock timeout for a single page fetch.

        Clamped to 8-15 seconds so a misconfigured value can neither hang
        an extraction nor cut off slow storefronts.
        """
        return min(max(cls.FETCH_TIMEOUT, 8.0), 15.0)

    @classmethod
    def max_attempts(cls) -> int:
        """Return the retry budget, capped at 3 attempts."""
        return min(max(cls.FETCH_MAX_ATTEMPTS, 1), 3)


config = Config()
