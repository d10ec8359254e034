"""
Extraction Orchestrator.

Top-level entry point: validates the URL, classifies the merchant, runs the
store profile and the generic extractor over a single fetched page, cleans
every title candidate, and merges everything into one ExtractionResult with
confidence flags. Never raises for reachable-network conditions.
"""
from typing import Any, Callable, List, Optional, Sequence, Tuple

from wishmeta.adapters.document import Document, parse
from wishmeta.adapters.generic_extractor import GenericExtractor, description_from_url, title_from_url
from wishmeta.adapters.http_fetcher import HttpFetcher
from wishmeta.layers.sanitization import clean_title
from wishmeta.merchants import PROFILES, MerchantProfile, find_profile
from wishmeta.models.extraction import (
    ExtractionRequest,
    ExtractionResult,
    FieldSource,
    FieldValue,
    PartialExtraction,
    TRUSTED_IMAGE_SOURCES,
    TRUSTED_TITLE_SOURCES,
)
from wishmeta.utils.logger import LayerLogger, set_trace_id
from wishmeta.utils.url_validator import InputRejected, validate_url


class ExtractionOrchestrator:
    """
    Extraction Orchestrator - one call, one ExtractionResult.

    Field precedence when merging:
    store DOM / store API -> generic -> constructed / synthesized -> URL-derived.
    Merging is per field, so a store title can be combined with a generic image.

    Constructed store images are only built after the generic cascade found
    no image at all. A scraped og:image or scored <img> therefore outranks a
    CDN URL guessed from the product ID, and no HEAD request is spent when
    the page already showed an image.
    """

    def __init__(
        self,
        fetcher: Optional[HttpFetcher] = None,
        generic: Optional[GenericExtractor] = None,
        profiles: Sequence[MerchantProfile] = PROFILES,
    ):
        self.fetcher = fetcher or HttpFetcher()
        self.generic = generic or GenericExtractor()
        self.profiles = tuple(profiles)
        self.logger = LayerLogger("orchestrator")

    async def extract(self, url: str, client_user_agent: Optional[str] = None) -> ExtractionResult:
        """
        Extract product metadata from a URL.

        Args:
            url: Product page URL as entered by the user
            client_user_agent: User-Agent of the requesting browser, used for
                the first fetch attempt

        Returns:
            ExtractionResult (empty with both flags false for rejected input)
        """
        if not isinstance(url, str):
            set_trace_id()
            self.logger.log_decision("reject_input", "malformed", url=repr(url))
            return ExtractionResult.empty()
        return await self.handle(ExtractionRequest(url=url, client_user_agent=client_user_agent))

    async def handle(self, request: ExtractionRequest) -> ExtractionResult:
        """Run one ExtractionRequest through the pipeline."""
        set_trace_id()
        self.logger.log_action("extraction", "started", url=request.url)

        try:
            normalized = validate_url(request.url)
        except InputRejected as e:
            self.logger.log_decision("reject_input", e.reason, url=e.url)
            return ExtractionResult.empty()

        try:
            return await self._run(normalized, request.client_user_agent)
        except Exception as e:
            self.logger.log_error(
                f"Extraction pipeline failed: {e}",
                error_type=type(e).__name__,
                url=normalized,
            )
            self.logger.log_fallback("pipeline", "url_derived", "unexpected_error", url=normalized)
            return self._finalize(normalized, FieldValue(), PartialExtraction())

    async def _run(self, url: str, client_user_agent: Optional[str]) -> ExtractionResult:
        profile = find_profile(url, self.profiles)
        self.logger.log_decision(
            decision=f"merchant_{profile.name}" if profile else "generic",
            reason="host_match" if profile else "no_profile_matched",
            url=url,
        )

        user_agent = (profile.user_agent if profile else None) or client_user_agent
        outcome = await self.fetcher.fetch_page(
            url,
            user_agent=user_agent,
            cookie=profile.cookie if profile else None,
        )

        doc: Optional[Document] = None
        page_url = url
        if outcome:
            page_url = outcome.final_url
            doc = parse(outcome.text, page_url)
        else:
            self.logger.log_fallback("page_fetch", "constructed", outcome.reason, url=url)

        merged = PartialExtraction()
        title_candidates: List[Tuple[str, FieldSource]] = []

        if profile:
            merged.product_id = self._product_id(profile, url, page_url, doc)

            if doc is not None:
                store = self._guard("store_dom", profile.extract_from_document, doc, page_url, default=PartialExtraction())
                merged.set_description(store.description.value, store.description.source)
                merged.set_image(store.image_url.value, store.image_url.source)
                candidates = self._guard("store_titles", profile.title_candidates, doc, default=[])
                title_candidates.extend((title, FieldSource.STORE_DOM) for title in candidates)

            if profile.api_fallback and merged.product_id and (not title_candidates or not merged.image_url):
                self.logger.log_fallback("store_dom", "store_api", "missing_title_or_image", url=url)
                api = await self._guard_async("store_api", profile.api_fallback, self.fetcher, merged.product_id, default=PartialExtraction())
                if api.title:
                    title_candidates.append((api.title.value, api.title.source))
                merged.set_description(api.description.value, api.description.source)
                merged.set_image(api.image_url.value, api.image_url.source)

        if doc is not None:
            selectors = profile.image_selectors if profile else ()
            generic = self._guard("generic", self.generic.extract, doc, page_url, selectors, default=PartialExtraction())
            merged.set_description(generic.description.value, FieldSource.GENERIC)
            merged.set_image(generic.image_url.value, FieldSource.GENERIC)
            candidates = self._guard("generic_titles", self.generic.title_candidates, doc, default=[])
            title_candidates.extend((title, FieldSource.GENERIC) for title in candidates)

        if profile and not merged.image_url and merged.product_id:
            await self._construct_image(profile, merged)

        title = self._resolve_title(url, title_candidates)
        if not title and profile and profile.synthesize_title:
            title = FieldValue(profile.synthesized_title(merged.product_id), FieldSource.SYNTHESIZED)
            self.logger.log_fallback("title", "synthesized", "no_real_title", url=url)

        return self._finalize(url, title, merged)

    def _product_id(
        self,
        profile: MerchantProfile,
        url: str,
        page_url: str,
        doc: Optional[Document],
    ) -> Optional[str]:
        """Product ID from the URL, the post-redirect URL, or the page itself."""
        product_id = profile.extract_product_id(url)
        if not product_id and page_url != url:
            product_id = profile.extract_product_id(page_url)
        if not product_id and doc is not None:
            product_id = self._guard("product_id", profile.product_id_from_document, doc, default=None)

        self.logger.log_decision(
            "product_id",
            "found" if product_id else "not_found",
            url=url,
            merchant=profile.name,
            product_id=product_id,
        )
        return product_id

    async def _construct_image(self, profile: MerchantProfile, merged: PartialExtraction):
        candidates = profile.build_fallback_images(merged.product_id)
        if not candidates:
            return

        if profile.verify_constructed_image:
            verified = await self._guard_async("verify_image", self.fetcher.first_existing, candidates, default=None)
            if verified:
                merged.set_image(verified, FieldSource.CONSTRUCTED_VERIFIED)
                return

        self.logger.log_fallback("image", "constructed", "no_scraped_image", merchant=profile.name)
        merged.set_image(candidates[0], FieldSource.CONSTRUCTED)

    def _resolve_title(self, url: str, candidates: List[Tuple[str, FieldSource]]) -> FieldValue:
        """First candidate that survives sanitization, in precedence order."""
        for raw, source in candidates:
            cleaned = clean_title(raw, url)
            if cleaned:
                self.logger.log_decision("title_source", source.value, url=url)
                return FieldValue(cleaned, source)
            self.logger.log_fallback(source.value, "next_title_candidate", "rejected_by_sanitization", title=raw)
        return FieldValue()

    def _finalize(self, url: str, title: FieldValue, merged: PartialExtraction) -> ExtractionResult:
        """Apply URL-derived fallbacks, compute confidence flags and build the result."""
        if not title:
            title = FieldValue(title_from_url(url), FieldSource.URL_DERIVED)
            self.logger.log_fallback("title", "url_derived", "no_title_found", url=url)

        merged.title = title
        if not merged.description:
            merged.set_description(description_from_url(url), FieldSource.URL_DERIVED)

        result = ExtractionResult(
            title=merged.title.value,
            description=merged.description.value,
            image_url=merged.image_url.value,
            price="",
            is_title_valid=merged.title.source in TRUSTED_TITLE_SOURCES,
            is_image_valid=merged.image_url.source in TRUSTED_IMAGE_SOURCES,
        )

        fields = {"title": result.title, "description": result.description, "image_url": result.image_url}
        self.logger.log_extraction_summary(
            url=url,
            sources=merged.sources(),
            fields_present=[name for name, value in fields.items() if value],
            fields_missing=[name for name, value in fields.items() if not value],
            is_title_valid=result.is_title_valid,
            is_image_valid=result.is_image_valid,
        )
        return result

    def _guard(self, step: str, func: Callable, *args, default: Any = None) -> Any:
        """Run one cascade step; an unexpected error only empties that step."""
        try:
            return func(*args)
        except Exception as e:
            self.logger.log_error(f"Step {step} failed: {e}", error_type=type(e).__name__, step=step)
            return default

    async def _guard_async(self, step: str, func: Callable, *args, default: Any = None) -> Any:
        try:
            return await func(*args)
        except Exception as e:
            self.logger.log_error(f"Step {step} failed: {e}", error_type=type(e).__name__, step=step)
            return default


_default_orchestrator: Optional[ExtractionOrchestrator] = None


async def extract(url: str, client_user_agent: Optional[str] = None) -> ExtractionResult:
    """Extract product metadata with the default orchestrator."""
    global _default_orchestrator
    if _default_orchestrator is None:
        _default_orchestrator = ExtractionOrchestrator()
    return await _default_orchestrator.extract(url, client_user_agent)
