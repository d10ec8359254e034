"""
Structured logging for the extraction pipeline.

Every event carries a short trace id bound per extraction, so the fetches,
fallbacks and final summary of one URL can be grepped together.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

import structlog

from wishmeta.config import config

TRACE_ID_KEY = "trace_id"


def _new_trace_id() -> str:
    return uuid.uuid4().hex[:8]


def set_trace_id(trace_id: Optional[str] = None) -> str:
    """Bind a (new) trace id to the current async context."""
    trace_id = trace_id or _new_trace_id()
    structlog.contextvars.bind_contextvars(**{TRACE_ID_KEY: trace_id})
    return trace_id


def get_trace_id() -> str:
    """Trace id of the current context, binding one if none is set yet."""
    trace_id = structlog.contextvars.get_contextvars().get(TRACE_ID_KEY)
    return trace_id or set_trace_id()


def _ensure_trace_id(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    event_dict.setdefault(TRACE_ID_KEY, get_trace_id())
    return event_dict


def configure_logging():
    level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer()
        if config.LOG_FORMAT == "json"
        else structlog.dev.ConsoleRenderer(colors=config.DEBUG)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _ensure_trace_id,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # httpx/httpcore log every request at INFO; ours already do
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


class LayerLogger:
    """
    Logger bound to one pipeline component (fetcher, extractor, merchant, ...).

    Event names are fixed so log queries do not depend on message wording:
    decision_made, action_<status>, fallback_triggered, error_occurred,
    http_fetch and extraction_summary.
    """

    def __init__(self, layer_name: str):
        self.layer_name = layer_name
        self.logger = get_logger(layer_name).bind(layer=layer_name)

    def _emit(self, level: str, event: str, **fields):
        getattr(self.logger, level)(event, **fields)

    def log_decision(self, decision: str, reason: str, url: Optional[str] = None, **extra):
        self._emit("info", "decision_made", decision=decision, reason=reason, url=url, **extra)

    def log_action(self, action: str, status: str = "started", **extra):
        self._emit("info", f"action_{status}", action=action, **extra)

    def log_fallback(self, from_source: str, to_source: str, reason: str, **extra):
        """A cascade source yielded nothing usable; the next one takes over."""
        self._emit("warning", "fallback_triggered", from_source=from_source, to_source=to_source, reason=reason, **extra)

    def log_error(self, error: str, error_type: str = "unknown", **extra):
        self._emit("error", "error_occurred", error=error, error_type=error_type, **extra)

    def log_fetch(
        self,
        url: str,
        method: str,
        status_code: Optional[int],
        result: str,
        attempt: int = 1,
        **extra
    ):
        """One outbound request. status_code is None when no response arrived."""
        level = "info" if result == "success" else "warning"
        self._emit(
            level,
            "http_fetch",
            url=url,
            method=method,
            status_code=status_code,
            result=result,
            attempt=attempt,
            **extra
        )

    def log_extraction_summary(
        self,
        url: str,
        sources: Dict[str, str],
        fields_present: List[str],
        fields_missing: List[str],
        is_title_valid: bool,
        is_image_valid: bool,
        **extra
    ):
        """Final per-field provenance of one extraction."""
        self._emit(
            "info",
            "extraction_summary",
            url=url,
            sources=sources,
            fields_present=fields_present,
            fields_missing=fields_missing,
            is_title_valid=is_title_valid,
            is_image_valid=is_image_valid,
            **extra
        )


configure_logging()
