"""Utils package initialization."""
from wishmeta.utils.logger import get_logger, LayerLogger, set_trace_id, get_trace_id
from wishmeta.utils.url_validator import InputRejected, validate_url

__all__ = [
    "get_logger",
    "LayerLogger",
    "set_trace_id",
    "get_trace_id",
    "InputRejected",
    "validate_url",
]
