"""Transform layer - Envelope crudo → Point."""

from .fields import normalize_fields
from .timestamps import parse_rfc3339_ns
from .transformer import MessageTransformer, TransformResult

__all__ = [
    "MessageTransformer",
    "TransformResult",
    "normalize_fields",
    "parse_rfc3339_ns",
]
