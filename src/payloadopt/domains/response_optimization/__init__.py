"""Response Optimization Bounded Context.

Shapes and compresses API response payloads: field projection,
depth/cycle guarding, fast or guarded JSON serialization, negotiated
gzip/deflate compression and running compression statistics. Each
stage can be used on its own; ``ResponseOptimizer`` chains them.
"""
from .aggregates import ResponseOptimizationConfig
from .value_objects import (
    UNDEFINED, CIRCULAR_SENTINEL, MAX_DEPTH_SENTINEL,
    CompressionAlgorithm, CompressionConfig, CompressionResult,
    DateFormat, ProjectionSpec, SanitizationPolicy,
    SerializationOptions, SizeCheck, StreamingConfig,
)
from .projection import PayloadProjector
from .sanitizer import TreeSanitizer
from .serialization import SerializationError, Serializer, is_simple
from .compression import CompressionEngine, parse_accept_encoding
from .stats import CompressionStats
from .services import OptimizedResponse, ResponseOptimizer
from .events import (
    ResponseCompressed, CompressionFailed,
    OversizedResponseDetected, TransformerFailed,
)

__all__ = [
    "ResponseOptimizationConfig",
    "UNDEFINED", "CIRCULAR_SENTINEL", "MAX_DEPTH_SENTINEL",
    "CompressionAlgorithm", "CompressionConfig", "CompressionResult",
    "DateFormat", "ProjectionSpec", "SanitizationPolicy",
    "SerializationOptions", "SizeCheck", "StreamingConfig",
    "PayloadProjector", "TreeSanitizer",
    "SerializationError", "Serializer", "is_simple",
    "CompressionEngine", "parse_accept_encoding",
    "CompressionStats",
    "OptimizedResponse", "ResponseOptimizer",
    "ResponseCompressed", "CompressionFailed",
    "OversizedResponseDetected", "TransformerFailed",
]
