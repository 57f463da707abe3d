"""Domain-Driven Design bounded contexts for payloadopt.

- Response Optimization Context: field projection, depth/cycle guarding,
  JSON serialization, negotiated compression and compression statistics
"""

from payloadopt.domains.response_optimization import (
    # Aggregates
    ResponseOptimizationConfig,
    # Value Objects
    CompressionAlgorithm,
    CompressionConfig,
    CompressionResult,
    ProjectionSpec,
    SanitizationPolicy,
    SerializationOptions,
    SizeCheck,
    StreamingConfig,
    # Domain Events
    CompressionFailed,
    OversizedResponseDetected,
    ResponseCompressed,
    TransformerFailed,
    # Services
    CompressionEngine,
    CompressionStats,
    PayloadProjector,
    ResponseOptimizer,
    Serializer,
    TreeSanitizer,
)

__all__ = [
    "ResponseOptimizationConfig",
    "CompressionAlgorithm",
    "CompressionConfig",
    "CompressionResult",
    "ProjectionSpec",
    "SanitizationPolicy",
    "SerializationOptions",
    "SizeCheck",
    "StreamingConfig",
    "CompressionFailed",
    "OversizedResponseDetected",
    "ResponseCompressed",
    "TransformerFailed",
    "CompressionEngine",
    "CompressionStats",
    "PayloadProjector",
    "ResponseOptimizer",
    "Serializer",
    "TreeSanitizer",
]
