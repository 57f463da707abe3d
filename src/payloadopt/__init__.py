"""Payload Optimizer - shaping and compression for API response payloads."""

from payloadopt.domains.response_optimization import (  # noqa: F401
    CompressionStats,
    ResponseOptimizationConfig,
    ResponseOptimizer,
)

__all__ = ["CompressionStats", "ResponseOptimizationConfig", "ResponseOptimizer"]

__version__ = "0.1.0"
