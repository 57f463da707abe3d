"""Response Optimization Domain Service."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Union

from .aggregates import ResponseOptimizationConfig
from .compression import CompressionEngine
from .events import OversizedResponseDetected
from .projection import PayloadProjector
from .sanitizer import TreeSanitizer
from .serialization import Serializer, is_simple
from .stats import CompressionStats
from .value_objects import (
    CompressionResult,
    ProjectionSpec,
    SanitizationPolicy,
    SerializationOptions,
    SizeCheck,
)

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


@dataclass
class OptimizedResponse:
    """What a transport layer needs to send an optimized payload."""
    body: Union[bytes, str]
    compressed: bool
    size_check: SizeCheck
    compression: Optional[CompressionResult] = None
    headers: Dict[str, str] = field(default_factory=dict)


class ResponseOptimizer:
    """Orchestrates payload shaping and compression for API responses.

    Pipeline (``optimize_response``):
    1. Check the raw payload size and flag oversized responses
    2. Apply field selection (if requested and enabled)
    3. Guard depth and cycles
    4. Serialize and compress (if large enough and negotiated)

    Every stage is also exposed on its own.
    """

    def __init__(
        self,
        config: Optional[ResponseOptimizationConfig] = None,
        stats: Optional[CompressionStats] = None,
        event_publisher: Optional[Callable[[object], None]] = None,
    ) -> None:
        self.config = config or ResponseOptimizationConfig.create_default()
        self.stats = stats if stats is not None else CompressionStats()
        self._event_publisher = event_publisher
        self.projector = PayloadProjector()
        self.sanitizer = TreeSanitizer(SanitizationPolicy(self.config.nested_max_depth))
        self.serializer = Serializer(event_publisher=event_publisher)
        self.compressor = CompressionEngine(
            config=self.config.compression,
            stats=self.stats,
            event_publisher=event_publisher,
        )

    # ── Shaping ───────────────────────────────────────────────────────

    def select_fields(self, data: Any, fields: Optional[Iterable[str]]) -> Any:
        return self.projector.project(data, fields)

    def optimize_nested_objects(self, data: Any, max_depth: Optional[int] = None) -> Any:
        return self.sanitizer.sanitize(data, max_depth)

    def remove_empty_values(self, data: Any) -> Any:
        return self.projector.remove_empty_values(data)

    def is_simple_object(self, data: Any) -> bool:
        return is_simple(data)

    # ── Size ──────────────────────────────────────────────────────────

    def estimate_response_size(self, data: Any) -> int:
        return self.serializer.estimate_size(data)

    def check_response_size(self, data: Any) -> SizeCheck:
        """Flag payloads larger than ``max_response_size``; never blocks them."""
        size = self.estimate_response_size(data)
        max_size = self.config.max_response_size
        if size > max_size:
            logger.warning(f"Large response detected: {size / 1024 / 1024:.2f}MB")
            self._publish(OversizedResponseDetected(size=size, max_size=max_size))
            return SizeCheck(
                oversized=True,
                size=size,
                max_size=max_size,
                recommendation=SizeCheck.RECOMMENDATION,
            )
        return SizeCheck(oversized=False, size=size)

    # ── Serialization ─────────────────────────────────────────────────

    def fast_json_serialize(self, data: Any) -> str:
        return self.serializer.fast_serialize(data)

    def optimize_json_serialization(
        self,
        data: Any,
        options: Optional[SerializationOptions] = None,
        **overrides: Any,
    ) -> Union[str, Iterator[str]]:
        """Guarded serialization; keyword overrides build the options."""
        if options is None:
            options = SerializationOptions(**overrides)
        return self.serializer.serialize(data, options)

    def stream_json_serialization(
        self,
        data: Any,
        options: Optional[SerializationOptions] = None,
    ) -> Iterator[str]:
        return self.serializer.stream_serialize(data, options)

    def stream_large_response(
        self,
        data: Any,
        chunk_size: Optional[int] = None,
    ) -> Iterator[Any]:
        """Yield a sequence as pages with chunk metadata.

        With streaming disabled, or for non-sequences, ``data`` is yielded once.
        """
        if not self.config.streaming.enabled or not isinstance(data, (list, tuple)):
            yield data
            return

        size = chunk_size or self.config.streaming.chunk_size
        total_chunks = -(-len(data) // size)
        for start in range(0, len(data), size):
            yield {
                "data": list(data[start:start + size]),
                "meta": {
                    "chunk": start // size + 1,
                    "totalChunks": total_chunks,
                    "hasMore": start + size < len(data),
                },
            }

    def optimize_json_response(self, data: Any) -> Union[str, Iterator[str]]:
        """Guard depth and cycles, prune empties, then pick the fast or guarded serializer."""
        guarded = self.sanitizer.sanitize(data, self.config.json_max_depth)
        optimized = self.remove_empty_values(guarded)
        if is_simple(optimized):
            return self.serializer.fast_serialize(optimized)
        return self.serializer.serialize(optimized)

    def optimize_by_content_type(self, data: Any, content_type: str = JSON_CONTENT_TYPE) -> Any:
        """Only JSON has a dedicated optimisation; other types pass through."""
        media_type = (content_type or "").split(";", 1)[0].strip().lower()
        if media_type == JSON_CONTENT_TYPE:
            return self.optimize_json_response(data)
        return data

    # ── Compression ───────────────────────────────────────────────────

    async def compress_response(self, data: Any, accept_encoding: str = "") -> CompressionResult:
        return await self.compressor.compress(data, accept_encoding)

    async def optimize_response(
        self,
        data: Any,
        fields: Union[str, Iterable[str], None] = None,
        accept_encoding: str = "",
    ) -> OptimizedResponse:
        """Run the whole pipeline for one response.

        ``fields`` may be the raw comma-separated query value or a list of
        paths. Unexpected failures fall back to the unshaped payload as
        plain JSON text.
        """
        size_check = self.check_response_size(data)
        headers: Dict[str, str] = {}
        if size_check.oversized:
            headers["X-Response-Size-Warning"] = "true"
            headers["X-Response-Size"] = str(size_check.size)

        try:
            shaped = data
            if fields and self.config.field_selection:
                paths = ProjectionSpec.from_query(fields) if isinstance(fields, str) else fields
                shaped = self.select_fields(data, paths)
            shaped = self.sanitizer.sanitize(shaped, self.config.nested_max_depth)
            result = await self.compress_response(shaped, accept_encoding)
        except Exception as e:
            logger.error(f"Response optimization error: {e}")
            headers["Content-Type"] = JSON_CONTENT_TYPE
            return OptimizedResponse(
                body=self.serializer.safe_serialize(data),
                compressed=False,
                size_check=size_check,
                headers=headers,
            )

        headers.update(result.headers())
        headers["Content-Type"] = JSON_CONTENT_TYPE
        return OptimizedResponse(
            body=result.data,
            compressed=result.compressed,
            size_check=size_check,
            compression=result,
            headers=headers,
        )

    # ── Introspection ─────────────────────────────────────────────────

    def create_utils(self) -> Dict[str, Callable[..., Any]]:
        return {
            "select_fields": self.select_fields,
            "optimize_nested": self.optimize_nested_objects,
            "check_size": self.check_response_size,
            "compress": self.compress_response,
            "stream": self.stream_large_response,
        }

    def get_compression_stats(self) -> Dict[str, Any]:
        return self.stats.snapshot()

    def reset_stats(self) -> None:
        self.stats.reset()

    def _publish(self, event: object) -> None:
        if self._event_publisher:
            try:
                self._event_publisher(event)
            except Exception as e:
                logger.error(f"Failed to publish event: {e}")
