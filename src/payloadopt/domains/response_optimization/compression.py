"""Threshold-gated, content-negotiated payload compression."""
from __future__ import annotations

import asyncio
import functools
import gzip
import logging
import zlib
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from .events import CompressionFailed, ResponseCompressed
from .serialization import to_json_text
from .stats import CompressionStats
from .value_objects import CompressionAlgorithm, CompressionConfig, CompressionResult

logger = logging.getLogger(__name__)


def parse_accept_encoding(header: Optional[str]) -> Dict[str, float]:
    """Map each advertised coding to its quality value.

    ``"gzip;q=0.5, Deflate"`` -> ``{"gzip": 0.5, "deflate": 1.0}``.
    Malformed quality values count as 1.0.
    """
    offered: Dict[str, float] = {}
    for part in (header or "").split(","):
        name, _, params = part.partition(";")
        name = name.strip().lower()
        if not name:
            continue
        quality = 1.0
        for param in params.split(";"):
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    quality = float(value.strip())
                except ValueError:
                    quality = 1.0
        offered[name] = quality
    return offered


def _encode(algorithm: CompressionAlgorithm, raw: bytes, level: int) -> bytes:
    if algorithm is CompressionAlgorithm.GZIP:
        return gzip.compress(raw, compresslevel=level, mtime=0)
    return zlib.compress(raw, level)


@dataclass(frozen=True)
class _Attempt:
    text: str
    raw: bytes
    algorithm: CompressionAlgorithm
    level: int


class CompressionEngine:
    """Compresses serialized payloads when size and negotiation allow.

    Results below the threshold, with compression disabled, or without a
    mutually supported algorithm come back uncompressed. Codec failures
    are reported on the result, never raised.
    """

    def __init__(
        self,
        config: Optional[CompressionConfig] = None,
        stats: Optional[CompressionStats] = None,
        event_publisher: Optional[Callable[[object], None]] = None,
    ) -> None:
        self.config = config or CompressionConfig()
        self.stats = stats if stats is not None else CompressionStats()
        self._event_publisher = event_publisher

    def negotiate(
        self,
        accept_encoding: Optional[str],
        config: Optional[CompressionConfig] = None,
    ) -> Optional[CompressionAlgorithm]:
        """First allowed algorithm the client accepts; gzip wins over deflate.

        ``config.algorithms`` only restricts the choice, its order is ignored.
        """
        cfg = config or self.config
        offered = parse_accept_encoding(accept_encoding)
        for algorithm in CompressionAlgorithm:
            if cfg.allows(algorithm) and offered.get(algorithm.value, 0.0) > 0:
                return algorithm
        return None

    async def compress(
        self,
        data: Any,
        accept_encoding: Optional[str] = "",
        config: Optional[CompressionConfig] = None,
    ) -> CompressionResult:
        """Compress ``data`` without blocking the event loop.

        ``data`` may be a payload, JSON text, or already encoded UTF-8
        bytes; text and bytes are compressed as they are.
        """
        attempt = self._prepare(data, accept_encoding, config)
        if isinstance(attempt, CompressionResult):
            return attempt

        loop = asyncio.get_running_loop()
        try:
            payload = await loop.run_in_executor(
                None, functools.partial(_encode, attempt.algorithm, attempt.raw, attempt.level)
            )
        except Exception as e:
            return self._failed(attempt, e)
        return self._succeeded(attempt, payload)

    def compress_sync(
        self,
        data: Any,
        accept_encoding: Optional[str] = "",
        config: Optional[CompressionConfig] = None,
    ) -> CompressionResult:
        """Blocking variant of :meth:`compress` for callers without a loop."""
        attempt = self._prepare(data, accept_encoding, config)
        if isinstance(attempt, CompressionResult):
            return attempt
        try:
            payload = _encode(attempt.algorithm, attempt.raw, attempt.level)
        except Exception as e:
            return self._failed(attempt, e)
        return self._succeeded(attempt, payload)

    def _prepare(
        self,
        data: Any,
        accept_encoding: Optional[str],
        config: Optional[CompressionConfig],
    ) -> Union[_Attempt, CompressionResult]:
        cfg = config or self.config
        if isinstance(data, (bytes, bytearray)):
            raw = bytes(data)
            text = raw.decode("utf-8", errors="replace")
        else:
            text = data if isinstance(data, str) else to_json_text(data)
            raw = text.encode("utf-8")
        original_size = len(raw)

        if not cfg.enabled or original_size < cfg.threshold:
            logger.debug(
                f"Skipping compression: enabled={cfg.enabled}, "
                f"size={original_size}, threshold={cfg.threshold}"
            )
            return CompressionResult(compressed=False, data=text, original_size=original_size)

        self.stats.record_attempt()

        algorithm = self.negotiate(accept_encoding, cfg)
        if algorithm is None:
            logger.debug(f"No acceptable encoding in {accept_encoding!r}")
            return CompressionResult(compressed=False, data=text, original_size=original_size)

        return _Attempt(text=text, raw=raw, algorithm=algorithm, level=cfg.level)

    def _succeeded(self, attempt: _Attempt, payload: bytes) -> CompressionResult:
        original_size = len(attempt.raw)
        compressed_size = len(payload)
        ratio = (original_size - compressed_size) / original_size if original_size else 0.0

        self.stats.record_success(original_size, compressed_size)
        self._publish(ResponseCompressed(
            algorithm=attempt.algorithm.value,
            original_size=original_size,
            compressed_size=compressed_size,
            compression_ratio=ratio,
        ))

        return CompressionResult(
            compressed=True,
            data=payload,
            original_size=original_size,
            algorithm=attempt.algorithm,
            compressed_size=compressed_size,
            ratio=ratio,
            savings=original_size - compressed_size,
        )

    def _failed(self, attempt: _Attempt, error: Exception) -> CompressionResult:
        logger.error(f"Compression error ({attempt.algorithm.value}): {error}")
        self._publish(CompressionFailed(
            algorithm=attempt.algorithm.value,
            original_size=len(attempt.raw),
            error=str(error),
        ))
        return CompressionResult(
            compressed=False,
            data=attempt.text,
            original_size=len(attempt.raw),
            error=str(error) or type(error).__name__,
        )

    def _publish(self, event: object) -> None:
        if self._event_publisher:
            try:
                self._event_publisher(event)
            except Exception as e:
                logger.error(f"Failed to publish event: {e}")
