"""Running compression statistics."""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class CompressionStats:
    """Thread-safe accumulator of compression outcomes.

    ``requests`` counts attempts that passed the enabled/threshold gate;
    the byte counters and ``compressed`` only move on success.
    ``avg_compression_ratio`` is the aggregate ratio over all successes,
    not an average of per-call ratios.
    """
    requests: int = 0
    compressed: int = 0
    bytes_original: int = 0
    bytes_compressed: int = 0
    avg_compression_ratio: float = 0.0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_attempt(self) -> None:
        with self._lock:
            self.requests += 1

    def record_success(self, original_size: int, compressed_size: int) -> None:
        with self._lock:
            self.compressed += 1
            self.bytes_original += original_size
            self.bytes_compressed += compressed_size
            if self.bytes_original:
                self.avg_compression_ratio = (
                    (self.bytes_original - self.bytes_compressed) / self.bytes_original
                )

    def snapshot(self) -> Dict[str, Any]:
        """Counters plus derived ``compressionRate`` (%) and ``avgSavings`` (bytes)."""
        with self._lock:
            saved = self.bytes_original - self.bytes_compressed
            return {
                "requests": self.requests,
                "compressed": self.compressed,
                "bytesOriginal": self.bytes_original,
                "bytesCompressed": self.bytes_compressed,
                "avgCompressionRatio": self.avg_compression_ratio,
                "compressionRate": (
                    self.compressed / self.requests * 100 if self.requests else 0
                ),
                "avgSavings": saved / self.compressed if self.compressed else 0,
            }

    get_stats = snapshot

    def reset(self) -> None:
        with self._lock:
            self.requests = 0
            self.compressed = 0
            self.bytes_original = 0
            self.bytes_compressed = 0
            self.avg_compression_ratio = 0.0
