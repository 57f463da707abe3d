"""Response Optimization Domain Events."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ResponseCompressed:
    """Emitted after every successful compression."""
    algorithm: str
    original_size: int
    compressed_size: int
    compression_ratio: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": "ResponseCompressed",
            "algorithm": self.algorithm,
            "original_size": self.original_size,
            "compressed_size": self.compressed_size,
            "compression_ratio": round(self.compression_ratio, 4),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class CompressionFailed:
    """Emitted when the codec raised and the payload went out uncompressed."""
    algorithm: Optional[str]
    original_size: int
    error: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": "CompressionFailed",
            "algorithm": self.algorithm,
            "original_size": self.original_size,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class OversizedResponseDetected:
    """Emitted when a payload's encoded size exceeds the configured maximum."""
    size: int
    max_size: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": "OversizedResponseDetected",
            "size": self.size,
            "max_size": self.max_size,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class TransformerFailed:
    """Emitted when a custom per-key transformer raised during serialization."""
    key: str
    error: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": "TransformerFailed",
            "key": self.key,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }
