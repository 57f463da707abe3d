"""Response Optimization Value Objects."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Mapping, Optional, Tuple, Union


CIRCULAR_SENTINEL = "[Circular reference]"
MAX_DEPTH_SENTINEL = "[Max depth reached]"

# The guarded serializer uses its own, shorter markers.
SERIALIZED_CIRCULAR = "[Circular]"
SERIALIZED_MAX_DEPTH = "[Max depth exceeded]"

# Largest integer a JSON consumer can round-trip through a double.
MAX_SAFE_INTEGER = 2**53 - 1

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class _Undefined:
    """Marker for a value that is absent rather than null."""

    _instance: ClassVar[Optional["_Undefined"]] = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Undefined":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "_Undefined":
        return self


UNDEFINED = _Undefined()


def is_container(value: Any) -> bool:
    """Maps and sequences are containers; strings and bytes are not."""
    return isinstance(value, (Mapping, list, tuple))


def is_big_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        return True
    return isinstance(value, int) and abs(value) > MAX_SAFE_INTEGER


class DateFormat(Enum):
    """How the guarded serializer renders dates."""
    ISO = "iso"              # 2024-01-31T12:00:00.000Z
    TIMESTAMP = "timestamp"  # milliseconds since the epoch
    UNIX = "unix"            # whole seconds since the epoch

    def render(self, value: Union[date, datetime]) -> Union[str, int]:
        if self is DateFormat.TIMESTAMP:
            return epoch_millis(value)
        if self is DateFormat.UNIX:
            return epoch_millis(value) // 1000
        return iso_format(value)


def _as_utc(value: Union[date, datetime]) -> datetime:
    if not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso_format(value: Union[date, datetime]) -> str:
    """Render a date as UTC ISO-8601 with millisecond precision."""
    moment = _as_utc(value)
    return moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{moment.microsecond // 1000:03d}Z"


def epoch_millis(value: Union[date, datetime]) -> int:
    return (_as_utc(value) - _EPOCH) // timedelta(milliseconds=1)


class CompressionAlgorithm(Enum):
    """Supported content encodings, declared in preference order."""
    GZIP = "gzip"
    DEFLATE = "deflate"

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)


@dataclass(frozen=True)
class ProjectionSpec:
    """Ordered field paths to keep, e.g. ``("id", "user.name")``."""
    fields: Tuple[str, ...] = ()

    @classmethod
    def from_query(cls, raw: Optional[str]) -> ProjectionSpec:
        """Parse a ``fields=a, b.c`` style query value."""
        if not raw:
            return cls()
        return cls(fields=tuple(part.strip() for part in raw.split(",") if part.strip()))

    def __bool__(self) -> bool:
        return bool(self.fields)

    def __iter__(self):
        return iter(self.fields)


@dataclass(frozen=True)
class SanitizationPolicy:
    """Depth limit for the tree sanitizer.

    A negative ``max_depth`` is accepted and simply sentinel-izes every
    container immediately.
    """
    max_depth: int = 5


Transformer = Callable[[Any], Any]


@dataclass(frozen=True)
class SerializationOptions:
    """Options for the guarded serializer.

    Invariants:
    - Every custom transformer is callable
    - Streaming only kicks in when the estimate exceeds ``memory_limit``
    """
    max_depth: int = 10
    date_format: DateFormat = DateFormat.ISO
    remove_nulls: bool = False
    remove_undefined: bool = True
    custom_transformers: Mapping[str, Transformer] = field(default_factory=dict)
    enable_streaming: bool = False
    memory_limit: int = 50 * 1024 * 1024
    chunk_size: int = 1000

    def __post_init__(self) -> None:
        if isinstance(self.date_format, str):
            object.__setattr__(self, "date_format", DateFormat(self.date_format))
        for key, transformer in self.custom_transformers.items():
            if not callable(transformer):
                raise TypeError(f"Custom transformer for key '{key}' is not callable")
        if self.chunk_size <= 0:
            raise ValueError("Chunk size must be positive")

    def without_streaming(self) -> SerializationOptions:
        return SerializationOptions(
            max_depth=self.max_depth,
            date_format=self.date_format,
            remove_nulls=self.remove_nulls,
            remove_undefined=self.remove_undefined,
            custom_transformers=self.custom_transformers,
            enable_streaming=False,
            memory_limit=self.memory_limit,
            chunk_size=self.chunk_size,
        )


@dataclass(frozen=True)
class SizeCheck:
    """Outcome of comparing a payload's encoded size with the maximum."""
    oversized: bool
    size: int
    max_size: Optional[int] = None
    recommendation: Optional[str] = None

    RECOMMENDATION: ClassVar[str] = "Consider implementing pagination or field selection"

    @property
    def size_mb(self) -> float:
        return self.size / 1024 / 1024

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"oversized": self.oversized, "size": self.size}
        if self.oversized:
            result["maxSize"] = self.max_size
            result["recommendation"] = self.recommendation
        return result


@dataclass(frozen=True)
class CompressionResult:
    """Outcome of one compression attempt.

    ``data`` holds the compressed bytes on success and the JSON text
    otherwise. ``ratio`` is ``(original - compressed) / original``.
    """
    compressed: bool
    data: Union[bytes, str]
    original_size: int
    algorithm: Optional[CompressionAlgorithm] = None
    compressed_size: Optional[int] = None
    ratio: Optional[float] = None
    savings: Optional[int] = None
    error: Optional[str] = None

    def headers(self) -> Dict[str, str]:
        """Response headers describing a successful compression."""
        if not self.compressed or self.algorithm is None:
            return {}
        return {
            "Content-Encoding": self.algorithm.value,
            "X-Original-Size": str(self.original_size),
            "X-Compressed-Size": str(self.compressed_size),
            "X-Compression-Ratio": f"{(self.ratio or 0.0) * 100:.1f}%",
        }

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "compressed": self.compressed,
            "originalSize": self.original_size,
        }
        if self.compressed:
            result.update({
                "algorithm": self.algorithm.value if self.algorithm else None,
                "compressedSize": self.compressed_size,
                "compressionRatio": self.ratio,
                "savings": self.savings,
            })
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class CompressionConfig:
    """Compression gate and codec settings."""
    enabled: bool = True
    threshold: int = 1024
    level: int = 6
    algorithms: Tuple[CompressionAlgorithm, ...] = (
        CompressionAlgorithm.GZIP,
        CompressionAlgorithm.DEFLATE,
    )

    def __post_init__(self) -> None:
        try:
            algorithms = tuple(CompressionAlgorithm(a) for a in self.algorithms)
        except ValueError as e:
            raise ValueError(
                f"Unknown compression algorithm in {list(self.algorithms)}; "
                f"expected any of {list(CompressionAlgorithm.names())}"
            ) from e
        object.__setattr__(self, "algorithms", algorithms)
        if self.threshold < 0:
            raise ValueError("Compression threshold must be non-negative")
        if not -1 <= self.level <= 9:
            raise ValueError(f"Compression level must be between -1 and 9, got {self.level}")

    def allows(self, algorithm: CompressionAlgorithm) -> bool:
        return algorithm in self.algorithms


@dataclass(frozen=True)
class StreamingConfig:
    """Paged streaming of large sequences."""
    enabled: bool = True
    chunk_size: int = 1000

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError("Streaming chunk size must be positive")
