"""Response Optimization Aggregate Root."""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping

from .value_objects import CompressionConfig, StreamingConfig


@dataclass
class ResponseOptimizationConfig:
    """Aggregate root for response optimization settings.

    Invariants:
    - Maximum response size must be positive
    - Nested depth limits must be non-negative
    - Compression and streaming settings validate themselves
    """
    compression: CompressionConfig = field(default_factory=CompressionConfig)
    streaming: StreamingConfig = field(default_factory=StreamingConfig)
    field_selection: bool = True
    max_response_size: int = 10 * 1024 * 1024
    nested_max_depth: int = 5   # depth guard in the response pipeline
    json_max_depth: int = 8     # depth guard for content-type optimisation

    __test__ = False  # Suppress pytest collection

    def __post_init__(self) -> None:
        if self.max_response_size <= 0:
            raise ValueError("Maximum response size must be positive")
        if self.nested_max_depth < 0 or self.json_max_depth < 0:
            raise ValueError("Depth limits must be non-negative")

    @classmethod
    def create_default(cls) -> ResponseOptimizationConfig:
        return cls()

    @classmethod
    def create_uncompressed(cls) -> ResponseOptimizationConfig:
        """Shaping only: field selection and depth guard, never compress."""
        return cls(compression=CompressionConfig(enabled=False))

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> ResponseOptimizationConfig:
        """Build a config, merging nested ``compression``/``streaming`` maps over defaults.

        Unknown keys are ignored.
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in config.items():
            if key not in known:
                continue
            if key == "compression" and isinstance(value, Mapping):
                value = _merge(CompressionConfig(), value)
            elif key == "streaming" and isinstance(value, Mapping):
                value = _merge(StreamingConfig(), value)
            values[key] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "compression": {
                "enabled": self.compression.enabled,
                "threshold": self.compression.threshold,
                "level": self.compression.level,
                "algorithms": [a.value for a in self.compression.algorithms],
            },
            "streaming": {
                "enabled": self.streaming.enabled,
                "chunk_size": self.streaming.chunk_size,
            },
            "field_selection": self.field_selection,
            "max_response_size": self.max_response_size,
            "nested_max_depth": self.nested_max_depth,
            "json_max_depth": self.json_max_depth,
        }


def _merge(base: Any, overrides: Mapping[str, Any]) -> Any:
    known = {f.name for f in fields(base)}
    return replace(base, **{k: v for k, v in overrides.items() if k in known})
