"""Environment-driven configuration for the payload optimizer."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from dotenv import load_dotenv

from payloadopt.domains.response_optimization import (
    CompressionConfig,
    ResponseOptimizationConfig,
    StreamingConfig,
)

_ENV_LOADED = False
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from e


def _parse_list(name: str, raw: str) -> Tuple[str, ...]:
    items = tuple(part.strip().lower() for part in raw.split(",") if part.strip())
    if not items:
        raise ValueError(f"{name} must list at least one algorithm")
    return items


def _env(name: str, parser: Callable[[str, str], Any]) -> Optional[Any]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return parser(name, raw)


def load_optimizer_config(
    *,
    compression_enabled: Optional[bool] = None,
    compression_threshold: Optional[int] = None,
    compression_level: Optional[int] = None,
    compression_algorithms: Optional[Tuple[str, ...]] = None,
    field_selection: Optional[bool] = None,
    max_response_size: Optional[int] = None,
    streaming_enabled: Optional[bool] = None,
    streaming_chunk_size: Optional[int] = None,
) -> ResponseOptimizationConfig:
    """Load optimizer settings from ``PAYLOADOPT_*`` variables and overrides.

    Explicit keyword overrides win over the environment, which wins over
    the built-in defaults.

    Raises:
        ValueError: If an environment variable is malformed or the
            resulting configuration violates an invariant.
    """

    _ensure_env_loaded()

    compression: Dict[str, Any] = {}
    _put(compression, "enabled", compression_enabled,
         _env("PAYLOADOPT_COMPRESSION_ENABLED", _parse_bool))
    _put(compression, "threshold", compression_threshold,
         _env("PAYLOADOPT_COMPRESSION_THRESHOLD", _parse_int))
    _put(compression, "level", compression_level,
         _env("PAYLOADOPT_COMPRESSION_LEVEL", _parse_int))
    _put(compression, "algorithms", compression_algorithms,
         _env("PAYLOADOPT_COMPRESSION_ALGORITHMS", _parse_list))

    streaming: Dict[str, Any] = {}
    _put(streaming, "enabled", streaming_enabled,
         _env("PAYLOADOPT_STREAMING_ENABLED", _parse_bool))
    _put(streaming, "chunk_size", streaming_chunk_size,
         _env("PAYLOADOPT_STREAMING_CHUNK_SIZE", _parse_int))

    top: Dict[str, Any] = {
        "compression": CompressionConfig(**compression),
        "streaming": StreamingConfig(**streaming),
    }
    _put(top, "field_selection", field_selection,
         _env("PAYLOADOPT_FIELD_SELECTION", _parse_bool))
    _put(top, "max_response_size", max_response_size,
         _env("PAYLOADOPT_MAX_RESPONSE_SIZE", _parse_int))

    return ResponseOptimizationConfig(**top)


def _put(target: Dict[str, Any], key: str, override: Any, from_env: Any) -> None:
    value = override if override is not None else from_env
    if value is not None:
        target[key] = value


def _ensure_env_loaded() -> None:
    global _ENV_LOADED
    if _ENV_LOADED:
        return
    _ENV_LOADED = True
    dotenv_path = Path.cwd() / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path)
    else:
        load_dotenv()
