"""JSON serialization strategies for response payloads.

Two paths:

* ``fast_serialize`` builds text directly for shallow payloads. It has no
  cycle or depth guard, so it must only see data known to be flat (see
  ``is_simple``).
* ``serialize`` walks arbitrary data with per-branch cycle and depth
  guards, date/big-int normalization, null/undefined removal and
  per-key transformers. Large sequences can be emitted lazily as chunks.
"""
from __future__ import annotations

import json
import logging
import math
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterator, Mapping, Optional, Set, Union

from .events import TransformerFailed
from .value_objects import (
    SERIALIZED_CIRCULAR,
    SERIALIZED_MAX_DEPTH,
    UNDEFINED,
    SerializationOptions,
    is_big_int,
    is_container,
    iso_format,
)

logger = logging.getLogger(__name__)

_SEPARATORS = (",", ":")


class SerializationError(Exception):
    """Raised when a payload cannot be turned into JSON text."""


def _estimate_default(value: Any) -> Any:
    if value is UNDEFINED:
        return None
    if isinstance(value, date):
        return iso_format(value)
    if is_big_int(value):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json_text(data: Any) -> str:
    """Compact JSON text, tolerant of dates, big ints and UNDEFINED."""
    return json.dumps(data, separators=_SEPARATORS, ensure_ascii=False, default=_estimate_default)


def is_simple(data: Any) -> bool:
    """True when no top-level value is itself a container."""
    if not is_container(data):
        return True
    values = data.values() if isinstance(data, Mapping) else data
    return not any(is_container(value) for value in values)


def _number_text(value: Union[int, float]) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        mantissa, _, exponent = repr(value).partition("e")
        if not exponent:
            return mantissa
        power = int(exponent)
        # Positional between 1e-7 and 1e21, otherwise e+NN / e-N without padding.
        if -7 < power < 21:
            return format(Decimal(repr(value)), "f")
        return f"{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"
    return str(value)


class Serializer:
    """Fast and guarded JSON serialization."""

    def __init__(
        self,
        event_publisher: Optional[Callable[[object], None]] = None,
    ) -> None:
        self._event_publisher = event_publisher

    # ── Fast path ─────────────────────────────────────────────────────

    def fast_serialize(self, value: Any) -> str:
        """Serialize shallow data without any guard bookkeeping.

        Strings only have double quotes escaped, and UNDEFINED is written
        as a bare ``undefined`` token. Neither is strict JSON; keep this
        output internal.
        """
        if value is None:
            return "null"
        if value is UNDEFINED:
            return "undefined"
        if isinstance(value, str):
            return '"' + value.replace('"', '\\"') + '"'
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return _number_text(value)
        if isinstance(value, date):
            return '"' + iso_format(value) + '"'
        if isinstance(value, (list, tuple)):
            return "[" + ",".join(self.fast_serialize(item) for item in value) + "]"
        if isinstance(value, Mapping):
            pairs = [
                '"' + str(key) + '":' + self.fast_serialize(item)
                for key, item in value.items()
                if item is not UNDEFINED
            ]
            return "{" + ",".join(pairs) + "}"
        return to_json_text(value)

    # ── Guarded path ──────────────────────────────────────────────────

    def estimate_size(self, data: Any) -> int:
        """UTF-8 byte length of ``data`` as compact JSON; 0 if it can't be encoded."""
        try:
            return len(to_json_text(data).encode("utf-8"))
        except (TypeError, ValueError, RecursionError) as e:
            logger.error(f"Error estimating response size: {e}")
            return 0

    def serialize(
        self,
        value: Any,
        options: Optional[SerializationOptions] = None,
    ) -> Union[str, Iterator[str]]:
        """Serialize ``value`` to JSON text, or to a chunk iterator.

        Chunks are produced only when ``enable_streaming`` is set and the
        estimated size exceeds ``memory_limit``.

        Raises:
            SerializationError: If the walked tree still holds something
                JSON cannot represent.
        """
        opts = options or SerializationOptions()
        if opts.enable_streaming and self.estimate_size(value) > opts.memory_limit:
            return self.stream_serialize(value, opts)
        return self._serialize_text(value, opts)

    def safe_serialize(self, value: Any) -> str:
        """Guarded serialization that cannot fail.

        Values JSON has no form for (UUIDs, sets, arbitrary objects) are
        written as their ``str()``.
        """
        tree = self._walk(value, None, 0, set(), SerializationOptions())
        return json.dumps(tree, separators=_SEPARATORS, ensure_ascii=False, default=str)

    def stream_serialize(
        self,
        value: Any,
        options: Optional[SerializationOptions] = None,
    ) -> Iterator[str]:
        """Lazily yield JSON fragments for a large sequence.

        The concatenated output is ``{"data":[...],"meta":{"total":N,"streamed":true}}``.
        Anything other than a sequence is yielded as a single fragment.
        """
        opts = (options or SerializationOptions()).without_streaming()
        if not isinstance(value, (list, tuple)):
            yield self._serialize_text(value, opts)
            return

        yield '{"data":['
        for start in range(0, len(value), opts.chunk_size):
            batch = value[start:start + opts.chunk_size]
            if start > 0:
                yield ","
            yield ",".join(self._serialize_text(item, opts) for item in batch)
        yield '],"meta":{"total":' + str(len(value)) + ',"streamed":true}}'

    def _serialize_text(self, value: Any, options: SerializationOptions) -> str:
        tree = self._walk(value, None, 0, set(), options)
        try:
            return json.dumps(tree, separators=_SEPARATORS, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Payload is not JSON serializable: {e}") from e

    def _walk(
        self,
        value: Any,
        key: Optional[str],
        depth: int,
        on_path: Set[int],
        options: SerializationOptions,
    ) -> Any:
        if key is not None and key in options.custom_transformers:
            value = self._apply_transformer(key, value, options)

        if isinstance(value, date):
            return options.date_format.render(value)
        if is_big_int(value):
            return str(value)
        if value is UNDEFINED:
            return None
        if isinstance(value, float) and not math.isfinite(value):
            return None
        if not is_container(value):
            return value

        marker = id(value)
        if marker in on_path:
            return SERIALIZED_CIRCULAR
        if depth >= options.max_depth:
            return SERIALIZED_MAX_DEPTH

        on_path.add(marker)
        try:
            if isinstance(value, Mapping):
                result = {}
                for child_key, child in value.items():
                    if child is UNDEFINED and options.remove_undefined:
                        continue
                    if child is None and options.remove_nulls:
                        continue
                    name = child_key if isinstance(child_key, str) else str(child_key)
                    result[name] = self._walk(child, name, depth + 1, on_path, options)
                return result
            return [self._walk(item, None, depth + 1, on_path, options) for item in value]
        finally:
            on_path.discard(marker)

    def _apply_transformer(self, key: str, value: Any, options: SerializationOptions) -> Any:
        try:
            return options.custom_transformers[key](value)
        except Exception as e:
            logger.warning(f'Custom transformer error for key "{key}": {e}')
            self._publish(TransformerFailed(key=key, error=str(e)))
            return value

    def _publish(self, event: object) -> None:
        if self._event_publisher:
            try:
                self._event_publisher(event)
            except Exception as e:
                logger.error(f"Failed to publish event: {e}")
