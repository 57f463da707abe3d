"""Depth-bounded, cycle-safe tree copy."""
from __future__ import annotations

from typing import Any, Mapping, Optional, Set

from .value_objects import (
    CIRCULAR_SENTINEL,
    MAX_DEPTH_SENTINEL,
    SanitizationPolicy,
    is_container,
)


class TreeSanitizer:
    """Copies a payload, replacing cycles and over-deep containers.

    A container is "circular" only if it is an ancestor of itself on the
    current root-to-node path. The same container reached twice through
    siblings is copied twice.
    """

    def __init__(self, policy: Optional[SanitizationPolicy] = None) -> None:
        self.policy = policy or SanitizationPolicy()

    def sanitize(
        self,
        data: Any,
        max_depth: Optional[int] = None,
        current_depth: int = 0,
    ) -> Any:
        limit = self.policy.max_depth if max_depth is None else max_depth
        return self._visit(data, limit, current_depth, set())

    def _visit(self, data: Any, max_depth: int, depth: int, on_path: Set[int]) -> Any:
        if not is_container(data):
            return data
        if depth >= max_depth:
            return MAX_DEPTH_SENTINEL

        marker = id(data)
        if marker in on_path:
            return CIRCULAR_SENTINEL

        on_path.add(marker)
        try:
            if isinstance(data, Mapping):
                return {
                    key: self._visit(value, max_depth, depth + 1, on_path)
                    for key, value in data.items()
                }
            return [self._visit(item, max_depth, depth + 1, on_path) for item in data]
        finally:
            on_path.discard(marker)
