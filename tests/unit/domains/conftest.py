"""Pytest fixtures for domain tests.

These fixtures support testing the response optimization bounded context:
- Projection and sanitization payloads (nested, cyclic, shared siblings)
- Serializer and compression inputs (large, repetitive, tiny)
- Optimizer and statistics instances
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from payloadopt.domains.response_optimization import (
    CompressionStats,
    ResponseOptimizationConfig,
    ResponseOptimizer,
)


# =============================================================================
# Payload Fixtures
# =============================================================================


@pytest.fixture
def nested_payload() -> Dict[str, Any]:
    """A user record with nested profile and settings maps."""
    return {
        "id": 42,
        "name": "Ada",
        "email": "ada@example.com",
        "profile": {
            "title": "Engineer",
            "address": {"city": "London", "zip": "N1"},
        },
        "settings": {"theme": "dark", "notifications": None},
        "tags": ["admin", "beta"],
    }


@pytest.fixture
def cyclic_payload() -> Dict[str, Any]:
    """A map that contains itself."""
    node: Dict[str, Any] = {"name": "root", "children": []}
    node["self"] = node
    node["children"].append({"parent": node})
    return node


@pytest.fixture
def shared_sibling_payload() -> Dict[str, Any]:
    """The same child map referenced twice as siblings (no cycle)."""
    shared = {"value": 1, "inner": {"deep": True}}
    return {"x": shared, "y": shared}


@pytest.fixture
def large_payload() -> List[Dict[str, Any]]:
    """Well above the default 1 KiB compression threshold."""
    return [
        {
            "id": i,
            "name": f"item-{i}",
            "description": "A repetitive description that compresses well.",
            "created": datetime(2024, 1, 1, tzinfo=timezone.utc).isoformat(),
        }
        for i in range(200)
    ]


@pytest.fixture
def tiny_payload() -> Dict[str, Any]:
    return {"ok": True, "count": 3}


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def stats() -> CompressionStats:
    return CompressionStats()


@pytest.fixture
def published_events() -> List[object]:
    return []


@pytest.fixture
def optimizer(stats, published_events) -> ResponseOptimizer:
    return ResponseOptimizer(
        config=ResponseOptimizationConfig.create_default(),
        stats=stats,
        event_publisher=published_events.append,
    )
