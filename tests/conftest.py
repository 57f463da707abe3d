"""Pytest configuration for the payloadopt test suite."""

from __future__ import annotations

import pytest

from payloadopt.container import reset_container


@pytest.fixture(autouse=True)
def _fresh_container():
    """Give every test its own service container and statistics."""
    reset_container()
    yield
    reset_container()
