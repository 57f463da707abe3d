"""Dependency Injection Container for payloadopt.

Owns the process-wide pieces of the response optimization context:
- Compression statistics shared by every optimizer it builds
- The loaded ResponseOptimizationConfig
- An optional event publisher handed to each service

Usage:
    from payloadopt.container import get_container

    container = get_container()
    optimizer = container.response_optimizer
    stats = container.compression_stats.snapshot()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from payloadopt.domains.response_optimization import (
        CompressionStats,
        ResponseOptimizationConfig,
        ResponseOptimizer,
    )

logger = logging.getLogger(__name__)

# Singleton container instance
_container: Optional["ServiceContainer"] = None


@dataclass
class ServiceContainer:
    """Simple dependency injection container for optimizer services.

    Attributes:
        config: Settings for optimizers built by this container; loaded
            from the environment on first access when not given
        event_publisher: Callable receiving every domain event
    """

    config: Optional["ResponseOptimizationConfig"] = None
    event_publisher: Optional[Callable[[object], None]] = field(default=None, repr=False)

    _compression_stats: Optional["CompressionStats"] = field(default=None, repr=False)
    _response_optimizer: Optional["ResponseOptimizer"] = field(default=None, repr=False)
    _events: List[object] = field(default_factory=list, repr=False)

    @property
    def optimizer_config(self) -> "ResponseOptimizationConfig":
        """Get the optimizer configuration."""
        if self.config is None:
            from payloadopt.config import load_optimizer_config
            self.config = load_optimizer_config()
        return self.config

    @property
    def compression_stats(self) -> "CompressionStats":
        """Get the shared compression statistics."""
        if self._compression_stats is None:
            from payloadopt.domains.response_optimization import CompressionStats
            self._compression_stats = CompressionStats()
        return self._compression_stats

    @property
    def response_optimizer(self) -> "ResponseOptimizer":
        """Get the shared response optimizer."""
        if self._response_optimizer is None:
            self._response_optimizer = self.create_optimizer()
        return self._response_optimizer

    def create_optimizer(
        self, config: Optional["ResponseOptimizationConfig"] = None,
    ) -> "ResponseOptimizer":
        """Build an optimizer that records into the shared statistics.

        Args:
            config: Settings for this optimizer; the container's when omitted

        Returns:
            A new ResponseOptimizer
        """
        from payloadopt.domains.response_optimization import ResponseOptimizer
        return ResponseOptimizer(
            config=config or self.optimizer_config,
            stats=self.compression_stats,
            event_publisher=self._publish,
        )

    @property
    def recent_events(self) -> List[object]:
        """Events published since the last :meth:`clear_events` (at most 100)."""
        return list(self._events)

    def clear_events(self) -> None:
        self._events.clear()

    def _publish(self, event: object) -> None:
        self._events.append(event)
        del self._events[:-100]
        if self.event_publisher:
            try:
                self.event_publisher(event)
            except Exception as e:
                logger.warning(f"Event publisher failed: {e}")


def get_container() -> ServiceContainer:
    """Get the singleton service container.

    Returns:
        The shared ServiceContainer instance
    """
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """Reset the container (for testing).

    Clears the singleton instance so a fresh container is created
    on next get_container() call.
    """
    global _container
    _container = None
