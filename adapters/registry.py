"""Strategy registry for ordered session detection.

This module provides a registry of detection strategies. Strategies are
kept sorted by priority so the detector can walk them in order and stop
at the first candidate.

Example:
    >>> from adapters.registry import StrategyRegistry
    >>> registry = StrategyRegistry()
    >>> registry.register(PresenceStrategy())
    >>> registry.register(ProcessScanStrategy())
    >>> [s.name for s in registry.get_all()]
    ['presence', 'process_scan']
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from adapters.base import BaseDetectionStrategy

# Configure logging
logger = logging.getLogger(__name__)


class StrategyRegistry:
    """Registry of detection strategies.

    Attributes:
        _strategies: Dictionary mapping strategy name to instance.
        _order: Registration sequence number per name, used to break
            priority ties.
    """

    def __init__(self) -> None:
        """Initialize an empty strategy registry."""
        self._strategies: Dict[str, BaseDetectionStrategy] = {}
        self._order: Dict[str, int] = {}
        self._sequence = 0

    def register(self, strategy: BaseDetectionStrategy) -> None:
        """Register a strategy instance.

        A strategy with the same name replaces the existing one.

        Args:
            strategy: The strategy instance to register.

        Raises:
            ValueError: If the strategy has no name.
        """
        if not strategy.name:
            raise ValueError(f"Strategy {type(strategy).__name__} has no name")

        if strategy.name in self._strategies:
            logger.warning(
                f"Strategy '{strategy.name}' already registered, replacing",
                extra={"component": "registry"},
            )

        self._strategies[strategy.name] = strategy
        self._order[strategy.name] = self._sequence
        self._sequence += 1

        logger.info(
            f"Registered strategy: {strategy.name} (priority {strategy.priority})",
            extra={"component": "registry"},
        )

    def unregister(self, name: str) -> bool:
        """Unregister a strategy by name.

        Args:
            name: The strategy name to unregister.

        Returns:
            True if the strategy was unregistered, False if not found.
        """
        if name in self._strategies:
            del self._strategies[name]
            del self._order[name]
            logger.info(
                f"Unregistered strategy: {name}",
                extra={"component": "registry"},
            )
            return True
        return False

    def get(self, name: str) -> Optional[BaseDetectionStrategy]:
        """Get a strategy by name, or None if not registered."""
        return self._strategies.get(name)

    def get_all(self) -> List[BaseDetectionStrategy]:
        """Get all strategies in evaluation order.

        Returns:
            Strategies sorted by priority, then registration order.
        """
        return sorted(
            self._strategies.values(),
            key=lambda s: (s.priority, self._order[s.name]),
        )

    def list_names(self) -> List[str]:
        return [strategy.name for strategy in self.get_all()]

    def count(self) -> int:
        return len(self._strategies)
