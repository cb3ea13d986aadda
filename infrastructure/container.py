"""
Dependency Injection Container
================================

Simple service locator pattern for the marketplace domain services.
Views ask the container for a service instead of building one, so every request
shares the same wiring (one event bus, one inventory ledger).

Usage:
    from infrastructure.container import container

    order_service = container.order_service()
    result = order_service.checkout(request.user)
"""

import logging
from typing import Optional

from .events import EventBus, get_event_bus

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Service container for domain services.

    Implements lazy initialization and caching of service instances.
    Singleton pattern.
    """

    _instance: Optional["ServiceContainer"] = None
    _initialized: bool = False

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize container (only once)."""
        if not self._initialized:
            self._clear()
            self._initialized = True
            logger.info("Service container initialized")

    def _clear(self):
        self._event_bus: Optional[EventBus] = None
        self._inventory_service = None
        self._snapshot_service = None
        self._cart_service = None
        self._order_service = None
        self._boutique_service = None
        self._statistics_service = None
        self._grade_service = None

    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            self._event_bus = get_event_bus()
        return self._event_bus

    def inventory_service(self):
        """Get InventoryService instance."""
        if self._inventory_service is None:
            from marketplace.cart.domain.services import InventoryService

            self._inventory_service = InventoryService(event_bus=self.event_bus())
            logger.debug("Created InventoryService")
        return self._inventory_service

    def snapshot_service(self):
        """Get CartSnapshotService instance."""
        if self._snapshot_service is None:
            from marketplace.cart.domain.services import CartSnapshotService

            self._snapshot_service = CartSnapshotService()
            logger.debug("Created CartSnapshotService")
        return self._snapshot_service

    def cart_service(self):
        """Get CartService instance."""
        if self._cart_service is None:
            from marketplace.cart.domain.services import CartService

            self._cart_service = CartService(snapshot_service=self.snapshot_service())
            logger.debug("Created CartService")
        return self._cart_service

    def order_service(self):
        """Get OrderService instance."""
        if self._order_service is None:
            from marketplace.ordering.domain.services import OrderService

            self._order_service = OrderService(
                inventory_service=self.inventory_service(),
                snapshot_service=self.snapshot_service(),
                cart_service=self.cart_service(),
                event_bus=self.event_bus(),
            )
            logger.debug("Created OrderService")
        return self._order_service

    def boutique_service(self):
        """Get BoutiqueService instance."""
        if self._boutique_service is None:
            from marketplace.boutique.domain.services import BoutiqueService

            self._boutique_service = BoutiqueService()
            logger.debug("Created BoutiqueService")
        return self._boutique_service

    def statistics_service(self):
        """Get StatisticsService instance."""
        if self._statistics_service is None:
            from marketplace.analytics.domain.services import StatisticsService

            self._statistics_service = StatisticsService()
            logger.debug("Created StatisticsService")
        return self._statistics_service

    def grade_service(self):
        """Get GradeService instance."""
        if self._grade_service is None:
            from marketplace.boutique.domain.services import GradeService

            self._grade_service = GradeService(statistics_service=self.statistics_service())
            logger.debug("Created GradeService")
        return self._grade_service


# Global singleton instance
container = ServiceContainer()
