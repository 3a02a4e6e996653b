"""
Service Container - Dependency Injection Container

Holds the progress store and event dispatcher and lazily builds the
services on top of them.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from momentum import config
from momentum.db.store import InMemoryProgressStore, ProgressStore
from momentum.gamification.events import EventDispatcher

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    Infrastructure dependencies (store, dispatcher) are injected.
    """

    # Infrastructure dependencies (injected)
    store: ProgressStore
    dispatcher: EventDispatcher = field(default_factory=EventDispatcher)

    # Services (lazy-loaded via properties)
    _gamification_service: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def gamification_service(self):
        """Get GamificationService instance (lazy-loaded)"""
        if self._gamification_service is None:
            from momentum.services.gamification_service import GamificationService
            self._gamification_service = GamificationService(self.store, self.dispatcher)
            logger.debug("GamificationService instantiated")
        return self._gamification_service


# Global container instance (initialized by the API lifespan)
_container: Optional[ServiceContainer] = None


def build_store(backend: str = None) -> ProgressStore:
    """Create the progress store selected by STORE_BACKEND"""
    backend = backend or config.STORE_BACKEND
    if backend == "postgres":
        from momentum.db.connection import db
        from momentum.db.postgres_store import PostgresProgressStore
        return PostgresProgressStore(db)
    return InMemoryProgressStore()


def get_container() -> ServiceContainer:
    """
    Get the global service container.

    Raises:
        RuntimeError: If container not initialized (call init_container first)
    """
    if _container is None:
        raise RuntimeError(
            "Service container not initialized. "
            "Call init_container() before using services."
        )
    return _container


def init_container(
    store: ProgressStore,
    dispatcher: Optional[EventDispatcher] = None
) -> ServiceContainer:
    """
    Initialize the global service container.

    Args:
        store: Progress store
        dispatcher: Optional event dispatcher (a fresh one by default)

    Returns:
        ServiceContainer: The initialized container
    """
    global _container

    _container = ServiceContainer(store=store, dispatcher=dispatcher or EventDispatcher())

    logger.info(f"Service container initialized with {type(store).__name__}")
    return _container
