#!/usr/bin/env python3
"""
Dependency Injection Container

Provides a centralized way to manage the services commands depend on, so
tests can swap in fakes without touching module state.
"""

import logging
from typing import Any, Dict, Callable, TypeVar, Optional
from functools import wraps
import threading

logger = logging.getLogger(__name__)

T = TypeVar('T')

class Container:
    """Simple dependency injection container with lifecycle management."""

    def __init__(self):
        """Initialize empty container."""
        self._factories: Dict[str, Callable] = {}
        self._singletons: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def register_singleton(self, service_name: str, factory: Callable[[], T]) -> None:
        """
        Register a service as singleton (created once, reused).
        The factory must be decorated with @singleton.

        Args:
            service_name: Unique name for the service
            factory: Function that creates the service instance
        """
        with self._lock:
            self._factories[service_name] = factory
            # Remove any existing instance to force recreation
            self._singletons.pop(service_name, None)

    def register_factory(self, service_name: str, factory: Callable[[], T]) -> None:
        """
        Register a service as factory (new instance each time).

        Args:
            service_name: Unique name for the service
            factory: Function that creates service instances
        """
        with self._lock:
            self._factories[service_name] = factory

    def register_instance(self, service_name: str, instance: T) -> None:
        """
        Register an existing instance as singleton.

        Args:
            service_name: Unique name for the service
            instance: Pre-created service instance
        """
        with self._lock:
            self._singletons[service_name] = instance

    def get(self, service_name: str) -> Any:
        """
        Get service instance by name.

        Raises:
            KeyError: If service is not registered
        """
        if service_name in self._singletons:
            return self._singletons[service_name]

        if service_name not in self._factories:
            raise KeyError(f"Service '{service_name}' not registered")

        with self._lock:
            factory = self._factories[service_name]

            if getattr(factory, '_is_singleton', False):
                # Double-check pattern for thread safety
                if service_name not in self._singletons:
                    self._singletons[service_name] = factory()
                    logger.debug(f"Created singleton instance for '{service_name}'")
                return self._singletons[service_name]

            instance = factory()
            logger.debug(f"Created new instance for '{service_name}'")
            return instance

def singleton(factory_func: Callable[[], T]) -> Callable[[], T]:
    """Decorator to mark a factory function as singleton."""
    @wraps(factory_func)
    def wrapper():
        return factory_func()

    wrapper._is_singleton = True
    return wrapper

# Global container instance
_container: Optional[Container] = None
_container_lock = threading.Lock()

def get_container() -> Container:
    """Get global container instance (thread-safe singleton)."""
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = Container()
                _setup_default_services(_container)
    return _container


def _setup_default_services(container: Container) -> None:
    """Set up default service registrations."""

    @singleton
    def create_config_manager():
        from core.config import get_config_manager
        return get_config_manager()

    @singleton
    def create_config():
        return create_config_manager().get_config()

    def create_client_factory():
        from integrations.analytics_reporting import load_client
        return load_client

    def create_sleep():
        import asyncio
        return asyncio.sleep

    container.register_singleton('config_manager', create_config_manager)
    container.register_singleton('config', create_config)
    container.register_factory('client_factory', create_client_factory)
    container.register_factory('sleep', create_sleep)

    logger.debug("Default services registered in container")
