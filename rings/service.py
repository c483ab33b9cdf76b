"""Named services held by a service manager, with a process-wide shared manager."""

from __future__ import annotations

import abc
import logging
import threading
from typing import Any, TypeVar

from .erx import Erx

SHARED_SERVICE_NAME = "SharedServiceManager"

_log = logging.getLogger(__name__)

S = TypeVar("S", bound="Service")


class Service(abc.ABC):
    """A unit of application logic managed by name.

    Subclasses must be constructible without arguments.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Unique name of the service within its manager."""

    @abc.abstractmethod
    def initialize(self) -> None:
        """Prepare the service; called once when it is registered."""

    @abc.abstractmethod
    def release(self) -> None:
        """Free the service's resources; called when it is unregistered."""

    def ready(self) -> bool:
        """Whether the service can take work."""
        return True

    def schedules(self) -> list[Any]:
        """Scheduled jobs the service wants to run."""
        return []


class ServiceManager:
    """Registry of service instances, at most one per name."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._managed: list[Service] = []
        self._lock = threading.RLock()

    def _managed_by_name(self, name: str) -> Service | None:
        with self._lock:
            return next((s for s in self._managed if s.name == name), None)

    def managed_services(self) -> list[Service]:
        """A snapshot of the registered services, in registration order."""
        with self._lock:
            return list(self._managed)

    def register(self, service_cls: type[S]) -> S:
        """Create, initialize and register a service; raise Erx if its name is taken."""
        service = service_cls()
        name = service.name
        with self._lock:
            if self._managed_by_name(name) is not None:
                raise Erx(f"Service '{name}' already registered!")
            service.initialize()
            self._managed.append(service)
        return service

    def unregister(self, service_cls: type[Service]) -> None:
        """Release and remove a service; raise Erx if it was not registered."""
        name = service_cls().name
        with self._lock:
            service = self._managed_by_name(name)
            if service is None:
                raise Erx(f"Service '{name}' was not registered!")
            service.release()
            self._managed = [s for s in self._managed if s.name != name]

    def get(self, service_cls: type[Service]) -> Service | None:
        """The registered service with the same name as ``service_cls``, if any."""
        return self._managed_by_name(service_cls().name)


_shared_lock = threading.Lock()
_shared: ServiceManager | None = None


def shared_service_manager() -> ServiceManager:
    """The process-wide service manager, created on first use."""
    global _shared
    with _shared_lock:
        if _shared is None:
            _log.info("Initializing shared service manager")
            _shared = ServiceManager(SHARED_SERVICE_NAME)
        return _shared


def register_to_shared(service_cls: type[S]) -> S:
    """Register a service with the shared manager."""
    return shared_service_manager().register(service_cls)