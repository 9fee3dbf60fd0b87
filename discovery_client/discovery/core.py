"""
Core Endpoint Discovery Abstractions

Resolved endpoints and the directory interface that maps a logical
service name onto the endpoints currently able to serve it.
"""

import asyncio
import builtins
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

from ..exceptions import ResolutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Endpoint:
    """A resolved network location for one service instance."""

    address: str
    port: int

    @property
    def host(self) -> str:
        """Address formatted for use in a URL authority."""
        if ":" in self.address and not self.address.startswith("["):
            return f"[{self.address}]"
        return self.address

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class EndpointDirectory(ABC):
    """Abstract endpoint directory interface.

    Implementations must be safe for concurrent calls. Failing to resolve a
    service is signalled by raising; an empty list means the service is known
    but currently has no live instances.
    """

    @abstractmethod
    async def resolve(self, service_name: str) -> builtins.list[Endpoint]:
        """Resolve a service name to its current endpoints."""


class StaticEndpointDirectory(EndpointDirectory):
    """In-memory endpoint directory for fixed topologies and testing."""

    def __init__(
        self, services: builtins.dict[str, Iterable[Endpoint]] | None = None
    ):
        self._services: builtins.dict[str, builtins.list[Endpoint]] = {
            name: list(endpoints) for name, endpoints in (services or {}).items()
        }
        self._lock = asyncio.Lock()

    async def register(self, service_name: str, endpoint: Endpoint) -> None:
        """Add an endpoint to a service, creating the service if needed."""
        async with self._lock:
            endpoints = self._services.setdefault(service_name, [])
            if endpoint not in endpoints:
                endpoints.append(endpoint)
        logger.info("Registered endpoint %s for service %s", endpoint, service_name)

    async def deregister(self, service_name: str, endpoint: Endpoint) -> bool:
        """Remove an endpoint. The service stays known even when emptied."""
        async with self._lock:
            endpoints = self._services.get(service_name)
            if not endpoints or endpoint not in endpoints:
                return False
            endpoints.remove(endpoint)
        logger.info("Deregistered endpoint %s for service %s", endpoint, service_name)
        return True

    async def list_services(self) -> builtins.list[str]:
        async with self._lock:
            return sorted(self._services)

    async def resolve(self, service_name: str) -> builtins.list[Endpoint]:
        async with self._lock:
            endpoints = self._services.get(service_name)
            if endpoints is None:
                raise ResolutionError(service_name)
            return endpoints.copy()
