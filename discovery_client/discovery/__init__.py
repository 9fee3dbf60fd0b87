"""Endpoint discovery: directories, caching and round-robin selection."""

from .cache import CachingEndpointDirectory
from .core import Endpoint, EndpointDirectory, StaticEndpointDirectory
from .load_balancing import RotationCounter, RotationTable

__all__ = [
    "CachingEndpointDirectory",
    "Endpoint",
    "EndpointDirectory",
    "RotationCounter",
    "RotationTable",
    "StaticEndpointDirectory",
]
