"""
Global pytest configuration and fixtures for discovery client testing.

This module provides shared fixtures and utilities used across all test
modules: endpoint sets, directories and clients wired to a mock transport.
"""

from collections.abc import Callable

import httpx
import pytest

from discovery_client import (
    ClientConfig,
    DiscoveryClient,
    Endpoint,
    EndpointDirectory,
    StaticEndpointDirectory,
)


class TrackingStream(httpx.AsyncByteStream):
    """Response body stream that records whether it was closed."""

    def __init__(self, content: bytes = b""):
        self.content = content
        self.closed = False

    async def __aiter__(self):
        yield self.content

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def endpoints() -> list[Endpoint]:
    """Provide three endpoints for the orders service."""
    return [
        Endpoint("10.0.0.1", 8080),
        Endpoint("10.0.0.2", 8081),
        Endpoint("10.0.0.3", 8082),
    ]


@pytest.fixture
def directory(endpoints) -> StaticEndpointDirectory:
    """Provide a directory with a populated and an empty service."""
    return StaticEndpointDirectory({"orders": endpoints, "drained": []})


@pytest.fixture
def make_client(directory) -> Callable[..., DiscoveryClient]:
    """Build clients whose transport is an httpx.MockTransport around ``handler``."""

    def _make(
        handler,
        directory: EndpointDirectory = directory,
        config: ClientConfig | None = None,
        logger=None,
    ) -> DiscoveryClient:
        return DiscoveryClient(
            directory,
            config=config,
            logger=logger,
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def tracking_stream() -> type[TrackingStream]:
    """Provide the closable stream type for response lifecycle assertions."""
    return TrackingStream
