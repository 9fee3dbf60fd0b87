"""
Discovery Client - service-name addressed HTTP client

Calls logical services instead of fixed addresses: every request resolves the
service through a pluggable endpoint directory and picks the next endpoint in
round-robin order.

Key Features:
- Pluggable endpoint directories (static, TTL cached, or your own)
- Per-service round-robin rotation shared safely across concurrent callers
- One shared transport with TLS, connect and request timeouts
- JSON and XML helpers with header defaulting and typed status errors
- Structured logging with JSON output

Usage:
    >>> from discovery_client import DiscoveryClient, Endpoint, StaticEndpointDirectory

    >>> directory = StaticEndpointDirectory(
    ...     {"orders": [Endpoint("10.0.0.1", 8080), Endpoint("10.0.0.2", 8080)]}
    ... )
    >>> async with DiscoveryClient(directory) as client:
    ...     order = await client.json_get("orders", "/orders/42", response_model=Order)
"""

__version__ = "0.1.0"

# Client
from .clients import (
    HEADER_ACCEPT,
    HEADER_CONTENT_TYPE,
    MEDIA_JSON,
    MEDIA_XML,
    Codec,
    DiscoveryClient,
    JSONCodec,
    XMLCodec,
)

# Configuration
from .config import ClientConfig, LogLevel, TLSConfig, load_config

# Discovery
from .discovery import (
    CachingEndpointDirectory,
    Endpoint,
    EndpointDirectory,
    RotationTable,
    StaticEndpointDirectory,
)

# Exceptions
from .exceptions import (
    ConfigurationError,
    DecodeError,
    DiscoveryClientError,
    EncodeError,
    HTTPStatusError,
    NoAvailableEndpointError,
    ResolutionError,
    TransportError,
)

# Logging
from .logger import LogConfig, get_logger, setup_logging

__all__ = [
    "__version__",
    # Client
    "DiscoveryClient",
    "Codec",
    "JSONCodec",
    "XMLCodec",
    "HEADER_ACCEPT",
    "HEADER_CONTENT_TYPE",
    "MEDIA_JSON",
    "MEDIA_XML",
    # Configuration
    "ClientConfig",
    "LogLevel",
    "TLSConfig",
    "load_config",
    # Discovery
    "Endpoint",
    "EndpointDirectory",
    "StaticEndpointDirectory",
    "CachingEndpointDirectory",
    "RotationTable",
    # Exceptions
    "DiscoveryClientError",
    "ConfigurationError",
    "ResolutionError",
    "NoAvailableEndpointError",
    "TransportError",
    "EncodeError",
    "DecodeError",
    "HTTPStatusError",
    # Logging
    "LogConfig",
    "get_logger",
    "setup_logging",
]
