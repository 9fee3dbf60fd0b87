"""
Core exceptions for the discovery client.

This module defines the exception hierarchy raised by the client, giving each
failure kind of a service call its own type so callers can tell them apart.
"""

from typing import Any, Dict, Optional


class DiscoveryClientError(Exception):
    """Base exception for all discovery client errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary representation."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ConfigurationError(DiscoveryClientError):
    """Raised when configuration is invalid or missing."""

    pass


class ResolutionError(DiscoveryClientError):
    """Raised by the bundled directories when a service cannot be resolved."""

    def __init__(self, service_name: str, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"failed to resolve service: {service_name}",
            error_code="RESOLUTION_FAILED",
            details={"service": service_name},
        )
        self.service_name = service_name


class NoAvailableEndpointError(DiscoveryClientError):
    """Raised when a service resolved to zero live endpoints."""

    def __init__(self, service_name: str) -> None:
        super().__init__(
            "no available endpoint",
            error_code="NO_AVAILABLE_ENDPOINT",
            details={"service": service_name},
        )
        self.service_name = service_name


class TransportError(DiscoveryClientError):
    """Raised when a request could not be built or sent."""

    pass


class EncodeError(DiscoveryClientError):
    """Raised when a request body cannot be serialized."""

    pass


class DecodeError(DiscoveryClientError):
    """Raised when a successful response body cannot be deserialized."""

    pass


class HTTPStatusError(DiscoveryClientError):
    """Raised when a response status falls outside the 2xx range.

    The raw response text is carried verbatim in ``body``.
    """

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(
            f"unexpected HTTP status {status_code}: {body}",
            error_code="HTTP_STATUS",
            details={"status_code": status_code, "body": body},
        )
        self.status_code = status_code
        self.body = body
