"""
Client library for calling services by name.

This module provides an HTTP client that:
- Resolves a service name to endpoints through an endpoint directory
- Spreads requests across endpoints in round-robin order
- Shares one transport (TLS, connect and request timeouts) across calls
- Offers JSON and XML helpers that encode bodies, decode responses and
  turn non-2xx statuses into HTTPStatusError
"""

import asyncio
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any, Union

import httpx
import structlog

from ..config import ClientConfig
from ..discovery import Endpoint, EndpointDirectory, RotationTable
from ..exceptions import HTTPStatusError, NoAvailableEndpointError, TransportError
from ..logger import (
    LOG_KEY_IP,
    LOG_KEY_IPS,
    LOG_KEY_PORT,
    LOG_KEY_SERVICE,
    format_ips,
    get_logger,
)
from .codecs import (
    HEADER_ACCEPT,
    HEADER_CONTENT_TYPE,
    JSON,
    MEDIA_JSON,
    MEDIA_XML,
    XML,
    Codec,
    JSONCodec,
    XMLCodec,
)

HeaderTypes = Union[httpx.Headers, Mapping[str, str], Sequence[tuple[str, str]]]


def _describe(error: BaseException) -> str:
    return str(error) or type(error).__name__


class DiscoveryClient:
    """HTTP client addressing services by name."""

    def __init__(
        self,
        directory: EndpointDirectory,
        config: ClientConfig | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.directory = directory
        self.config = config or ClientConfig()
        self.logger = logger if logger is not None else get_logger(__name__)
        self.rotation = RotationTable()

        default_headers = {}
        if self.config.user_agent:
            default_headers["User-Agent"] = self.config.user_agent

        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(
                self.config.timeout, connect=self.config.connect_timeout
            ),
            verify=self.config.tls.create_ssl_context() if self.config.tls else True,
            headers=default_headers,
            transport=transport,
        )

        self.logger.info(
            "discovery client initialized",
            scheme=self.config.scheme,
            timeout=self.config.timeout,
            connect_timeout=self.config.connect_timeout,
        )

    def build_url(self, endpoint: Endpoint, path: str) -> str:
        """Target URL for an endpoint; ``path`` is appended verbatim."""
        return f"{self.config.scheme}://{endpoint.host}:{endpoint.port}{path}"

    async def request(
        self,
        service_name: str,
        method: str,
        path: str,
        body: bytes | None = None,
        headers: HeaderTypes | None = None,
        *,
        timeout: float | None = None,
    ) -> httpx.Response:
        """
        Send one request to the next endpoint of a service.

        Args:
            service_name: Logical service to call
            method: HTTP method
            path: Path including leading slash and any query string
            body: Raw request body
            headers: Request headers, multi-valued headers are kept in order
            timeout: Deadline in seconds for receiving the response headers,
                defaults to the configured request timeout

        Returns:
            The live response. Its body is still open and must be closed by
            the caller (``await response.aclose()``) or use ``stream()``.

        Raises:
            NoAvailableEndpointError: The service has no live endpoints
            TransportError: The request could not be built or sent
        """
        endpoints = await self.directory.resolve(service_name)

        self.logger.debug(
            "successfully resolved endpoints",
            **{
                LOG_KEY_SERVICE: service_name,
                LOG_KEY_IPS: format_ips(e.address for e in endpoints),
            },
        )

        endpoint = self.rotation.select_next(service_name, endpoints)
        if endpoint is None:
            raise NoAvailableEndpointError(service_name)

        self.logger.debug(
            "chose endpoint",
            **{
                LOG_KEY_SERVICE: service_name,
                LOG_KEY_IP: endpoint.address,
                LOG_KEY_PORT: endpoint.port,
            },
        )

        url = self.build_url(endpoint, path)
        details = {"service": service_name, "method": method, "url": url}

        try:
            request = self._http.build_request(
                method, url, content=body, headers=httpx.Headers(headers)
            )
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise TransportError(
                f"failed to create HTTP request: {_describe(e)}", details=details
            ) from e

        deadline = self.config.timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(
                self._http.send(request, stream=True), deadline
            )
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            raise TransportError(
                f"failed to perform HTTP request: {_describe(e)}", details=details
            ) from e

    @asynccontextmanager
    async def stream(
        self,
        service_name: str,
        method: str,
        path: str,
        body: bytes | None = None,
        headers: HeaderTypes | None = None,
        *,
        timeout: float | None = None,
    ) -> AsyncIterator[httpx.Response]:
        """Context manager around ``request()`` that closes the response."""
        response = await self.request(
            service_name, method, path, body, headers, timeout=timeout
        )
        try:
            yield response
        finally:
            await response.aclose()

    async def get(
        self,
        service_name: str,
        path: str,
        headers: HeaderTypes | None = None,
        *,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send a GET request and return the live response."""
        return await self.request(
            service_name, "GET", path, None, headers, timeout=timeout
        )

    async def post(
        self,
        service_name: str,
        path: str,
        body: bytes | None = None,
        headers: HeaderTypes | None = None,
        *,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send a POST request and return the live response."""
        return await self.request(
            service_name, "POST", path, body, headers, timeout=timeout
        )

    async def put(
        self,
        service_name: str,
        path: str,
        body: bytes | None = None,
        headers: HeaderTypes | None = None,
        *,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send a PUT request and return the live response."""
        return await self.request(
            service_name, "PUT", path, body, headers, timeout=timeout
        )

    async def delete(
        self,
        service_name: str,
        path: str,
        headers: HeaderTypes | None = None,
        *,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send a DELETE request and return the live response."""
        return await self.request(
            service_name, "DELETE", path, None, headers, timeout=timeout
        )

    async def request_with_codec(
        self,
        codec: Codec,
        service_name: str,
        method: str,
        path: str,
        body: Any = None,
        headers: HeaderTypes | None = None,
        response_model: Any = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """
        Send a request encoded with ``codec`` and decode the response.

        Accept and Content-Type default to the codec's media type unless the
        caller set them. The response is always drained and closed.

        Args:
            codec: Codec for the request and response bodies
            service_name: Logical service to call
            method: HTTP method
            path: Path including leading slash and any query string
            body: Value to encode, None sends no body
            headers: Request headers
            response_model: Type to decode a 2xx body into, None skips decoding
            timeout: Deadline in seconds for receiving the response headers

        Returns:
            The decoded value, or None when no response_model was given

        Raises:
            EncodeError: ``body`` could not be serialized, nothing was sent
            DecodeError: A 2xx body could not be deserialized
            HTTPStatusError: The status was outside the 2xx range
        """
        content = codec.encode(body) if body is not None else None

        request_headers = httpx.Headers(headers)
        request_headers.setdefault(HEADER_ACCEPT, codec.media_type)
        request_headers.setdefault(HEADER_CONTENT_TYPE, codec.media_type)

        response = await self.request(
            service_name, method, path, content, request_headers, timeout=timeout
        )
        try:
            if 200 <= response.status_code < 300:
                try:
                    data = await response.aread()
                except httpx.HTTPError as e:
                    raise TransportError(
                        f"failed to read response body: {_describe(e)}",
                        details={"service": service_name, "url": str(response.url)},
                    ) from e
                if response_model is None:
                    return None
                return codec.decode(data, response_model)

            try:
                await response.aread()
            except httpx.HTTPError as e:
                raise HTTPStatusError(
                    response.status_code,
                    f"failed to read response body: {_describe(e)}",
                ) from e
            raise HTTPStatusError(response.status_code, response.text)
        finally:
            await response.aclose()

    async def json_request(
        self,
        service_name: str,
        method: str,
        path: str,
        body: Any = None,
        headers: HeaderTypes | None = None,
        response_model: Any = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a JSON request and decode the JSON response."""
        return await self.request_with_codec(
            JSON, service_name, method, path, body, headers, response_model,
            timeout=timeout,
        )

    async def json_get(
        self,
        service_name: str,
        path: str,
        headers: HeaderTypes | None = None,
        response_model: Any = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a GET request and decode the JSON response."""
        return await self.json_request(
            service_name, "GET", path, None, headers, response_model, timeout=timeout
        )

    async def json_post(
        self,
        service_name: str,
        path: str,
        body: Any,
        headers: HeaderTypes | None = None,
        response_model: Any = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a JSON encoded POST request and decode the JSON response."""
        return await self.json_request(
            service_name, "POST", path, body, headers, response_model, timeout=timeout
        )

    async def json_put(
        self,
        service_name: str,
        path: str,
        body: Any,
        headers: HeaderTypes | None = None,
        response_model: Any = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a JSON encoded PUT request and decode the JSON response."""
        return await self.json_request(
            service_name, "PUT", path, body, headers, response_model, timeout=timeout
        )

    async def json_delete(
        self,
        service_name: str,
        path: str,
        headers: HeaderTypes | None = None,
        response_model: Any = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a DELETE request with JSON content negotiation."""
        return await self.json_request(
            service_name, "DELETE", path, None, headers, response_model,
            timeout=timeout,
        )

    async def xml_request(
        self,
        service_name: str,
        method: str,
        path: str,
        body: Any = None,
        headers: HeaderTypes | None = None,
        response_model: Any = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send an XML request and decode the XML response."""
        return await self.request_with_codec(
            XML, service_name, method, path, body, headers, response_model,
            timeout=timeout,
        )

    async def xml_get(
        self,
        service_name: str,
        path: str,
        headers: HeaderTypes | None = None,
        response_model: Any = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a GET request and decode the XML response."""
        return await self.xml_request(
            service_name, "GET", path, None, headers, response_model, timeout=timeout
        )

    async def xml_post(
        self,
        service_name: str,
        path: str,
        body: Any,
        headers: HeaderTypes | None = None,
        response_model: Any = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send an XML encoded POST request and decode the XML response."""
        return await self.xml_request(
            service_name, "POST", path, body, headers, response_model, timeout=timeout
        )

    async def xml_put(
        self,
        service_name: str,
        path: str,
        body: Any,
        headers: HeaderTypes | None = None,
        response_model: Any = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send an XML encoded PUT request and decode the XML response."""
        return await self.xml_request(
            service_name, "PUT", path, body, headers, response_model, timeout=timeout
        )

    async def xml_delete(
        self,
        service_name: str,
        path: str,
        headers: HeaderTypes | None = None,
        response_model: Any = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a DELETE request with XML content negotiation."""
        return await self.xml_request(
            service_name, "DELETE", path, None, headers, response_model,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        """Close the shared transport."""
        await self._http.aclose()
        self.logger.info("discovery client closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


__all__ = [
    "HEADER_ACCEPT",
    "HEADER_CONTENT_TYPE",
    "MEDIA_JSON",
    "MEDIA_XML",
    "Codec",
    "DiscoveryClient",
    "JSONCodec",
    "XMLCodec",
]
