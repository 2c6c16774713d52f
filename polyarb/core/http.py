"""
HTTP client wrapper with timeout and retry.

Every call is bounded by the configured timeout; recoverable failures
(timeouts, connection errors, 5xx, 429) are retried with exponential
backoff, everything else is raised immediately as a FetchError.
"""

from typing import Any, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from polyarb.core.config import get_settings
from polyarb.core.errors import FetchError, RateLimitError
from polyarb.core.logging import get_logger

logger = get_logger("http")


def _is_recoverable(error: BaseException) -> bool:
    return isinstance(error, FetchError) and error.recoverable


class HttpClient:
    """
    HTTP client with built-in retry, timeout, and error handling.

    Features:
    - Configurable timeout
    - Exponential backoff retry
    - Rate limit handling
    - Request/response logging
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = base_url
        self.timeout = timeout or settings.http_timeout
        self.max_retries = max_retries or settings.http_max_retries
        self.default_headers = headers or {}
        self._transport = transport
        self._async_transport = async_transport

        self._client: Optional[httpx.Client] = None
        self._async_client: Optional[httpx.AsyncClient] = None

    def _client_kwargs(self) -> dict[str, Any]:
        client_kwargs: dict[str, Any] = {
            "timeout": self.timeout,
            "headers": self.default_headers,
        }
        if self.base_url:
            client_kwargs["base_url"] = self.base_url
        return client_kwargs

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialized sync HTTP client."""
        if self._client is None:
            self._client = httpx.Client(transport=self._transport, **self._client_kwargs())
        return self._client

    @property
    def async_client(self) -> httpx.AsyncClient:
        """Lazy-initialized async HTTP client."""
        if self._async_client is None:
            self._async_client = httpx.AsyncClient(
                transport=self._async_transport, **self._client_kwargs()
            )
        return self._async_client

    def close(self) -> None:
        """Close the sync HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    async def aclose(self) -> None:
        """Close the async HTTP client."""
        if self._async_client:
            await self._async_client.aclose()
            self._async_client = None

    def _retrying(self) -> Retrying:
        return Retrying(
            retry=retry_if_exception(_is_recoverable),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    def _async_retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception(_is_recoverable),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    def get(
        self,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        provider_name: str = "unknown",
    ) -> Any:
        """
        Make a GET request with retry logic.

        Args:
            url: Request URL (can be relative if base_url is set)
            params: Query parameters
            headers: Additional headers
            provider_name: Provider name for error reporting

        Returns:
            Decoded JSON response

        Raises:
            FetchError: On request failure
            RateLimitError: On 429 status
        """
        for attempt in self._retrying():
            with attempt:
                logger.debug(f"GET {url} params={params}")
                return self._send("GET", url, provider_name, params=params, headers=headers)

    def post(
        self,
        url: str,
        *,
        json: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        provider_name: str = "unknown",
    ) -> Any:
        """Make a POST request with retry logic."""
        for attempt in self._retrying():
            with attempt:
                logger.debug(f"POST {url}")
                return self._send("POST", url, provider_name, json=json, headers=headers)

    async def apost(
        self,
        url: str,
        *,
        json: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        provider_name: str = "unknown",
    ) -> Any:
        """Async POST request with retry logic."""
        async for attempt in self._async_retrying():
            with attempt:
                logger.debug(f"Async POST {url}")
                try:
                    response = await self.async_client.post(url, json=json, headers=headers)
                except httpx.TimeoutException as e:
                    raise self._timeout_error(url, provider_name) from e
                except httpx.TransportError as e:
                    raise self._network_error(e, provider_name) from e
                return self._handle_response(response, provider_name)

    async def aget(
        self,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        provider_name: str = "unknown",
    ) -> Any:
        """Async GET request with retry logic."""
        async for attempt in self._async_retrying():
            with attempt:
                logger.debug(f"Async GET {url} params={params}")
                try:
                    response = await self.async_client.get(url, params=params, headers=headers)
                except httpx.TimeoutException as e:
                    raise self._timeout_error(url, provider_name) from e
                except httpx.TransportError as e:
                    raise self._network_error(e, provider_name) from e
                return self._handle_response(response, provider_name)

    def _send(self, method: str, url: str, provider_name: str, **kwargs) -> Any:
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout on {method} {url}: {e}")
            raise self._timeout_error(url, provider_name) from e
        except httpx.TransportError as e:
            logger.error(f"Network error on {method} {url}: {e}")
            raise self._network_error(e, provider_name) from e
        return self._handle_response(response, provider_name)

    @staticmethod
    def _timeout_error(url: str, provider_name: str) -> FetchError:
        return FetchError(
            f"Request timeout: {url}",
            provider=provider_name,
            recoverable=True,
        )

    @staticmethod
    def _network_error(error: Exception, provider_name: str) -> FetchError:
        return FetchError(
            f"Network error: {error}",
            provider=provider_name,
            recoverable=True,
        )

    def _handle_response(
        self,
        response: httpx.Response,
        provider_name: str,
    ) -> Any:
        """Handle HTTP response and decode the JSON body."""
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                "Rate limit exceeded",
                provider=provider_name,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )

        if response.status_code >= 400:
            logger.error(f"HTTP {response.status_code}: {response.text[:200]}")
            raise FetchError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                provider=provider_name,
                status_code=response.status_code,
                recoverable=response.status_code >= 500,
            )

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(
                f"Invalid JSON response: {response.text[:200]}",
                provider=provider_name,
                status_code=response.status_code,
                recoverable=False,
            ) from e


# Global HTTP client instance
_default_client: Optional[HttpClient] = None


def get_http_client() -> HttpClient:
    """Get the default HTTP client instance."""
    global _default_client
    if _default_client is None:
        _default_client = HttpClient()
    return _default_client
