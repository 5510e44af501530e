from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import httpx

from . import _defaults
from .exceptions import (
    GravixLayerAuthenticationError,
    GravixLayerBadRequestError,
    GravixLayerConnectionError,
    GravixLayerError,
    GravixLayerRateLimitError,
    GravixLayerServerError,
)

logger = logging.getLogger("gravixlayer")


@dataclass(frozen=True)
class ClientConfig:
    """
    Read-only settings shared by every call made through one client.
    """

    api_key: str
    base_url: str
    timeout: float = _defaults.DEFAULT_TIMEOUT_SEC
    max_retries: int = _defaults.MAX_RETRIES
    headers: Mapping[str, str] = field(default_factory=dict)
    user_agent: str = _defaults.USER_AGENT
    organization: Optional[str] = None
    project: Optional[str] = None

    @classmethod
    def create(
        cls,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        headers: Optional[Mapping[str, str]] = None,
        user_agent: Optional[str] = None,
        organization: Optional[str] = None,
        project: Optional[str] = None,
    ) -> "ClientConfig":
        """
        Resolve arguments against the environment and validate them.

        Raises:
            ValueError: If no API key is available or the base URL is not HTTP(S).
        """
        api_key = api_key or _defaults.API_KEY or ""
        base_url = base_url or _defaults.BASE_URL

        if not base_url.startswith("http://") and not base_url.startswith(
            "https://"
        ):
            raise ValueError("Base URL must use HTTP or HTTPS protocol")

        if not api_key:
            raise ValueError(
                "API key must be provided via argument or GRAVIXLAYER_API_KEY environment variable"
            )

        return cls(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout if timeout is not None else _defaults.DEFAULT_TIMEOUT_SEC,
            max_retries=(
                max_retries if max_retries is not None else _defaults.MAX_RETRIES
            ),
            headers=dict(headers or {}),
            user_agent=user_agent or _defaults.USER_AGENT,
            organization=organization,
            project=project,
        )

    def service_url(self, service: str) -> str:
        """
        Root URL of a sibling service, e.g. ``/v1/files`` for the files API.

        The inference base URL ``https://host/v1/inference`` maps to
        ``https://host/v1/files``.
        """
        return self.base_url.replace(_defaults.INFERENCE_SEGMENT, service)


@dataclass(frozen=True)
class RequestSpec:
    """
    One logical API call. ``files`` switches the body to multipart encoding.
    """

    method: str
    endpoint: str
    body: Any = None
    files: Any = None
    params: Optional[Mapping[str, Any]] = None
    headers: Optional[Mapping[str, str]] = None
    stream: bool = False

    @property
    def is_multipart(self) -> bool:
        return self.files is not None


def join_url(base_url: str, endpoint: str) -> str:
    if endpoint.startswith("http://") or endpoint.startswith("https://"):
        return endpoint
    if not endpoint:
        return base_url
    return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


class _BaseClient:
    """
    Handles auth, session objects and the retrying request dispatcher.
    All resources issue their HTTP calls through this class.
    """

    def __init__(self, config: ClientConfig):
        self._config = config
        self._client = httpx.Client(timeout=config.timeout)
        # Created on first async call so sync-only users never open it.
        self._aclient: Optional[httpx.AsyncClient] = None

    @property
    def config(self) -> ClientConfig:
        return self._config

    def close(self):
        """
        Close the synchronous HTTP client.
        """
        self._client.close()

    async def aclose(self):
        """
        Close both HTTP clients.
        """
        self._client.close()
        if self._aclient is not None:
            await self._aclient.aclose()

    def _async_client(self) -> httpx.AsyncClient:
        if self._aclient is None:
            self._aclient = httpx.AsyncClient(timeout=self._config.timeout)
        return self._aclient

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.aclose()

    def _url(self, endpoint: str) -> str:
        return join_url(self._config.base_url, endpoint)

    def _headers(self, spec: RequestSpec) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "User-Agent": self._config.user_agent,
        }
        # httpx generates the multipart boundary header itself.
        if not spec.is_multipart:
            headers["Content-Type"] = "application/json"
        headers.update(self._config.headers)
        if spec.headers:
            headers.update(spec.headers)
        return headers

    def _build_request(
        self, client: httpx.Client | httpx.AsyncClient, spec: RequestSpec
    ) -> httpx.Request:
        kwargs: Dict[str, Any] = {
            "headers": self._headers(spec),
            "params": spec.params,
        }
        if spec.is_multipart:
            kwargs["files"] = spec.files
            if spec.body is not None:
                kwargs["data"] = spec.body
        elif spec.body is not None:
            kwargs["json"] = spec.body

        return client.build_request(spec.method, self._url(spec.endpoint), **kwargs)

    def _retry_delay(self, response: httpx.Response, attempt: int) -> float:
        """
        Classify a non-2xx response.

        Returns the number of seconds to wait before the next attempt, or
        raises the matching error when the response is terminal. The body
        must already be read.
        """
        status = response.status_code
        attempts_left = attempt < self._config.max_retries

        if status == 401:
            raise GravixLayerAuthenticationError("Authentication failed.")

        if status == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            delay = retry_after if retry_after is not None else 2**attempt
            if attempts_left:
                logger.warning("Rate limit exceeded. Retrying in %ss...", delay)
                return delay
            raise GravixLayerRateLimitError(response.text, status_code=status)

        if status in _defaults.RETRYABLE_STATUS_CODES and attempts_left:
            logger.warning("Server error: %s. Retrying...", status)
            return 2**attempt

        if 400 <= status < 500:
            raise GravixLayerBadRequestError(response.text, status_code=status)

        if 500 <= status < 600:
            raise GravixLayerServerError(response.text, status_code=status)

        raise GravixLayerError(f"HTTP {status}: {response.reason_phrase}")

    def _connection_retry_delay(self, e: httpx.RequestError, attempt: int) -> float:
        if attempt >= self._config.max_retries:
            raise GravixLayerConnectionError(str(e)) from e
        logger.warning("Transient connection error, retrying...", exc_info=e)
        return 2**attempt

    def _send(self, spec: RequestSpec) -> httpx.Response:
        """Send a request, retrying on 429/502/503/504 and connection errors.

        Retries use exponential backoff of ``2**attempt`` seconds, or the
        server's ``Retry-After`` for 429 responses. At most
        ``max_retries + 1`` attempts are made.

        Raises:
            GravixLayerAuthenticationError: On 401.
            GravixLayerRateLimitError: When 429 persists after all retries.
            GravixLayerBadRequestError: On any other 4xx.
            GravixLayerServerError: On 5xx, or 502/503/504 after all retries.
            GravixLayerConnectionError: When the server stays unreachable.
        """
        for attempt in range(self._config.max_retries + 1):
            request = self._build_request(self._client, spec)
            try:
                response = self._client.send(request, stream=spec.stream)
            except httpx.RequestError as e:
                time.sleep(self._connection_retry_delay(e, attempt))
                continue

            if response.is_success:
                return response

            try:
                response.read()
                delay = self._retry_delay(response, attempt)
            finally:
                response.close()
            time.sleep(delay)

        # Should not be reached, but guard against it.
        raise GravixLayerError("Failed to complete request.")

    async def _asend(self, spec: RequestSpec) -> httpx.Response:
        """Asynchronous counterpart of ``_send`` with identical retry semantics."""
        client = self._async_client()
        for attempt in range(self._config.max_retries + 1):
            request = self._build_request(client, spec)
            try:
                response = await client.send(request, stream=spec.stream)
            except httpx.RequestError as e:
                await asyncio.sleep(self._connection_retry_delay(e, attempt))
                continue

            if response.is_success:
                return response

            try:
                await response.aread()
                delay = self._retry_delay(response, attempt)
            finally:
                await response.aclose()
            await asyncio.sleep(delay)

        raise GravixLayerError("Failed to complete request.")

    def _request(self, method: str, endpoint: str, **kw: Any) -> httpx.Response:
        return self._send(RequestSpec(method=method, endpoint=endpoint, **kw))

    async def _arequest(self, method: str, endpoint: str, **kw: Any) -> httpx.Response:
        return await self._asend(RequestSpec(method=method, endpoint=endpoint, **kw))
