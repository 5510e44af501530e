"""Exception hierarchy for GravixLayer API operations."""

from __future__ import annotations


class GravixLayerError(Exception):
    """Base exception for all GravixLayer errors.

    Also raised directly for transport conditions that are not otherwise
    classified, e.g. an unexpected non-2xx status outside 4xx/5xx.
    """

    pass


class GravixLayerAuthenticationError(GravixLayerError):
    """Raised when the API rejects the credentials (HTTP 401). Never retried."""

    pass


class GravixLayerAPIError(GravixLayerError):
    """Raised when the remote API returns an error response.

    The exception message is the raw response body text.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self._status_code = status_code
        self._message = message
        super().__init__(message)

    @property
    def status_code(self) -> int | None:
        return self._status_code

    @property
    def message(self) -> str:
        return self._message


class GravixLayerRateLimitError(GravixLayerAPIError):
    """Raised when HTTP 429 persists after all retries."""

    pass


class GravixLayerBadRequestError(GravixLayerAPIError):
    """Raised for HTTP 4xx responses other than 401/429, and for invalid arguments."""

    pass


class GravixLayerServerError(GravixLayerAPIError):
    """Raised for HTTP 5xx responses, or 502/503/504 after retries are exhausted."""

    pass


class GravixLayerConnectionError(GravixLayerError):
    """Raised when the client cannot reach the API after all retry attempts."""

    pass


class GravixLayerStreamingError(GravixLayerError):
    """Raised when reading an active response stream fails."""

    def __init__(self, message: str):
        super().__init__(f"Streaming error: {message}")
