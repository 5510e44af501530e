"""Tests for the retrying request dispatcher."""

import logging

import httpx
import pytest

from gravixlayer import (
    GravixLayer,
    GravixLayerAuthenticationError,
    GravixLayerBadRequestError,
    GravixLayerConnectionError,
    GravixLayerError,
    GravixLayerRateLimitError,
    GravixLayerServerError,
)

BASE_URL = "https://api.gravixlayer.test/v1/inference"
CHAT_URL = f"{BASE_URL}/chat/completions"


def _ok():
    return httpx.Response(200, json={"ok": True})


class TestRequestHeaders:
    """Tests for headers attached to every request."""

    def test_default_headers(self, client, mock_api):
        route = mock_api.post(CHAT_URL).mock(return_value=_ok())

        client._request("POST", "chat/completions", body={"a": 1})

        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer test-key"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["User-Agent"].startswith("gravixlayer-python/")

    def test_custom_headers_override(self, mock_api):
        """Client and per-request headers are merged over the defaults."""
        client = GravixLayer(
            api_key="test-key",
            base_url=BASE_URL,
            headers={"X-Team": "ml"},
            user_agent="my-agent/1.0",
        )
        route = mock_api.get(f"{BASE_URL}/models").mock(return_value=_ok())

        client._request("GET", "/models", headers={"X-Request": "42"})

        request = route.calls.last.request
        assert request.headers["X-Team"] == "ml"
        assert request.headers["X-Request"] == "42"
        assert request.headers["User-Agent"] == "my-agent/1.0"
        client.close()

    def test_multipart_has_no_json_content_type(self, client, mock_api):
        route = mock_api.post(f"{BASE_URL}/upload").mock(return_value=_ok())

        client._request(
            "POST", "upload", body={"purpose": "fine-tune"}, files={"file": ("a", b"x")}
        )

        content_type = route.calls.last.request.headers["Content-Type"]
        assert content_type.startswith("multipart/form-data; boundary=")

    def test_absolute_endpoint(self, client, mock_api):
        """Absolute URLs bypass the inference base URL."""
        route = mock_api.get("https://api.gravixlayer.test/v1/files").mock(
            return_value=_ok()
        )

        client._request("GET", "https://api.gravixlayer.test/v1/files")

        assert route.called


class TestRetries:
    """Tests for retry and error classification."""

    def test_success_first_try(self, client, mock_api, no_sleep):
        route = mock_api.post(CHAT_URL).mock(return_value=_ok())

        response = client._request("POST", "chat/completions", body={})

        assert response.json() == {"ok": True}
        assert route.call_count == 1
        no_sleep.assert_not_called()

    def test_authentication_error_not_retried(self, client, mock_api, no_sleep):
        route = mock_api.post(CHAT_URL).mock(
            return_value=httpx.Response(401, text="bad key")
        )

        with pytest.raises(GravixLayerAuthenticationError) as exc_info:
            client._request("POST", "chat/completions", body={})

        assert str(exc_info.value) == "Authentication failed."
        assert route.call_count == 1
        no_sleep.assert_not_called()

    def test_rate_limit_honours_retry_after(self, client, mock_api, no_sleep):
        route = mock_api.post(CHAT_URL).mock(
            side_effect=[
                httpx.Response(429, headers={"Retry-After": "7"}, text="slow down"),
                _ok(),
            ]
        )

        response = client._request("POST", "chat/completions", body={})

        assert response.status_code == 200
        assert route.call_count == 2
        no_sleep.assert_called_once_with(7)

    def test_rate_limit_unparseable_retry_after(self, client, mock_api, no_sleep):
        """A non-integer Retry-After falls back to exponential backoff."""
        mock_api.post(CHAT_URL).mock(
            side_effect=[
                httpx.Response(429, headers={"Retry-After": "soon"}),
                httpx.Response(429),
                _ok(),
            ]
        )

        client._request("POST", "chat/completions", body={})

        assert [c.args[0] for c in no_sleep.call_args_list] == [1, 2]

    def test_rate_limit_exhausted(self, client, mock_api, no_sleep):
        route = mock_api.post(CHAT_URL).mock(
            return_value=httpx.Response(429, text="too many requests")
        )

        with pytest.raises(GravixLayerRateLimitError) as exc_info:
            client._request("POST", "chat/completions", body={})

        assert str(exc_info.value) == "too many requests"
        assert exc_info.value.status_code == 429
        assert route.call_count == 4
        assert no_sleep.call_count == 3

    @pytest.mark.parametrize("status", [502, 503, 504])
    def test_gateway_errors_back_off_exponentially(
        self, client, mock_api, no_sleep, status
    ):
        route = mock_api.post(CHAT_URL).mock(
            return_value=httpx.Response(status, text="upstream down")
        )

        with pytest.raises(GravixLayerServerError) as exc_info:
            client._request("POST", "chat/completions", body={})

        assert exc_info.value.status_code == status
        assert str(exc_info.value) == "upstream down"
        assert route.call_count == 4
        assert [c.args[0] for c in no_sleep.call_args_list] == [1, 2, 4]

    def test_gateway_error_then_success(self, client, mock_api, no_sleep):
        mock_api.post(CHAT_URL).mock(side_effect=[httpx.Response(503), _ok()])

        response = client._request("POST", "chat/completions", body={})

        assert response.json() == {"ok": True}
        no_sleep.assert_called_once_with(1)

    def test_internal_server_error_not_retried(self, client, mock_api, no_sleep):
        route = mock_api.post(CHAT_URL).mock(
            return_value=httpx.Response(500, text="boom")
        )

        with pytest.raises(GravixLayerServerError) as exc_info:
            client._request("POST", "chat/completions", body={})

        assert exc_info.value.status_code == 500
        assert route.call_count == 1
        no_sleep.assert_not_called()

    @pytest.mark.parametrize("status", [400, 403, 404, 422])
    def test_client_errors_not_retried(self, client, mock_api, no_sleep, status):
        route = mock_api.post(CHAT_URL).mock(
            return_value=httpx.Response(status, text='{"error": "nope"}')
        )

        with pytest.raises(GravixLayerBadRequestError) as exc_info:
            client._request("POST", "chat/completions", body={})

        assert exc_info.value.status_code == status
        assert exc_info.value.message == '{"error": "nope"}'
        assert route.call_count == 1

    def test_unexpected_status(self, client, mock_api, no_sleep):
        """Non-2xx statuses outside 4xx/5xx raise the base error."""
        mock_api.get(f"{BASE_URL}/models").mock(return_value=httpx.Response(304))

        with pytest.raises(GravixLayerError) as exc_info:
            client._request("GET", "models")

        assert type(exc_info.value) is GravixLayerError
        assert str(exc_info.value) == "HTTP 304: Not Modified"

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("timed out"),
        ],
    )
    def test_connection_errors_exhausted(self, client, mock_api, no_sleep, error):
        route = mock_api.post(CHAT_URL).mock(side_effect=error)

        with pytest.raises(GravixLayerConnectionError) as exc_info:
            client._request("POST", "chat/completions", body={})

        assert isinstance(exc_info.value.__cause__, httpx.RequestError)
        assert route.call_count == 4
        assert [c.args[0] for c in no_sleep.call_args_list] == [1, 2, 4]

    def test_connection_error_then_success(self, client, mock_api, no_sleep):
        mock_api.post(CHAT_URL).mock(
            side_effect=[httpx.ConnectError("connection refused"), _ok()]
        )

        response = client._request("POST", "chat/completions", body={})

        assert response.status_code == 200

    def test_zero_retries(self, mock_api, no_sleep):
        """With max_retries=0 exactly one attempt is made."""
        client = GravixLayer(api_key="test-key", base_url=BASE_URL, max_retries=0)
        route = mock_api.post(CHAT_URL).mock(return_value=httpx.Response(503))

        with pytest.raises(GravixLayerServerError):
            client._request("POST", "chat/completions", body={})

        assert route.call_count == 1
        no_sleep.assert_not_called()
        client.close()

    def test_request_body_resent_on_retry(self, client, mock_api, no_sleep):
        route = mock_api.post(CHAT_URL).mock(
            side_effect=[httpx.Response(502), _ok()]
        )

        client._request("POST", "chat/completions", body={"model": "m"})

        bodies = [call.request.content for call in route.calls]
        assert bodies[0] == bodies[1]
        assert b'"model"' in bodies[0]

    def test_retries_are_logged(self, client, mock_api, no_sleep, caplog):
        mock_api.post(CHAT_URL).mock(
            side_effect=[
                httpx.Response(429, headers={"Retry-After": "7"}),
                httpx.Response(503),
                _ok(),
            ]
        )

        with caplog.at_level(logging.WARNING, logger="gravixlayer"):
            client._request("POST", "chat/completions", body={})

        assert "Rate limit exceeded. Retrying in 7s..." in caplog.text
        assert "Server error: 503. Retrying..." in caplog.text
