"""Tests for client configuration and URL resolution."""

import pytest

from gravixlayer import ClientConfig, GravixLayer, _defaults
from gravixlayer._base import join_url

API_KEY = "test-key"
HOST = "https://api.gravixlayer.test"
BASE_URL = f"{HOST}/v1/inference"


class TestClientConfig:
    """Tests for ClientConfig.create validation and defaults."""

    def test_defaults(self):
        """Unset options take the documented defaults."""
        config = ClientConfig.create(api_key=API_KEY, base_url=BASE_URL)
        assert config.timeout == 60.0
        assert config.max_retries == 3
        assert config.user_agent.startswith("gravixlayer-python/")
        assert config.headers == {}

    def test_missing_api_key(self, monkeypatch):
        """A missing API key is rejected with a hint about the env variable."""
        monkeypatch.setattr(_defaults, "API_KEY", None)
        with pytest.raises(ValueError) as exc_info:
            ClientConfig.create(base_url=BASE_URL)
        assert "GRAVIXLAYER_API_KEY" in str(exc_info.value)

    def test_api_key_from_environment(self, monkeypatch):
        """The environment default is used when no key is passed."""
        monkeypatch.setattr(_defaults, "API_KEY", "env-key")
        assert ClientConfig.create(base_url=BASE_URL).api_key == "env-key"

    def test_rejects_non_http_base_url(self):
        """Only http and https base URLs are accepted."""
        with pytest.raises(ValueError, match="HTTP or HTTPS"):
            ClientConfig.create(api_key=API_KEY, base_url="ftp://example.com")

    def test_zero_retries_is_kept(self):
        """max_retries=0 disables retries instead of falling back to the default."""
        config = ClientConfig.create(api_key=API_KEY, base_url=BASE_URL, max_retries=0)
        assert config.max_retries == 0

    def test_config_is_read_only(self):
        """Config cannot be mutated after creation."""
        config = ClientConfig.create(api_key=API_KEY, base_url=BASE_URL)
        with pytest.raises(AttributeError):
            config.base_url = "https://other"

    @pytest.mark.parametrize(
        "service, expected",
        [
            ("/v1/files", f"{HOST}/v1/files"),
            ("/v1/deployments", f"{HOST}/v1/deployments"),
            ("/v1", f"{HOST}/v1"),
            ("/v1/agents", f"{HOST}/v1/agents"),
        ],
    )
    def test_service_url(self, service, expected):
        """Sibling services are derived from the inference base URL."""
        config = ClientConfig.create(api_key=API_KEY, base_url=BASE_URL)
        assert config.service_url(service) == expected
        assert config.base_url == BASE_URL


class TestJoinURL:
    """Tests for endpoint URL joining."""

    def test_leading_slash(self):
        assert join_url("https://x/v1", "/chat") == "https://x/v1/chat"

    def test_trailing_slash_on_base(self):
        assert join_url("https://x/v1/", "chat") == "https://x/v1/chat"

    def test_absolute_endpoint_passes_through(self):
        url = "https://other.host/v1/files/abc"
        assert join_url("https://x/v1", url) == url

    def test_empty_endpoint(self):
        assert join_url("https://x/v1", "") == "https://x/v1"


class TestGravixLayerClient:
    """Tests for the top-level client object."""

    def test_resources_are_wired(self, client):
        """Every resource is reachable from the client."""
        assert client.chat.completions is not None
        assert client.vectors.indexes is not None
        assert client.sandbox.sandboxes is not None
        assert client.sandbox.templates is not None

    def test_context_manager(self):
        """The client closes its HTTP session on exit."""
        with GravixLayer(api_key=API_KEY, base_url=BASE_URL) as c:
            assert c.api_key == API_KEY
        assert c._client.is_closed

    def test_organization_and_project_are_stored(self):
        c = GravixLayer(
            api_key=API_KEY, base_url=BASE_URL, organization="org", project="proj"
        )
        assert c.config.organization == "org"
        assert c.config.project == "proj"
        c.close()
