from __future__ import annotations

from typing import Mapping, Optional

from ._base import ClientConfig, _BaseClient
from .resources import (
    Accelerators,
    ChatResource,
    Completions,
    Deployments,
    Embeddings,
    Files,
    Memory,
    SandboxResource,
    VectorDatabase,
)


class GravixLayer(_BaseClient):
    """
    Client for the GravixLayer API.

    Resources are exposed as attributes, e.g. ``client.chat.completions``,
    ``client.files``, ``client.vectors.index(index_id)`` or ``client.memory``.
    Every call goes through one shared retrying dispatcher.

    Example:
        >>> with GravixLayer() as client:
        ...     reply = client.chat.completions.create(
        ...         model="meta-llama/llama-3.1-8b-instruct",
        ...         messages=[{"role": "user", "content": "Hello"}],
        ...     )
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        headers: Optional[Mapping[str, str]] = None,
        user_agent: Optional[str] = None,
        organization: Optional[str] = None,
        project: Optional[str] = None,
    ):
        """
        Args:
            api_key: API key. Falls back to ``GRAVIXLAYER_API_KEY``.
            base_url: Inference API root. Falls back to ``GRAVIXLAYER_BASE_URL``.
            timeout: Per-request timeout in seconds.
            max_retries: Retries after the first attempt for transient failures.
            headers: Extra headers sent with every request.
            user_agent: Overrides the default ``User-Agent``.

        Raises:
            ValueError: If no API key is available or the base URL is not HTTP(S).
        """
        super().__init__(
            ClientConfig.create(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=max_retries,
                headers=headers,
                user_agent=user_agent,
                organization=organization,
                project=project,
            )
        )

        self.chat = ChatResource(self)
        self.completions = Completions(self)
        self.embeddings = Embeddings(self)
        self.files = Files(self)
        self.deployments = Deployments(self)
        self.accelerators = Accelerators(self)
        self.vectors = VectorDatabase(self)
        self.memory = Memory(self)
        self.sandbox = SandboxResource(self)

    @property
    def api_key(self) -> str:
        return self.config.api_key

    @property
    def base_url(self) -> str:
        return self.config.base_url
