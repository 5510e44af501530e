from . import models
from ._base import ClientConfig, RequestSpec
from ._defaults import VERSION as __version__
from ._normalize import normalize_chat_completion, normalize_completion
from .client import GravixLayer
from .exceptions import (
    GravixLayerAPIError,
    GravixLayerAuthenticationError,
    GravixLayerBadRequestError,
    GravixLayerConnectionError,
    GravixLayerError,
    GravixLayerRateLimitError,
    GravixLayerServerError,
    GravixLayerStreamingError,
)
from .models import (
    ChatCompletion,
    ChatCompletionChunk,
    ChatCompletionMessage,
    Completion,
    EmbeddingResponse,
)
from .sandbox import Execution, Sandbox
from .streaming import (
    AsyncStream,
    Stream,
    StreamDecoder,
    aiter_stream,
    iter_stream,
)

__all__ = [
    "__version__",
    "AsyncStream",
    "models",
    "ChatCompletion",
    "ChatCompletionChunk",
    "ChatCompletionMessage",
    "ClientConfig",
    "Completion",
    "EmbeddingResponse",
    "Execution",
    "GravixLayer",
    "GravixLayerAPIError",
    "GravixLayerAuthenticationError",
    "GravixLayerBadRequestError",
    "GravixLayerConnectionError",
    "GravixLayerError",
    "GravixLayerRateLimitError",
    "GravixLayerServerError",
    "GravixLayerStreamingError",
    "RequestSpec",
    "Sandbox",
    "Stream",
    "StreamDecoder",
    "aiter_stream",
    "iter_stream",
    "normalize_chat_completion",
    "normalize_completion",
]
