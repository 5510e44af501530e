"""Shared configuration defaults for the GravixLayer SDK."""

import os

# Environment-derived defaults. These are read once at import time and
# used as parameter defaults throughout the SDK.

API_KEY: str | None = os.getenv("GRAVIXLAYER_API_KEY")
BASE_URL: str = os.getenv(
    "GRAVIXLAYER_BASE_URL", "https://api.gravixlayer.com/v1/inference"
)

VERSION: str = "0.1.0"
USER_AGENT: str = f"gravixlayer-python/{VERSION}"

# Chat completions on large models can take a while before the first byte.
DEFAULT_TIMEOUT_SEC: float = 60.0

# Retry configuration for transient errors (connection failures, 429/502/503/504).
MAX_RETRIES: int = 3
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({502, 503, 504})

# Path segment of the inference API that sibling services are derived from.
INFERENCE_SEGMENT: str = "/v1/inference"
