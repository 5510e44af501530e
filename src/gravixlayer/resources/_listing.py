import logging
from typing import Any, List

logger = logging.getLogger("gravixlayer")


def _rows(data: Any, key: str) -> List[dict]:
    """
    Accept a bare list, ``{key: [...]}`` or ``{}``. Anything else is logged
    and treated as empty.
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get(key), list):
        return data[key]
    if isinstance(data, dict) and not data:
        return []
    logger.warning(
        "Unexpected response format: %s, content: %r", type(data).__name__, data
    )
    return []
