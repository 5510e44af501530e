"""
Embeddings (``POST embeddings``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from .._utils import _drop_none
from ..models.embeddings import EmbeddingObject, EmbeddingResponse, EmbeddingUsage

if TYPE_CHECKING:
    from .._base import _BaseClient


def _parse_embeddings(data: Dict[str, Any]) -> EmbeddingResponse:
    items = []
    raw_items = data.get("data")
    if isinstance(raw_items, list):
        for position, item in enumerate(raw_items):
            items.append(
                EmbeddingObject(
                    object=item.get("object") or "embedding",
                    embedding=item.get("embedding") or [],
                    index=item["index"] if item.get("index") is not None else position,
                )
            )

    usage = None
    if isinstance(data.get("usage"), dict):
        usage = EmbeddingUsage(
            prompt_tokens=data["usage"].get("prompt_tokens") or 0,
            total_tokens=data["usage"].get("total_tokens") or 0,
        )

    return EmbeddingResponse(
        object=data.get("object") or "list",
        data=items,
        model=data.get("model") or "",
        usage=usage,
    )


class Embeddings:
    def __init__(self, client: "_BaseClient"):
        self._client = client

    @staticmethod
    def _body(model, input, encoding_format, dimensions, user) -> Dict[str, Any]:
        return _drop_none(
            {
                "model": model,
                "input": input,
                "encoding_format": encoding_format or None,
                "dimensions": dimensions or None,
                "user": user or None,
            }
        )

    def create(
        self,
        model: str,
        input: Union[str, List[str]],
        encoding_format: Optional[str] = None,
        dimensions: Optional[int] = None,
        user: Optional[str] = None,
    ) -> EmbeddingResponse:
        """
        Embed one string or a list of strings.

        Args:
            model: Embedding model identifier.
            input: Text(s) to embed.
            encoding_format: Optional wire encoding, e.g. ``"float"``.
            dimensions: Optional output dimensionality.
        """
        body = self._body(model, input, encoding_format, dimensions, user)
        response = self._client._request("POST", "embeddings", body=body)
        return _parse_embeddings(response.json())

    async def create_async(
        self,
        model: str,
        input: Union[str, List[str]],
        encoding_format: Optional[str] = None,
        dimensions: Optional[int] = None,
        user: Optional[str] = None,
    ) -> EmbeddingResponse:
        body = self._body(model, input, encoding_format, dimensions, user)
        response = await self._client._arequest("POST", "embeddings", body=body)
        return _parse_embeddings(response.json())
