"""
Vector database: index management (``/v1/vector-db``) and per-index vector
operations (``/v1/vectors/<index_id>``).
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from .._utils import _drop_none
from ..exceptions import GravixLayerBadRequestError, GravixLayerError
from ..models.vectors import (
    BatchUpsertResponse,
    TextSearchResponse,
    TextVector,
    Vector,
    VectorDictResponse,
    VectorIndex,
    VectorIndexList,
    VectorListResponse,
    VectorMetric,
    VectorSearchResponse,
    VectorType,
)

if TYPE_CHECKING:
    from .._base import _BaseClient

logger = logging.getLogger("gravixlayer")

# Newly upserted vectors are not readable immediately.
_INDEXING_DELAY_SEC = 0.1

MAX_TOP_K = 1000


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _value(v: Union[str, VectorMetric, VectorType]) -> str:
    return v.value if hasattr(v, "value") else v


def _require_index_id(index_id: str) -> None:
    if not index_id:
        raise GravixLayerBadRequestError("Index ID is required")


def _check_top_k(top_k: int) -> None:
    if not 1 <= top_k <= MAX_TOP_K:
        raise GravixLayerBadRequestError(f"top_k must be between 1 and {MAX_TOP_K}")


def _first_upserted_id(result: Dict[str, Any], kind: str) -> str:
    ids = result.get("ids") or []
    if ids and (result.get("count") or 0) > 0:
        return ids[0]
    if result.get("error"):
        raise GravixLayerError(f"{kind} upsert failed: {result['error']}")
    raise GravixLayerError("Unexpected response format from upsert API")


class VectorIndexes:
    def __init__(self, client: "_BaseClient"):
        self._client = client

    def _url(self, index_id: str = "") -> str:
        root = f"{self._client.config.service_url('/v1/vector-db')}/indexes"
        return f"{root}/{index_id}" if index_id else root

    def create(
        self,
        name: str,
        dimension: int,
        metric: Union[str, VectorMetric],
        vector_type: Union[str, VectorType] = VectorType.DENSE,
        metadata: Optional[Dict[str, Any]] = None,
        delete_protection: bool = False,
        cloud_provider: Optional[str] = None,
        region: Optional[str] = None,
        index_type: Optional[str] = None,
    ) -> VectorIndex:
        """
        Create a vector index.

        Args:
            name: Index name.
            dimension: Length of every vector stored in the index.
            metric: Similarity metric, one of ``VectorMetric``.
            vector_type: Only ``dense`` is supported.

        Raises:
            GravixLayerBadRequestError: If an argument is invalid.
        """
        if not name or not isinstance(name, str):
            raise GravixLayerBadRequestError(
                "Index name is required and must be a string"
            )
        if (
            isinstance(dimension, bool)
            or not isinstance(dimension, int)
            or dimension <= 0
        ):
            raise GravixLayerBadRequestError("Dimension must be a positive integer")

        metric = _value(metric)
        supported_metrics = [m.value for m in VectorMetric]
        if metric not in supported_metrics:
            raise GravixLayerBadRequestError(
                f"Unsupported metric. Supported: {', '.join(supported_metrics)}"
            )

        vector_type = _value(vector_type)
        supported_types = [t.value for t in VectorType]
        if vector_type not in supported_types:
            raise GravixLayerBadRequestError(
                f"Unsupported vector type. Supported: {', '.join(supported_types)}"
            )

        body = _drop_none(
            {
                "name": name,
                "dimension": dimension,
                "metric": metric,
                "vector_type": vector_type,
                "metadata": metadata,
                "delete_protection": delete_protection,
                "cloud_provider": cloud_provider,
                "region": region,
                "index_type": _value(index_type) if index_type else None,
            }
        )
        response = self._client._request("POST", self._url(), body=body)
        return VectorIndex.model_validate(response.json())

    def list(self) -> VectorIndexList:
        response = self._client._request("GET", self._url())
        return VectorIndexList.model_validate(response.json())

    def get(self, index_id: str) -> VectorIndex:
        _require_index_id(index_id)
        response = self._client._request("GET", self._url(index_id))
        return VectorIndex.model_validate(response.json())

    def update(
        self,
        index_id: str,
        metadata: Optional[Dict[str, Any]] = None,
        delete_protection: Optional[bool] = None,
    ) -> VectorIndex:
        _require_index_id(index_id)
        body = _drop_none(
            {"metadata": metadata, "delete_protection": delete_protection}
        )
        response = self._client._request("PATCH", self._url(index_id), body=body)
        return VectorIndex.model_validate(response.json())

    def delete(self, index_id: str) -> Dict[str, Any]:
        _require_index_id(index_id)
        response = self._client._request("DELETE", self._url(index_id))
        return response.json()


class Vectors:
    """
    Vector operations scoped to one index.
    """

    def __init__(self, client: "_BaseClient", index_id: str):
        _require_index_id(index_id)
        self._client = client
        self.index_id = index_id

    def _url(self, path: str) -> str:
        root = self._client.config.service_url(f"/v1/vectors/{self.index_id}")
        return f"{root}/{path}"

    def upsert(
        self,
        embedding: List[float],
        id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        delete_protection: bool = False,
    ) -> Vector:
        """
        Insert or update one vector and return it as stored.

        If the stored vector cannot be read back yet, a record built from
        the arguments is returned instead.
        """
        item = _drop_none(
            {
                "id": id,
                "embedding": embedding,
                "metadata": metadata or {},
                "delete_protection": delete_protection,
            }
        )
        response = self._client._request(
            "POST", self._url("upsert"), body={"vectors": [item]}
        )
        vector_id = _first_upserted_id(response.json(), "Vector")

        time.sleep(_INDEXING_DELAY_SEC)
        try:
            return self.get(vector_id)
        except GravixLayerError as e:
            logger.debug("Could not read back vector %s: %s", vector_id, e)
            now = _now_iso()
            return Vector(
                id=vector_id,
                embedding=embedding,
                metadata=metadata or {},
                delete_protection=delete_protection,
                created_at=now,
                updated_at=now,
            )

    def upsert_text(
        self,
        text: str,
        model: str,
        id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        delete_protection: bool = False,
    ) -> TextVector:
        """
        Embed ``text`` with ``model`` on the server and store the result.
        """
        item = _drop_none(
            {
                "id": id,
                "text": text,
                "model": model,
                "metadata": metadata or {},
                "delete_protection": delete_protection,
            }
        )
        response = self._client._request(
            "POST", self._url("text/upsert"), body={"vectors": [item]}
        )
        result = response.json()
        vector_id = _first_upserted_id(result, "Text vector")
        usage = result.get("usage") or {"prompt_tokens": 0, "total_tokens": 0}

        time.sleep(_INDEXING_DELAY_SEC)
        try:
            stored = self.get(vector_id)
        except GravixLayerError as e:
            logger.debug("Could not read back vector %s: %s", vector_id, e)
            now = _now_iso()
            return TextVector(
                id=vector_id,
                text=text,
                model=model,
                embedding=[],
                metadata=metadata or {},
                delete_protection=delete_protection,
                created_at=now,
                updated_at=now,
                usage=usage,
            )

        return TextVector(
            id=stored.id,
            text=text,
            model=model,
            embedding=stored.embedding,
            metadata=stored.metadata,
            delete_protection=stored.delete_protection,
            created_at=stored.created_at,
            updated_at=stored.updated_at,
            usage=usage,
        )

    def batch_upsert(self, vectors: List[Dict[str, Any]]) -> BatchUpsertResponse:
        response = self._client._request(
            "POST", self._url("batch"), body={"vectors": vectors}
        )
        return BatchUpsertResponse.model_validate(response.json())

    def batch_upsert_text(self, vectors: List[Dict[str, Any]]) -> BatchUpsertResponse:
        response = self._client._request(
            "POST", self._url("text/batch"), body={"vectors": vectors}
        )
        return BatchUpsertResponse.model_validate(response.json())

    def get(self, vector_id: str) -> Vector:
        response = self._client._request("GET", self._url(vector_id))
        return Vector.model_validate(response.json())

    def update(
        self,
        vector_id: str,
        metadata: Optional[Dict[str, Any]] = None,
        delete_protection: Optional[bool] = None,
    ) -> Vector:
        """
        Update the metadata and/or delete protection of a vector.

        Raises:
            GravixLayerBadRequestError: If neither field is given.
        """
        body = _drop_none(
            {"metadata": metadata, "delete_protection": delete_protection}
        )
        if not body:
            raise GravixLayerBadRequestError(
                "At least one field must be provided for update"
            )

        response = self._client._request("PUT", self._url(vector_id), body=body)
        result = response.json()
        # Partial responses omit the embedding.
        if not result.get("embedding"):
            return self.get(vector_id)
        return Vector.model_validate(result)

    def delete(self, vector_id: str) -> None:
        self._client._request(
            "POST", self._url("delete"), body={"vector_ids": [vector_id]}
        )

    def batch_delete(self, vector_ids: List[str]) -> Dict[str, Any]:
        if not vector_ids:
            raise GravixLayerBadRequestError("At least one vector ID must be provided")
        response = self._client._request(
            "POST", self._url("delete"), body={"vector_ids": vector_ids}
        )
        return response.json()

    def list_ids(self) -> VectorListResponse:
        response = self._client._request("GET", self._url("list"))
        return VectorListResponse.model_validate(response.json())

    def list(self, vector_ids: Optional[List[str]] = None) -> VectorDictResponse:
        """
        Fetch vectors, optionally restricted to ``vector_ids``.

        The server returns either an array of vectors or a mapping of id to
        vector; both are returned as a mapping.
        """
        params = {"vector_ids": ",".join(vector_ids)} if vector_ids else None
        response = self._client._request("GET", self._url("fetch"), params=params)
        raw = response.json().get("vectors") or {}

        if isinstance(raw, list):
            items = [(item.get("id"), item) for item in raw]
        else:
            items = list(raw.items())

        vectors = {}
        for vector_id, data in items:
            data = {
                "id": vector_id,
                **data,
                "delete_protection": data.get("delete_protection") or False,
                "created_at": data.get("created_at") or "",
                "updated_at": data.get("updated_at") or "",
            }
            vectors[vector_id] = Vector.model_validate(data)
        return VectorDictResponse(vectors=vectors)

    def search(
        self,
        vector: List[float],
        top_k: int,
        filter: Optional[Dict[str, Any]] = None,
        include_metadata: bool = True,
        include_values: bool = True,
    ) -> VectorSearchResponse:
        """
        Similarity search with a query vector.

        Raises:
            GravixLayerBadRequestError: If ``top_k`` is outside 1..1000.
        """
        _check_top_k(top_k)
        body = _drop_none(
            {
                "vector": vector,
                "top_k": top_k,
                "filter": filter,
                "include_metadata": include_metadata,
                "include_values": include_values,
            }
        )
        response = self._client._request("POST", self._url("search"), body=body)
        result = response.json()
        return VectorSearchResponse(
            hits=result.get("hits") or [],
            query_time_ms=result.get("query_time_ms") or 0,
        )

    def search_text(
        self,
        query: str,
        model: str,
        top_k: int,
        filter: Optional[Dict[str, Any]] = None,
        include_metadata: bool = True,
        include_values: bool = True,
    ) -> TextSearchResponse:
        """
        Similarity search with a text query embedded by ``model``.
        """
        _check_top_k(top_k)
        body = _drop_none(
            {
                "query": query,
                "model": model,
                "top_k": top_k,
                "filter": filter,
                "include_metadata": include_metadata,
                "include_values": include_values,
            }
        )
        response = self._client._request("POST", self._url("search/text"), body=body)
        result = response.json()
        return TextSearchResponse(
            hits=result.get("hits") or [],
            query_time_ms=result.get("query_time_ms") or 0,
            usage=result.get("usage") or {},
        )


class VectorDatabase:
    def __init__(self, client: "_BaseClient"):
        self._client = client
        self.indexes = VectorIndexes(client)

    def index(self, index_id: str) -> Vectors:
        """
        Vector operations for the index ``index_id``.
        """
        return Vectors(self._client, index_id)
