"""
Long-term memory for users, stored as text vectors in a shared vector index.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Union

from ..exceptions import GravixLayerError
from ..models.memory import (
    MemoryEntry,
    MemoryOperationResponse,
    MemoryResponse,
    MemoryResult,
    MemorySearchResponse,
    MemoryStats,
    MemoryType,
)
from ..models.vectors import VectorMetric, VectorType
from .vectors import MAX_TOP_K, VectorDatabase, Vectors, _now_iso, _value

if TYPE_CHECKING:
    from .._base import _BaseClient

logger = logging.getLogger("gravixlayer")

DEFAULT_EMBEDDING_MODEL = "baai/bge-large-en-v1.5"
DEFAULT_INFERENCE_MODEL = "mistralai/mistral-nemo-instruct-2407"
DEFAULT_INDEX_NAME = "gravixlayer_memories"
DEFAULT_CLOUD_PROVIDER = "AWS"
DEFAULT_REGION = "us-east-1"

EMBEDDING_DIMENSIONS = {
    # The server maps this model to baai/bge-large-en-v1.5.
    "microsoft/multilingual-e5-large": 1024,
    "multilingual-e5-large": 1024,
    "baai/bge-large-en-v1.5": 1024,
    "baai/bge-base-en-v1.5": 768,
    "baai/bge-small-en-v1.5": 384,
    "nomic-ai/nomic-embed-text:v1.5": 768,
    "all-MiniLM-L6-v2": 384,
    "all-mpnet-base-v2": 768,
}
DEFAULT_DIMENSION = 1024

# Metadata ``type`` marking an index created by this module.
MEMORY_INDEX_TYPE = "unified_memory_store"

# Working memories older than this are removed by ``cleanup_working_memory``.
WORKING_MEMORY_TTL = timedelta(hours=2)

_SORT_KEYS = ("created_at", "updated_at", "importance_score", "access_count")

Message = Mapping[str, Any]


def embedding_dimension(model: str) -> int:
    return EMBEDDING_DIMENSIONS.get(model, DEFAULT_DIMENSION)


def _parse_time(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _entry(
    vector_id: str, metadata: Optional[Dict[str, Any]], score: Optional[float] = None
) -> MemoryEntry:
    metadata = metadata or {}
    now = _now_iso()
    return MemoryEntry(
        id=vector_id,
        memory=metadata.get("content") or "",
        hash=metadata.get("hash") or "",
        metadata=metadata,
        score=score,
        created_at=metadata.get("created_at") or now,
        updated_at=metadata.get("updated_at") or now,
    )


def _infer_memories(conversation: str) -> List[str]:
    """
    Pick the user's stated preferences out of a ``role: content`` transcript.
    """
    memories = []
    for line in conversation.split("\n"):
        if "user:" in line and ("prefer" in line or "like" in line):
            memories.append(line.replace("user:", "").strip())
    return memories or ["User engaged in conversation"]


class Memory:
    """
    Per-user memory store on top of the vector database.

    Every memory is a text vector whose metadata records the owning
    ``user_id``, its ``memory_type`` and bookkeeping such as
    ``importance_score`` and ``access_count``. Reads only ever return
    memories owned by the requesting user. The backing index is looked up
    by name and created on first use.

    Example:
        >>> client.memory.add("I prefer window seats", user_id="alice")
        >>> client.memory.search("seating", user_id="alice").results
    """

    def __init__(
        self,
        client: "_BaseClient",
        embedding_model: str = DEFAULT_EMBEDDING_MODEL,
        inference_model: str = DEFAULT_INFERENCE_MODEL,
        index_name: str = DEFAULT_INDEX_NAME,
        cloud_provider: str = DEFAULT_CLOUD_PROVIDER,
        region: str = DEFAULT_REGION,
        delete_protection: bool = False,
    ):
        self._vectors = VectorDatabase(client)
        self._embedding_model = embedding_model
        self._inference_model = inference_model
        self._index_name = index_name
        self._cloud_config = {
            "cloud_provider": cloud_provider,
            "region": region,
            "index_type": "serverless",
        }
        self._dimension = embedding_dimension(embedding_model)
        self._delete_protection = delete_protection
        self._index_cache: Dict[str, str] = {}

    def add(
        self,
        messages: Union[str, List[Message]],
        user_id: str,
        metadata: Optional[Dict[str, Any]] = None,
        infer: bool = True,
        embedding_model: Optional[str] = None,
        index_name: Optional[str] = None,
    ) -> MemoryResponse:
        """
        Store a memory for ``user_id``.

        Args:
            messages: The memory text, or a conversation as a list of
                ``{"role", "content"}`` messages.
            infer: For conversations, store the user's stated preferences
                instead of every message.
            metadata: Extra metadata merged into each stored memory.

        Raises:
            GravixLayerError: If the memory index cannot be found or created,
                or the upsert fails.
        """
        if not isinstance(messages, str):
            return self._add_from_messages(
                messages, user_id, metadata, infer, embedding_model, index_name
            )

        model = embedding_model or self._embedding_model
        target_index = index_name or self._index_name
        vectors = self._index(target_index)

        memory_id = str(uuid.uuid4())
        now = _now_iso()
        memory_metadata = {
            "user_id": user_id,
            "memory_type": MemoryType.FACTUAL.value,
            "content": messages,
            "embedding_model": model,
            "index_name": target_index,
            "created_at": now,
            "updated_at": now,
            "importance_score": 1.0,
            "access_count": 0,
            **(metadata or {}),
        }
        vectors.upsert_text(messages, model, memory_id, memory_metadata)

        return MemoryResponse(
            results=[MemoryResult(id=memory_id, memory=messages, event="ADD")]
        )

    def _add_from_messages(
        self,
        messages: List[Message],
        user_id: str,
        metadata: Optional[Dict[str, Any]],
        infer: bool,
        embedding_model: Optional[str],
        index_name: Optional[str],
    ) -> MemoryResponse:
        if infer:
            conversation = "\n".join(
                f"{m.get('role')}: {m.get('content')}" for m in messages
            )
            contents = _infer_memories(conversation)
        else:
            contents = [m["content"] for m in messages if m.get("content")]

        results = []
        for content in contents:
            response = self.add(
                content,
                user_id,
                metadata=metadata,
                embedding_model=embedding_model,
                index_name=index_name,
            )
            results.extend(response.results)
        return MemoryResponse(results=results)

    def search(
        self,
        query: str,
        user_id: str,
        limit: int = 100,
        threshold: float = 0.3,
        embedding_model: Optional[str] = None,
        index_name: Optional[str] = None,
    ) -> MemorySearchResponse:
        """
        Semantic search over the memories of ``user_id``.

        Hits scoring below ``threshold`` are dropped unless ``threshold`` is
        zero or less, or ``query`` is blank. ``limit`` is clamped to
        1..1000. Each returned memory has its access count incremented.
        A failed search is logged and returns no results.
        """
        limit = max(1, min(MAX_TOP_K, limit))
        blank = not query.strip()

        try:
            vectors = self._index(index_name or self._index_name)
            response = vectors.search_text(
                query.strip() or "the",
                embedding_model or self._embedding_model,
                limit,
                {"user_id": user_id},
                include_metadata=True,
                include_values=False,
            )
        except GravixLayerError as e:
            logger.error("Memory search failed: %s", e)
            return MemorySearchResponse()

        results = []
        for hit in response.hits:
            metadata = hit.metadata or {}
            # The index is shared, so never trust the server-side filter alone.
            if metadata.get("user_id") != user_id:
                continue
            if threshold <= 0 or blank or hit.score >= threshold:
                self._increment_access_count(vectors, hit.id)
                results.append(_entry(hit.id, metadata, hit.score))
        return MemorySearchResponse(results=results)

    def get_all(
        self, user_id: str, limit: int = 100, index_name: Optional[str] = None
    ) -> MemorySearchResponse:
        return self.search(
            "memory", user_id, limit=limit, threshold=0.0, index_name=index_name
        )

    def get(
        self, memory_id: str, user_id: str, index_name: Optional[str] = None
    ) -> Optional[MemoryEntry]:
        """
        Fetch one memory. Returns ``None`` if it does not exist or belongs to
        another user.
        """
        try:
            vectors = self._index(index_name or self._index_name)
            vector = vectors.get(memory_id)
        except GravixLayerError as e:
            logger.debug("Could not read memory %s: %s", memory_id, e)
            return None

        if (vector.metadata or {}).get("user_id") != user_id:
            return None
        return _entry(vector.id, vector.metadata)

    def update(
        self,
        memory_id: str,
        user_id: str,
        data: str,
        metadata: Optional[Dict[str, Any]] = None,
        importance_score: Optional[float] = None,
        embedding_model: Optional[str] = None,
        index_name: Optional[str] = None,
    ) -> MemoryOperationResponse:
        """
        Replace the text of a memory and re-embed it. Existing metadata is
        kept unless overridden.
        """
        failed = MemoryOperationResponse(
            message=f"Memory {memory_id} not found or update failed."
        )
        current = self.get(memory_id, user_id, index_name=index_name)
        if current is None:
            return failed

        model = embedding_model or self._embedding_model
        updated = {
            **current.metadata,
            "content": data,
            "updated_at": _now_iso(),
            "embedding_model": model,
            **(metadata or {}),
        }
        if importance_score is not None:
            updated["importance_score"] = importance_score

        try:
            vectors = self._index(index_name or self._index_name)
            vectors.upsert_text(data, model, memory_id, updated)
        except GravixLayerError as e:
            logger.error("Failed to update memory %s: %s", memory_id, e)
            return failed
        return MemoryOperationResponse(
            message=f"Memory {memory_id} updated successfully!"
        )

    def delete(
        self, memory_id: str, user_id: str, index_name: Optional[str] = None
    ) -> MemoryOperationResponse:
        """
        Delete a memory owned by ``user_id``.
        """
        if self._delete(memory_id, user_id, index_name):
            return MemoryOperationResponse(
                message=f"Memory {memory_id} deleted successfully!"
            )
        return MemoryOperationResponse(
            message=f"Memory {memory_id} not found or deletion failed."
        )

    def _delete(
        self, memory_id: str, user_id: str, index_name: Optional[str] = None
    ) -> bool:
        if self.get(memory_id, user_id, index_name=index_name) is None:
            return False
        try:
            self._index(index_name or self._index_name).delete(memory_id)
        except GravixLayerError as e:
            logger.error("Failed to delete memory %s: %s", memory_id, e)
            return False
        return True

    def switch_configuration(
        self,
        embedding_model: Optional[str] = None,
        inference_model: Optional[str] = None,
        index_name: Optional[str] = None,
        cloud_provider: Optional[str] = None,
        region: Optional[str] = None,
    ) -> None:
        """
        Change the defaults used by later calls. Switching the embedding
        model also switches the dimension used for new indexes.
        """
        if embedding_model:
            self._embedding_model = embedding_model
            self._dimension = embedding_dimension(embedding_model)
            logger.info(
                "Switched embedding model to %s (dimension %d)",
                embedding_model,
                self._dimension,
            )
        if inference_model:
            self._inference_model = inference_model
            logger.info("Switched inference model to %s", inference_model)
        if index_name:
            self._index_name = index_name
            logger.info("Switched memory index to %s", index_name)
        if cloud_provider or region:
            self._cloud_config = {
                "cloud_provider": cloud_provider
                or self._cloud_config["cloud_provider"],
                "region": region or self._cloud_config["region"],
                "index_type": "serverless",
            }
            logger.info("Switched cloud config to %s", self._cloud_config)

    def get_current_configuration(self) -> Dict[str, Any]:
        return {
            "embedding_model": self._embedding_model,
            "inference_model": self._inference_model,
            "index_name": self._index_name,
            "cloud_config": dict(self._cloud_config),
            "embedding_dimension": self._dimension,
        }

    def switch_index(self, index_name: str) -> bool:
        """
        Make ``index_name`` the default index, creating it if needed.
        Returns ``False`` if the index cannot be found or created.
        """
        try:
            index_id = self._ensure_index(index_name)
        except GravixLayerError as e:
            logger.error("Failed to switch to memory index %r: %s", index_name, e)
            return False
        self._index_name = index_name
        logger.info("Switched to memory index %s (ID: %s)", index_name, index_id)
        return True

    def list_available_indexes(self) -> List[str]:
        try:
            indexes = self._vectors.indexes.list().indexes
        except GravixLayerError as e:
            logger.error("Error listing indexes: %s", e)
            return [DEFAULT_INDEX_NAME]
        return sorted({index.name for index in indexes})

    def get_memories_by_type(
        self,
        user_id: str,
        memory_type: Union[str, MemoryType],
        limit: int = 100,
    ) -> List[MemoryEntry]:
        memory_type = _value(memory_type)
        memories = self.get_all(user_id, limit=MAX_TOP_K).results
        return [m for m in memories if m.memory_type == memory_type][:limit]

    def cleanup_working_memory(self, user_id: str) -> int:
        """
        Delete working memories of ``user_id`` created more than two hours
        ago. Returns the number deleted.
        """
        cutoff = datetime.now(timezone.utc) - WORKING_MEMORY_TTL
        cleaned = 0
        for memory in self.get_memories_by_type(
            user_id, MemoryType.WORKING, MAX_TOP_K
        ):
            created_at = _parse_time(memory.metadata.get("created_at"))
            if created_at is None or created_at >= cutoff:
                continue
            if self._delete(memory.id, user_id):
                cleaned += 1
            else:
                logger.warning("Failed to delete expired memory %s", memory.id)
        return cleaned

    def list_all_memories(
        self,
        user_id: str,
        limit: int = 100,
        sort_by: str = "created_at",
        ascending: bool = False,
    ) -> List[MemoryEntry]:
        """
        All memories of ``user_id``, sorted by ``sort_by``: one of
        ``created_at``, ``updated_at``, ``importance_score`` or
        ``access_count``. Any other value keeps search order.
        """
        memories = self.get_all(user_id, limit=limit).results
        if sort_by not in _SORT_KEYS:
            return memories

        if sort_by in ("created_at", "updated_at"):
            epoch = datetime.fromtimestamp(0, timezone.utc)

            def key(m: MemoryEntry) -> Any:
                return _parse_time(getattr(m, sort_by)) or epoch

        else:

            def key(m: MemoryEntry) -> Any:
                return getattr(m, sort_by)

        return sorted(memories, key=key, reverse=not ascending)

    def get_stats(self, user_id: str) -> MemoryStats:
        memories = self.get_all(user_id, limit=MAX_TOP_K).results
        counts = {t.value: 0 for t in MemoryType}
        last_updated = datetime.fromtimestamp(0, timezone.utc).isoformat()
        for memory in memories:
            if memory.memory_type in counts:
                counts[memory.memory_type] += 1
            if memory.updated_at > last_updated:
                last_updated = memory.updated_at

        return MemoryStats(
            total_memories=len(memories),
            factual_count=counts[MemoryType.FACTUAL.value],
            episodic_count=counts[MemoryType.EPISODIC.value],
            working_count=counts[MemoryType.WORKING.value],
            semantic_count=counts[MemoryType.SEMANTIC.value],
            last_updated=last_updated,
        )

    def list_all_users(self, limit: int = MAX_TOP_K) -> List[str]:
        """
        Ids of every user with memories in the current index. Scans up to
        ``limit`` memories.
        """
        try:
            vectors = self._index(self._index_name)
            response = vectors.search_text(
                "user",
                self._embedding_model,
                limit,
                include_metadata=True,
                include_values=False,
            )
        except GravixLayerError as e:
            logger.error("Error listing users: %s", e)
            return []

        users = {(hit.metadata or {}).get("user_id") for hit in response.hits}
        return sorted(user for user in users if user)

    def _index(self, index_name: str) -> Vectors:
        return self._vectors.index(self._ensure_index(index_name))

    def _ensure_index(self, index_name: str) -> str:
        """
        Id of the index named ``index_name``, creating it on first use.

        Raises:
            GravixLayerError: If the index cannot be listed or created.
        """
        if index_name in self._index_cache:
            return self._index_cache[index_name]

        try:
            for index in self._vectors.indexes.list().indexes:
                if index.name == index_name:
                    self._index_cache[index_name] = index.id
                    return index.id

            logger.info(
                "Creating memory index %s (model %s, dimension %d)",
                index_name,
                self._embedding_model,
                self._dimension,
            )
            index = self._vectors.indexes.create(
                name=index_name,
                dimension=self._dimension,
                metric=VectorMetric.COSINE,
                vector_type=VectorType.DENSE,
                metadata={
                    "type": MEMORY_INDEX_TYPE,
                    "embedding_model": self._embedding_model,
                    "dimension": self._dimension,
                    "created_at": _now_iso(),
                    "description": f"Unified memory store: {index_name}",
                    "cloud_config": dict(self._cloud_config),
                },
                delete_protection=self._delete_protection,
                **self._cloud_config,
            )
        except GravixLayerError as e:
            raise GravixLayerError(
                f"Failed to create memory index '{index_name}': {e}"
            ) from e

        self._index_cache[index_name] = index.id
        return index.id

    def _increment_access_count(self, vectors: Vectors, memory_id: str) -> None:
        try:
            vector = vectors.get(memory_id)
            metadata = dict(vector.metadata or {})
            metadata["access_count"] = (metadata.get("access_count") or 0) + 1
            metadata["updated_at"] = _now_iso()
            vectors.update(memory_id, metadata=metadata)
        except GravixLayerError as e:
            logger.debug("Could not update access count of %s: %s", memory_id, e)
