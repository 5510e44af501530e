from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MemoryType(str, Enum):
    # Long-term structured knowledge such as preferences and attributes.
    FACTUAL = "factual"
    # Specific past conversations or events.
    EPISODIC = "episodic"
    # Short-term context for the current session.
    WORKING = "working"
    # Generalized knowledge from patterns.
    SEMANTIC = "semantic"


class MemoryResult(BaseModel):
    id: str
    memory: str
    event: str


class MemoryResponse(BaseModel):
    results: List[MemoryResult] = Field(default_factory=list)


class MemoryEntry(BaseModel):
    """
    A stored memory. Bookkeeping such as the owner, type, importance and
    access count lives in ``metadata`` and is exposed as properties.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    memory: str = ""
    hash: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)
    score: Optional[float] = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def user_id(self) -> Optional[str]:
        return self.metadata.get("user_id")

    @property
    def memory_type(self) -> Optional[str]:
        return self.metadata.get("memory_type")

    @property
    def importance_score(self) -> float:
        return self.metadata.get("importance_score") or 0

    @property
    def access_count(self) -> int:
        return self.metadata.get("access_count") or 0


class MemorySearchResponse(BaseModel):
    results: List[MemoryEntry] = Field(default_factory=list)


class MemoryOperationResponse(BaseModel):
    message: str


class MemoryStats(BaseModel):
    total_memories: int = 0
    factual_count: int = 0
    episodic_count: int = 0
    working_count: int = 0
    semantic_count: int = 0
    last_updated: str = ""
