from typing import List, Optional

from pydantic import BaseModel, Field


class EmbeddingObject(BaseModel):
    object: str = "embedding"
    embedding: List[float] = Field(default_factory=list)
    index: int


class EmbeddingUsage(BaseModel):
    prompt_tokens: int = 0
    total_tokens: int = 0


class EmbeddingResponse(BaseModel):
    object: str = "list"
    data: List[EmbeddingObject] = Field(default_factory=list)
    model: str = ""
    usage: Optional[EmbeddingUsage] = None
