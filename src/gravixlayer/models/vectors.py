from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class VectorMetric(str, Enum):
    COSINE = "cosine"
    EUCLIDEAN = "euclidean"
    DOT_PRODUCT = "dot_product"


class VectorType(str, Enum):
    DENSE = "dense"


class IndexType(str, Enum):
    SERVERLESS = "serverless"
    DEDICATED = "dedicated"


class VectorIndex(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    dimension: int
    metric: str
    vector_type: str = "dense"
    delete_protection: bool = False
    cloud_provider: Optional[str] = None
    region: Optional[str] = None
    index_type: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    status: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class VectorIndexList(BaseModel):
    indexes: List[VectorIndex] = Field(default_factory=list)
    pagination: Dict[str, Any] = Field(default_factory=dict)


class Vector(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    embedding: List[float] = Field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None
    delete_protection: Optional[bool] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TextVector(Vector):
    text: str
    model: str
    usage: Dict[str, int] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow", protected_namespaces=())


class VectorSearchHit(BaseModel):
    id: str
    score: float
    values: Optional[List[float]] = None
    metadata: Optional[Dict[str, Any]] = None


class VectorSearchResponse(BaseModel):
    hits: List[VectorSearchHit] = Field(default_factory=list)
    query_time_ms: float = 0


class TextSearchResponse(VectorSearchResponse):
    usage: Dict[str, int] = Field(default_factory=dict)


class BatchUpsertResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    upserted_count: int = 0
    failed_count: int = 0
    errors: List[str] = Field(default_factory=list)
    usage: Optional[Dict[str, int]] = None


class VectorListResponse(BaseModel):
    vectors: List[Dict[str, str]] = Field(default_factory=list)


class VectorDictResponse(BaseModel):
    vectors: Dict[str, Vector] = Field(default_factory=dict)
