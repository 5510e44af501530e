from .accelerators import Accelerator
from .chat import (
    ChatCompletion,
    ChatCompletionChoice,
    ChatCompletionChunk,
    ChatCompletionDelta,
    ChatCompletionMessage,
    ChatCompletionUsage,
    FunctionCall,
    ToolCall,
)
from .completions import Completion, CompletionChoice, CompletionUsage
from .deployments import Deployment, DeploymentResponse
from .embeddings import EmbeddingObject, EmbeddingResponse, EmbeddingUsage
from .files import (
    FileDeleteResponse,
    FileListResponse,
    FileObject,
    FilePurpose,
    FileUploadResponse,
)
from .memory import (
    MemoryEntry,
    MemoryOperationResponse,
    MemoryResponse,
    MemoryResult,
    MemorySearchResponse,
    MemoryStats,
    MemoryType,
)
from .sandbox import (
    CodeContext,
    CodeContextDeleteResponse,
    CodeRunResponse,
    CommandRunResponse,
    DirectoryCreateResponse,
    FileInfo,
    FileReadResponse,
    FileWriteResponse,
    SandboxFileDeleteResponse,
    SandboxFileListResponse,
    SandboxFileUploadResponse,
    SandboxHostURL,
    SandboxInfo,
    SandboxKillResponse,
    SandboxList,
    SandboxMetrics,
    SandboxTimeoutResponse,
    Template,
    TemplateList,
)
from .vectors import (
    BatchUpsertResponse,
    IndexType,
    TextSearchResponse,
    TextVector,
    Vector,
    VectorDictResponse,
    VectorIndex,
    VectorIndexList,
    VectorListResponse,
    VectorMetric,
    VectorSearchHit,
    VectorSearchResponse,
    VectorType,
)

__all__ = [
    # Chat
    "ChatCompletion",
    "ChatCompletionChunk",
    "ChatCompletionChoice",
    "ChatCompletionDelta",
    "ChatCompletionMessage",
    "ChatCompletionUsage",
    "FunctionCall",
    "ToolCall",
    # Completions
    "Completion",
    "CompletionChoice",
    "CompletionUsage",
    # Embeddings
    "EmbeddingObject",
    "EmbeddingResponse",
    "EmbeddingUsage",
    # Files
    "FileDeleteResponse",
    "FileListResponse",
    "FileObject",
    "FilePurpose",
    "FileUploadResponse",
    # Deployments
    "Accelerator",
    "Deployment",
    "DeploymentResponse",
    # Vectors
    "BatchUpsertResponse",
    "IndexType",
    "TextSearchResponse",
    "TextVector",
    "Vector",
    "VectorDictResponse",
    "VectorIndex",
    "VectorIndexList",
    "VectorListResponse",
    "VectorMetric",
    "VectorSearchHit",
    "VectorSearchResponse",
    "VectorType",
    # Memory
    "MemoryEntry",
    "MemoryOperationResponse",
    "MemoryResponse",
    "MemoryResult",
    "MemorySearchResponse",
    "MemoryStats",
    "MemoryType",
    # Sandboxes
    "CodeContext",
    "CodeContextDeleteResponse",
    "CodeRunResponse",
    "CommandRunResponse",
    "DirectoryCreateResponse",
    "FileInfo",
    "FileReadResponse",
    "FileWriteResponse",
    "SandboxFileDeleteResponse",
    "SandboxFileListResponse",
    "SandboxFileUploadResponse",
    "SandboxHostURL",
    "SandboxInfo",
    "SandboxKillResponse",
    "SandboxList",
    "SandboxMetrics",
    "SandboxTimeoutResponse",
    "Template",
    "TemplateList",
]
