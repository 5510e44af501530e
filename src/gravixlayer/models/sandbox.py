"""Pydantic models for sandbox operations."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SandboxInfo(BaseModel):
    """State of a sandbox as reported by the agents API."""

    model_config = ConfigDict(extra="allow")

    sandbox_id: str
    status: str
    template: Optional[str] = None
    template_id: Optional[str] = None
    started_at: Optional[str] = None
    timeout_at: Optional[str] = None
    cpu_count: Optional[float] = None
    memory_mb: Optional[int] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    ended_at: Optional[str] = None


class SandboxList(BaseModel):
    sandboxes: List[SandboxInfo] = Field(default_factory=list)
    total: int = 0


class SandboxMetrics(BaseModel):
    timestamp: str = ""
    cpu_usage: float = 0
    memory_usage: float = 0
    memory_total: float = 0
    disk_read: int = 0
    disk_write: int = 0
    network_rx: int = 0
    network_tx: int = 0


class SandboxTimeoutResponse(BaseModel):
    message: str = ""
    timeout: Optional[int] = None
    timeout_at: Optional[str] = None


class SandboxHostURL(BaseModel):
    url: str


class SandboxKillResponse(BaseModel):
    message: str = ""
    sandbox_id: Optional[str] = None


class FileReadResponse(BaseModel):
    content: str
    path: Optional[str] = None
    size: Optional[int] = None


class FileWriteResponse(BaseModel):
    message: str = ""
    path: Optional[str] = None
    bytes_written: Optional[int] = None


class FileInfo(BaseModel):
    name: str = ""
    path: str = ""
    size: int = 0
    is_dir: bool = False
    modified_at: str = ""
    mode: Optional[str] = None


class SandboxFileListResponse(BaseModel):
    files: List[FileInfo] = Field(default_factory=list)


class SandboxFileDeleteResponse(BaseModel):
    message: str = ""
    path: Optional[str] = None


class DirectoryCreateResponse(BaseModel):
    message: str = ""
    path: Optional[str] = None


class SandboxFileUploadResponse(BaseModel):
    message: str = ""
    path: Optional[str] = None
    size: Optional[int] = None


class CommandRunResponse(BaseModel):
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    duration_ms: float = 0
    success: bool = True
    error: Optional[str] = None


class CodeRunResponse(BaseModel):
    execution_id: Optional[str] = None
    results: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[Union[str, Dict[str, Any]]] = None
    logs: Dict[str, List[str]] = Field(
        default_factory=lambda: {"stdout": [], "stderr": []}
    )


class CodeContext(BaseModel):
    context_id: str = ""
    language: str = "python"
    cwd: str = "/home/user"
    created_at: Optional[str] = None
    expires_at: Optional[str] = None
    status: Optional[str] = None
    last_used: Optional[str] = None


class CodeContextDeleteResponse(BaseModel):
    message: str = ""
    context_id: Optional[str] = None


class Template(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    description: str = ""
    vcpu_count: int = 0
    memory_mb: int = 0
    disk_size_mb: int = 0
    visibility: str = ""
    created_at: str = ""
    updated_at: str = ""


class TemplateList(BaseModel):
    templates: List[Template] = Field(default_factory=list)
    limit: int = 0
    offset: int = 0
