"""Lifecycle, file and execution operations on the agents API (``/v1/agents``)."""

from __future__ import annotations

from pathlib import Path
from typing import (
    IO,
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Optional,
    Type,
    TypeVar,
    Union,
)

from pydantic import BaseModel

from .._utils import _drop_none
from ..models.sandbox import (
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
    TemplateList,
)

if TYPE_CHECKING:
    from .._base import _BaseClient

DEFAULT_TEMPLATE = "python-base-v1"
DEFAULT_SANDBOX_TIMEOUT_SEC = 300
DEFAULT_CONTEXT_LANGUAGE = "python"
DEFAULT_CONTEXT_CWD = "/home/user"

M = TypeVar("M", bound=BaseModel)


def _validate(model: Type[M], data: Dict[str, Any]) -> M:
    # Missing or null fields fall back to the model defaults.
    return model.model_validate(_drop_none(data))


def _code_context(data: Dict[str, Any], **fallback: Any) -> CodeContext:
    return CodeContext(
        context_id=data.get("id") or data.get("context_id") or "",
        language=data.get("language")
        or fallback.get("language")
        or DEFAULT_CONTEXT_LANGUAGE,
        cwd=data.get("cwd") or fallback.get("cwd") or DEFAULT_CONTEXT_CWD,
        created_at=data.get("created_at"),
        expires_at=data.get("expires_at"),
        status=data.get("status"),
        last_used=data.get("last_used"),
    )


class _AgentsResource:
    def __init__(self, client: "_BaseClient"):
        self._client = client

    def _url(self, path: str) -> str:
        return f"{self._client.config.service_url('/v1/agents')}/{path}"

    def _call(self, method: str, path: str, **kw: Any) -> Any:
        return self._client._request(method, self._url(path), **kw).json()


class Sandboxes(_AgentsResource):
    def create(
        self,
        provider: str,
        region: str,
        template: Optional[str] = None,
        timeout: Optional[int] = None,
        env_vars: Optional[Dict[str, str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> SandboxInfo:
        """Create a new sandbox.

        Args:
            provider: Cloud provider, e.g. ``gravix``.
            region: Region to run in, e.g. ``eu-west-1``.
            template: Template to boot from. Defaults to ``python-base-v1``.
            timeout: Lifetime in seconds. Defaults to 300.
            env_vars: Environment variables for the sandbox.
            metadata: Free-form labels stored with the sandbox.

        Returns:
            SandboxInfo of the new sandbox
        """
        template = template or DEFAULT_TEMPLATE
        body = _drop_none(
            {
                "provider": provider,
                "region": region,
                "template": template,
                "timeout": timeout or DEFAULT_SANDBOX_TIMEOUT_SEC,
                "env_vars": env_vars or None,
                "metadata": metadata or None,
            }
        )
        result = self._call("POST", "sandboxes", body=body)
        if not result.get("template"):
            result["template"] = template
        return _validate(SandboxInfo, result)

    def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> SandboxList:
        params = _drop_none({"limit": limit, "offset": offset}) or None
        result = self._call("GET", "sandboxes", params=params)
        return SandboxList(
            sandboxes=[
                _validate(SandboxInfo, s) for s in result.get("sandboxes") or []
            ],
            total=result.get("total") or 0,
        )

    def get(self, sandbox_id: str) -> SandboxInfo:
        return _validate(SandboxInfo, self._call("GET", f"sandboxes/{sandbox_id}"))

    def kill(self, sandbox_id: str) -> SandboxKillResponse:
        """Terminate a sandbox."""
        result = self._call("DELETE", f"sandboxes/{sandbox_id}")
        return _validate(SandboxKillResponse, result)

    def set_timeout(self, sandbox_id: str, timeout: int) -> SandboxTimeoutResponse:
        result = self._call(
            "POST", f"sandboxes/{sandbox_id}/timeout", body={"timeout": timeout}
        )
        return _validate(SandboxTimeoutResponse, result)

    def get_metrics(self, sandbox_id: str) -> SandboxMetrics:
        result = self._call("GET", f"sandboxes/{sandbox_id}/metrics")
        return _validate(SandboxMetrics, result)

    def get_host_url(self, sandbox_id: str, port: int) -> SandboxHostURL:
        """Public URL of a port exposed by the sandbox."""
        result = self._call("GET", f"sandboxes/{sandbox_id}/host/{port}")
        return _validate(SandboxHostURL, result)

    def read_file(self, sandbox_id: str, path: str) -> FileReadResponse:
        result = self._call(
            "POST", f"sandboxes/{sandbox_id}/files/read", body={"path": path}
        )
        return _validate(FileReadResponse, result)

    def write_file(
        self, sandbox_id: str, path: str, content: str
    ) -> FileWriteResponse:
        result = self._call(
            "POST",
            f"sandboxes/{sandbox_id}/files/write",
            body={"path": path, "content": content},
        )
        return _validate(FileWriteResponse, result)

    def list_files(self, sandbox_id: str, path: str) -> SandboxFileListResponse:
        result = self._call(
            "POST", f"sandboxes/{sandbox_id}/files/list", body={"path": path}
        )
        files = [
            FileInfo(
                name=f.get("name") or "",
                path=f.get("path") or "",
                size=f.get("size") or 0,
                is_dir=f.get("is_dir") or False,
                modified_at=f.get("modified_at") or f.get("mod_time") or "",
                mode=f.get("mode"),
            )
            for f in result.get("files") or []
        ]
        return SandboxFileListResponse(files=files)

    def delete_file(self, sandbox_id: str, path: str) -> SandboxFileDeleteResponse:
        result = self._call(
            "POST", f"sandboxes/{sandbox_id}/files/delete", body={"path": path}
        )
        return _validate(SandboxFileDeleteResponse, result)

    def make_directory(self, sandbox_id: str, path: str) -> DirectoryCreateResponse:
        result = self._call(
            "POST", f"sandboxes/{sandbox_id}/files/mkdir", body={"path": path}
        )
        return _validate(DirectoryCreateResponse, result)

    def upload_file(
        self,
        sandbox_id: str,
        file: Union[str, Path, bytes, IO[bytes]],
        path: Optional[str] = None,
    ) -> SandboxFileUploadResponse:
        """Upload a local file into the sandbox.

        Args:
            sandbox_id: ID of the sandbox
            file: A local path, raw bytes, or an open binary file object
            path: Destination path inside the sandbox
        """
        form = {"path": path} if path else None
        endpoint = f"sandboxes/{sandbox_id}/upload"

        if isinstance(file, (str, Path)):
            local = Path(file)
            with local.open("rb") as f:
                result = self._call(
                    "POST", endpoint, body=form, files={"file": (local.name, f)}
                )
        else:
            name = "uploaded_file"
            if not isinstance(file, bytes):
                name = Path(getattr(file, "name", "") or name).name
            result = self._call(
                "POST", endpoint, body=form, files={"file": (name, file)}
            )

        return _validate(SandboxFileUploadResponse, result)

    def download_file(self, sandbox_id: str, path: str) -> bytes:
        response = self._client._request(
            "GET",
            self._url(f"sandboxes/{sandbox_id}/download"),
            params={"path": path},
        )
        return response.content

    def run_command(
        self,
        sandbox_id: str,
        command: str,
        args: Optional[List[str]] = None,
        working_dir: Optional[str] = None,
        environment: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
    ) -> CommandRunResponse:
        """Run a shell command in the sandbox and wait for it to finish."""
        body = _drop_none(
            {
                "command": command,
                "args": args or None,
                "working_dir": working_dir or None,
                "environment": environment or None,
                "timeout": timeout or None,
            }
        )
        result = self._call("POST", f"sandboxes/{sandbox_id}/commands/run", body=body)
        return _validate(CommandRunResponse, result)

    def run_code(
        self,
        sandbox_id: str,
        code: str,
        language: Optional[str] = None,
        context_id: Optional[str] = None,
        environment: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
        on_stdout: bool = False,
        on_stderr: bool = False,
        on_result: bool = False,
        on_error: bool = False,
    ) -> CodeRunResponse:
        """Execute code in the sandbox.

        Args:
            sandbox_id: ID of the sandbox
            code: Source code to run
            language: Interpreter language, ``python`` on the server by default
            context_id: Code context to run in, keeping state between runs
        """
        body = _drop_none(
            {
                "code": code,
                "language": language or None,
                "context_id": context_id or None,
                "environment": environment or None,
                "timeout": timeout or None,
                "on_stdout": on_stdout or None,
                "on_stderr": on_stderr or None,
                "on_result": on_result or None,
                "on_error": on_error or None,
            }
        )
        result = self._call("POST", f"sandboxes/{sandbox_id}/code/run", body=body)
        return CodeRunResponse(
            execution_id=result.get("execution_id") or None,
            results=result.get("results") or {},
            error=result.get("error") or None,
            logs=result.get("logs") or {"stdout": [], "stderr": []},
        )

    def create_code_context(
        self,
        sandbox_id: str,
        language: Optional[str] = None,
        cwd: Optional[str] = None,
    ) -> CodeContext:
        body = _drop_none({"language": language or None, "cwd": cwd or None})
        result = self._call("POST", f"sandboxes/{sandbox_id}/code/contexts", body=body)
        return _code_context(result, language=language, cwd=cwd)

    def get_code_context(self, sandbox_id: str, context_id: str) -> CodeContext:
        return _code_context(
            self._call("GET", f"sandboxes/{sandbox_id}/code/contexts/{context_id}")
        )

    def delete_code_context(
        self, sandbox_id: str, context_id: str
    ) -> CodeContextDeleteResponse:
        result = self._call(
            "DELETE", f"sandboxes/{sandbox_id}/code/contexts/{context_id}"
        )
        return _validate(CodeContextDeleteResponse, result)


class SandboxTemplates(_AgentsResource):
    def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> TemplateList:
        params = _drop_none({"limit": limit, "offset": offset}) or None
        result = self._call("GET", "templates", params=params)
        return TemplateList(
            templates=result.get("templates") or [],
            limit=result.get("limit") or 0,
            offset=result.get("offset") or 0,
        )


class SandboxResource:
    def __init__(self, client: "_BaseClient"):
        self.sandboxes = Sandboxes(client)
        self.templates = SandboxTemplates(client)
