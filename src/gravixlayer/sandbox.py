"""High-level handle for working with a single sandbox."""

from __future__ import annotations

import logging
from typing import IO, TYPE_CHECKING, Any, Dict, List, Optional, Union

from .exceptions import GravixLayerError
from .models.sandbox import CodeRunResponse, CommandRunResponse, SandboxInfo
from .resources.sandboxes import DEFAULT_SANDBOX_TIMEOUT_SEC, DEFAULT_TEMPLATE

if TYPE_CHECKING:
    from .client import GravixLayer

logger = logging.getLogger("gravixlayer")

DEFAULT_PROVIDER = "gravix"
DEFAULT_REGION = "eu-west-1"
DEFAULT_WORKDIR = "/home/user"


class Execution:
    """Uniform view over the result of ``run_code`` or ``run_command``."""

    def __init__(self, response: Union[CodeRunResponse, CommandRunResponse]):
        self._response = response

    @property
    def response(self) -> Union[CodeRunResponse, CommandRunResponse]:
        return self._response

    @property
    def logs(self) -> Dict[str, List[str]]:
        if isinstance(self._response, CodeRunResponse):
            return self._response.logs

        logs: Dict[str, List[str]] = {"stdout": [], "stderr": []}
        if self._response.stdout:
            logs["stdout"] = self._response.stdout.split("\n")
        if self._response.stderr:
            logs["stderr"] = self._response.stderr.split("\n")
        return logs

    @property
    def stdout(self) -> str:
        if isinstance(self._response, CommandRunResponse):
            return self._response.stdout
        return "\n".join(self._response.logs.get("stdout") or [])

    @property
    def stderr(self) -> str:
        if isinstance(self._response, CommandRunResponse):
            return self._response.stderr
        return "\n".join(self._response.logs.get("stderr") or [])

    @property
    def exit_code(self) -> int:
        if isinstance(self._response, CommandRunResponse):
            return self._response.exit_code
        return 0

    @property
    def success(self) -> bool:
        if isinstance(self._response, CommandRunResponse):
            return self._response.success
        return self._response.error is None

    @property
    def error(self) -> Any:
        return self._response.error


class Sandbox:
    """A running sandbox bound to the client that created it.

    Exiting the context manager kills the sandbox. After ``kill`` every
    operation raises ``GravixLayerError``.

    Example:
        >>> with Sandbox.create() as sandbox:
        ...     print(sandbox.run_code("print(1 + 1)").stdout)
    """

    def __init__(
        self,
        info: SandboxInfo,
        client: "GravixLayer",
        timeout: Optional[int] = None,
        owns_client: bool = False,
    ):
        self._info = info
        self._client = client
        self._timeout = timeout
        self._owns_client = owns_client
        self._alive = True

    @classmethod
    def create(
        cls,
        template: str = DEFAULT_TEMPLATE,
        provider: str = DEFAULT_PROVIDER,
        region: str = DEFAULT_REGION,
        timeout: int = DEFAULT_SANDBOX_TIMEOUT_SEC,
        metadata: Optional[Dict[str, Any]] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional["GravixLayer"] = None,
    ) -> "Sandbox":
        """Create a sandbox and return a handle to it.

        Args:
            template: Template to boot from
            provider: Cloud provider
            region: Region to run in
            timeout: Lifetime of the sandbox in seconds
            metadata: Free-form labels stored with the sandbox
            api_key: API key, used when ``client`` is not given
            base_url: API root, used when ``client`` is not given
            client: Existing client to create the sandbox with
        """
        owns_client = client is None
        if client is None:
            from .client import GravixLayer

            client = GravixLayer(api_key=api_key, base_url=base_url)

        info = client.sandbox.sandboxes.create(
            provider=provider,
            region=region,
            template=template,
            timeout=timeout,
            metadata=metadata or {},
        )
        return cls(info, client, timeout=timeout, owns_client=owns_client)

    def __enter__(self) -> "Sandbox":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.kill()

    @property
    def sandbox_id(self) -> str:
        return self._info.sandbox_id

    @property
    def info(self) -> SandboxInfo:
        return self._info

    @property
    def status(self) -> str:
        return self._info.status

    @property
    def timeout(self) -> Optional[int]:
        """Lifetime in seconds requested at creation."""
        return self._timeout

    def _ensure_alive(self) -> None:
        if not self._alive:
            raise GravixLayerError("Sandbox has been terminated")

    def run_code(self, code: str, language: str = "python") -> Execution:
        self._ensure_alive()
        response = self._client.sandbox.sandboxes.run_code(
            self.sandbox_id, code, language=language
        )
        return Execution(response)

    def run_command(
        self,
        command: str,
        args: Optional[List[str]] = None,
        working_dir: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> Execution:
        self._ensure_alive()
        response = self._client.sandbox.sandboxes.run_command(
            self.sandbox_id,
            command,
            args=args or [],
            working_dir=working_dir,
            timeout=timeout,
        )
        return Execution(response)

    def write_file(self, path: str, content: str) -> None:
        self._ensure_alive()
        self._client.sandbox.sandboxes.write_file(self.sandbox_id, path, content)

    def read_file(self, path: str) -> str:
        self._ensure_alive()
        return self._client.sandbox.sandboxes.read_file(self.sandbox_id, path).content

    def list_files(self, path: str = DEFAULT_WORKDIR) -> List[str]:
        """Names of the entries in ``path``."""
        self._ensure_alive()
        response = self._client.sandbox.sandboxes.list_files(self.sandbox_id, path)
        return [f.name for f in response.files]

    def delete_file(self, path: str) -> None:
        self._ensure_alive()
        self._client.sandbox.sandboxes.delete_file(self.sandbox_id, path)

    def upload_file(self, file: Union[str, bytes, IO[bytes]], remote_path: str) -> None:
        self._ensure_alive()
        self._client.sandbox.sandboxes.upload_file(self.sandbox_id, file, remote_path)

    def kill(self) -> None:
        """Terminate the sandbox. Failures are logged, never raised."""
        if not self._alive:
            return
        try:
            self._client.sandbox.sandboxes.kill(self.sandbox_id)
        except Exception as e:
            logger.warning("Failed to kill sandbox %s: %s", self.sandbox_id, e)
        finally:
            self._alive = False
            if self._owns_client:
                self._client.close()

    def is_alive(self) -> bool:
        """Whether the sandbox still reports ``running``."""
        if not self._alive:
            return False
        try:
            info = self._client.sandbox.sandboxes.get(self.sandbox_id)
        except GravixLayerError as e:
            logger.debug("Sandbox %s is unreachable: %s", self.sandbox_id, e)
            self._alive = False
            return False
        self._info = info
        return info.status == "running"
