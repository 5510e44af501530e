"""
File management on the files service (``/v1/files``).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import IO, TYPE_CHECKING, Optional, Union

from ..exceptions import (
    GravixLayerBadRequestError,
    GravixLayerServerError,
)
from ..models.files import (
    FileDeleteResponse,
    FileListResponse,
    FileObject,
    FilePurpose,
    FileUploadResponse,
)

if TYPE_CHECKING:
    from .._base import _BaseClient

MAX_FILE_SIZE = 200 * 1024 * 1024
DEFAULT_UPLOAD_NAME = "uploaded_file"

FileInput = Union[str, Path, bytes, IO[bytes]]


def _file_object(data: dict) -> FileObject:
    return FileObject(
        id=data.get("id") or "",
        object=data.get("object") or "file",
        bytes=data.get("bytes") or 0,
        created_at=data.get("created_at") or 0,
        filename=data.get("filename") or "",
        purpose=data.get("purpose") or "",
        expires_after=data.get("expires_after"),
    )


def _validate_purpose(purpose: Union[str, FilePurpose]) -> str:
    if not purpose:
        raise GravixLayerBadRequestError("purpose is required")
    value = purpose.value if isinstance(purpose, FilePurpose) else purpose
    supported = [p.value for p in FilePurpose]
    if value not in supported:
        raise GravixLayerBadRequestError(
            f"Invalid purpose. Supported: {', '.join(supported)}"
        )
    return value


def _validate_path(path: Path) -> None:
    if not path.is_file():
        raise GravixLayerBadRequestError(f"File not found: {path}")
    size = path.stat().st_size
    if size == 0 or size > MAX_FILE_SIZE:
        raise GravixLayerBadRequestError("File size must be between 1 byte and 200MB")


def _require_id(file_id: str, message: str = "file ID required") -> None:
    if not file_id:
        raise GravixLayerBadRequestError(message)


class Files:
    def __init__(self, client: "_BaseClient"):
        self._client = client

    @property
    def _root(self) -> str:
        return self._client.config.service_url("/v1/files")

    def _url(self, path: str = "") -> str:
        return f"{self._root}/{path}" if path else self._root

    def create(
        self,
        file: FileInput,
        purpose: Union[str, FilePurpose],
        expires_after: Optional[int] = None,
        filename: Optional[str] = None,
    ) -> FileUploadResponse:
        """
        Upload a file for use with AI models.

        Args:
            file: A path, raw bytes, or an open binary file object.
            purpose: One of the ``FilePurpose`` values.
            expires_after: Optional lifetime of the file in seconds.
            filename: Name to upload under. Defaults to the path's basename.

        Raises:
            GravixLayerBadRequestError: On invalid arguments, a missing file
                or a file outside the 1 byte to 200MB range.
        """
        if file is None or (isinstance(file, (str, bytes)) and not file):
            raise GravixLayerBadRequestError("file is required")
        purpose = _validate_purpose(purpose)

        form = {"purpose": purpose}
        if expires_after is not None:
            if (
                isinstance(expires_after, bool)
                or not isinstance(expires_after, int)
                or expires_after <= 0
            ):
                raise GravixLayerBadRequestError(
                    "expires_after must be a positive integer (seconds)"
                )
            form["expires_after"] = str(expires_after)

        if isinstance(file, (str, Path)):
            path = Path(file)
            _validate_path(path)
            with path.open("rb") as f:
                return self._upload(form, filename or path.name, f, purpose)

        if isinstance(file, bytes):
            return self._upload(form, filename or DEFAULT_UPLOAD_NAME, file, purpose)

        name = filename or os.path.basename(getattr(file, "name", "") or "")
        return self._upload(form, name or DEFAULT_UPLOAD_NAME, file, purpose)

    def upload(
        self,
        file: FileInput,
        purpose: Union[str, FilePurpose],
        expires_after: Optional[int] = None,
        filename: Optional[str] = None,
    ) -> FileUploadResponse:
        """
        Alias of ``create``.
        """
        return self.create(
            file, purpose, expires_after=expires_after, filename=filename
        )

    def _upload(
        self, form: dict, filename: str, content, purpose: str
    ) -> FileUploadResponse:
        response = self._client._request(
            "POST", self._url(), body=form, files={"file": (filename, content)}
        )
        result = response.json()
        return FileUploadResponse(
            message=result.get("message") or "file uploaded",
            file_name=result.get("file_name") or result.get("filename") or "",
            purpose=result.get("purpose") or purpose,
        )

    def list(self) -> FileListResponse:
        """
        List all files belonging to the user.
        """
        response = self._client._request("GET", self._url())
        result = response.json()
        return FileListResponse(
            data=[_file_object(item) for item in result.get("data") or []]
        )

    def retrieve(self, file_id: str) -> FileObject:
        """
        Retrieve metadata for a file.
        """
        _require_id(file_id)
        response = self._client._request("GET", self._url(file_id))
        return _file_object(response.json())

    def content(self, file_id: str) -> bytes:
        """
        Download the content of a file.

        Raises:
            GravixLayerBadRequestError: If the file does not exist or cannot
                be read from storage.
        """
        _require_id(file_id)
        try:
            response = self._client._request("GET", self._url(f"{file_id}/content"))
        except GravixLayerBadRequestError as e:
            if e.status_code == 404:
                raise GravixLayerBadRequestError(
                    "file not found", status_code=404
                ) from e
            raise
        except GravixLayerServerError as e:
            if e.status_code == 500:
                raise GravixLayerBadRequestError(
                    "storage error", status_code=500
                ) from e
            raise
        return response.content

    def delete(self, file_id: str) -> FileDeleteResponse:
        """
        Delete a file permanently.
        """
        _require_id(file_id, "File ID is required")
        response = self._client._request("DELETE", self._url(file_id))
        result = response.json()
        return FileDeleteResponse(
            message=result.get("message") or "",
            file_id=result.get("file_id") or "",
            file_name=result.get("file_name") or "",
        )
