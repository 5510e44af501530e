from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class FilePurpose(str, Enum):
    """
    Intended use of an uploaded file.
    """

    ASSISTANTS = "assistants"
    BATCH = "batch"
    BATCH_OUTPUT = "batch_output"
    FINE_TUNE = "fine-tune"
    VISION = "vision"
    USER_DATA = "user_data"
    EVALS = "evals"


class FileObject(BaseModel):
    id: str = ""
    object: str = "file"
    bytes: int = 0
    created_at: int = 0
    filename: str = ""
    purpose: str = ""
    expires_after: Optional[int] = None


class FileUploadResponse(BaseModel):
    message: str = "file uploaded"
    file_name: str = ""
    purpose: str = ""


class FileListResponse(BaseModel):
    data: List[FileObject] = Field(default_factory=list)


class FileDeleteResponse(BaseModel):
    message: str = ""
    file_id: str = ""
    file_name: str = ""
