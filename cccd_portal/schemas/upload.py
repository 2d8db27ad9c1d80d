from pydantic import Field

from .base import CamelModel
from .submission import SubmissionResponse


class PresignedUrlRequest(CamelModel):
    file_name: str = Field(min_length=1)
    file_type: str = Field(min_length=1)
    file_size: int
    user_id: str = Field(min_length=1)


class UploadGrantResponse(CamelModel):
    upload_url: str
    file_key: str
    expires_in: int


class CompleteUploadRequest(CamelModel):
    file_key: str = Field(min_length=1)
    file_name: str = Field(min_length=1)
    file_size: int = Field(ge=1)
    mime_type: str = Field(min_length=1)
    user_id: str = Field(min_length=1)


class CompleteUploadResponse(CamelModel):
    message: str
    file: SubmissionResponse
