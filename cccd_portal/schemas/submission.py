from datetime import datetime
from typing import List, Optional

from ..models.models import SubmissionStatus
from .base import CamelModel
from .user import UserSummary


class SubmissionResponse(CamelModel):
    id: str
    user_id: str
    object_key: str
    file_name: str
    file_size: int
    mime_type: str
    status: SubmissionStatus
    uploaded_at: datetime
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None


class SubmissionWithUser(SubmissionResponse):
    user: UserSummary


class FileListResponse(CamelModel):
    files: List[SubmissionResponse]
    count: int


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_count: int
    limit: int
    has_next_page: bool
    has_prev_page: bool


class SubmissionListResponse(CamelModel):
    submissions: List[SubmissionWithUser]
    pagination: Pagination


class StudentSubmissionResponse(CamelModel):
    success: bool = True
    submission: SubmissionWithUser


class DownloadResponse(CamelModel):
    download_url: str
    expires_in: int
    file_name: str
    mime_type: str
    student_name: str
    student_cccd: str


class ApprovalRequest(CamelModel):
    file_id: str
    status: SubmissionStatus
    comment: Optional[str] = None


class ApprovalFile(CamelModel):
    id: str
    status: SubmissionStatus
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    user: UserSummary


class ApprovalResponse(CamelModel):
    success: bool = True
    file: ApprovalFile
    message: Optional[str] = None
