import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_storage, require_roles
from ..exceptions import ValidationError
from ..models.models import AuthSession, Role
from ..schemas.submission import (
    ApprovalFile,
    ApprovalRequest,
    ApprovalResponse,
    DownloadResponse,
    Pagination,
    StudentSubmissionResponse,
    SubmissionListResponse,
    SubmissionWithUser,
)
from ..services import submissions as submission_service
from ..services.storage import StorageGateway

router = APIRouter(prefix="/api/admin", tags=["Review"])

require_teacher = require_roles(Role.TEACHER)


def _validate_id(value: str, kind: str) -> str:
    try:
        uuid.UUID(value)
    except ValueError:
        raise ValidationError(f"Invalid {kind} ID format") from None
    return value


@router.get("/submissions", response_model=SubmissionListResponse)
def list_submissions(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = None,
    search: Optional[str] = None,
    _teacher: AuthSession = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    """Paginated review queue, optionally filtered by status and owner"""
    result = submission_service.list_submissions(
        db, page=page, page_size=limit, status=status, search=search
    )
    return SubmissionListResponse(
        submissions=[
            SubmissionWithUser.model_validate(s) for s in result.items
        ],
        pagination=Pagination(
            current_page=result.page,
            total_pages=result.total_pages,
            total_count=result.total_count,
            limit=result.limit,
            has_next_page=result.has_next_page,
            has_prev_page=result.has_prev_page,
        ),
    )


@router.get("/student/{student_id}", response_model=StudentSubmissionResponse)
def get_student_submission(
    student_id: str,
    _teacher: AuthSession = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    """Latest submission of one student"""
    _validate_id(student_id, "student")
    submission = submission_service.get_latest_for_user(db, student_id)
    return StudentSubmissionResponse(
        submission=SubmissionWithUser.model_validate(submission)
    )


@router.get("/files/{file_id}/download", response_model=DownloadResponse)
def download_file(
    file_id: str,
    _teacher: AuthSession = Depends(require_teacher),
    db: Session = Depends(get_db),
    storage: StorageGateway = Depends(get_storage),
):
    """Short-lived download link for a submitted file"""
    _validate_id(file_id, "file")
    submission = submission_service.get_submission(db, file_id)
    return DownloadResponse(
        download_url=storage.generate_download_grant(submission.object_key),
        expires_in=storage.download_expires,
        file_name=submission.file_name,
        mime_type=submission.mime_type,
        student_name=submission.user.name,
        student_cccd=submission.user.cccd,
    )


@router.put("/approval", response_model=ApprovalResponse)
def update_approval(
    body: ApprovalRequest,
    teacher: AuthSession = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    """Approve, reject or reset a submission"""
    _validate_id(body.file_id, "file")
    submission = submission_service.set_status(
        db,
        body.file_id,
        body.status,
        acting_user_id=teacher.user_id,
        comment=body.comment,
    )
    return ApprovalResponse(
        file=ApprovalFile.model_validate(submission),
        message=f"Submission status updated to {submission.status.value}",
    )


@router.get("/approval", response_model=ApprovalResponse)
def get_approval(
    file_id: str = Query(..., alias="fileId"),
    _teacher: AuthSession = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    """Current approval state of a submission"""
    _validate_id(file_id, "file")
    submission = submission_service.get_submission(db, file_id)
    return ApprovalResponse(file=ApprovalFile.model_validate(submission))
