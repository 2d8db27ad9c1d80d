from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import ensure_owner, get_current_session, get_storage
from ..models.models import AuthSession
from ..schemas.submission import SubmissionResponse
from ..schemas.upload import (
    CompleteUploadRequest,
    CompleteUploadResponse,
    PresignedUrlRequest,
    UploadGrantResponse,
)
from ..services.storage import StorageGateway
from ..services.submissions import record_upload

router = APIRouter(prefix="/api/upload", tags=["Upload"])


@router.post("/presigned-url", response_model=UploadGrantResponse)
def create_presigned_url(
    body: PresignedUrlRequest,
    session: AuthSession = Depends(get_current_session),
    storage: StorageGateway = Depends(get_storage),
):
    """Issue a short-lived URL the client uploads the file to"""
    ensure_owner(session, body.user_id)
    grant = storage.generate_upload_grant(
        body.user_id, body.file_name, body.file_type, body.file_size
    )
    return UploadGrantResponse(
        upload_url=grant.upload_url,
        file_key=grant.object_key,
        expires_in=grant.expires_in,
    )


@router.post(
    "/complete", response_model=CompleteUploadResponse, status_code=201
)
def complete_upload(
    body: CompleteUploadRequest,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Record a finished upload as a new PENDING submission"""
    ensure_owner(session, body.user_id)
    submission = record_upload(
        db,
        user_id=body.user_id,
        object_key=body.file_key,
        file_name=body.file_name,
        file_size=body.file_size,
        mime_type=body.mime_type,
    )
    return CompleteUploadResponse(
        message="File upload completed successfully",
        file=SubmissionResponse.model_validate(submission),
    )
