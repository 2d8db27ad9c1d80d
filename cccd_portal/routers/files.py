from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import ensure_owner, get_current_session
from ..models.models import AuthSession
from ..schemas.submission import FileListResponse, SubmissionResponse
from ..services.submissions import list_for_user

router = APIRouter(prefix="/api/files", tags=["Files"])


@router.get("/user/{user_id}", response_model=FileListResponse)
def get_user_files(
    user_id: str,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """List the caller's own submissions, newest first"""
    ensure_owner(session, user_id)
    files = list_for_user(db, user_id)
    return FileListResponse(
        files=[SubmissionResponse.model_validate(f) for f in files],
        count=len(files),
    )
