"""Submission lifecycle and teacher review queries.

Status model: PENDING <-> APPROVED <-> REJECTED, every edge allowed.
``approved_at``/``approved_by`` are both set outside PENDING and both null in it.
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Union

from sqlalchemy import or_
from sqlalchemy.orm import Session, contains_eager, joinedload

from ..exceptions import NotFoundError, ValidationError
from ..models.models import Submission, SubmissionStatus, User, utcnow

logger = logging.getLogger(__name__)

STATUS_ALL = "ALL"


@dataclass
class SubmissionPage:
    items: List[Submission]
    total_count: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit)

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1


def _parse_status(value: Union[str, SubmissionStatus]) -> SubmissionStatus:
    try:
        return SubmissionStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in SubmissionStatus)
        raise ValidationError(f"Status must be one of: {valid}") from None


def record_upload(
    db: Session,
    user_id: str,
    object_key: str,
    file_name: str,
    file_size: int,
    mime_type: str,
) -> Submission:
    """Store metadata for an object the client says it uploaded.

    The object itself is not checked in storage.
    """
    if db.get(User, user_id) is None:
        raise NotFoundError("User not found")

    submission = Submission(
        user_id=user_id,
        object_key=object_key,
        file_name=file_name,
        file_size=file_size,
        mime_type=mime_type,
        status=SubmissionStatus.PENDING,
        uploaded_at=utcnow(),
        approved_at=None,
        approved_by=None,
    )
    db.add(submission)
    db.commit()
    db.refresh(submission)
    logger.info("Recorded upload %s for user %s", submission.id, user_id)
    return submission


def get_submission(db: Session, submission_id: str) -> Submission:
    submission = (
        db.query(Submission)
        .options(joinedload(Submission.user))
        .filter(Submission.id == submission_id)
        .first()
    )
    if not submission:
        raise NotFoundError("File not found")
    return submission


def set_status(
    db: Session,
    submission_id: str,
    new_status: Union[str, SubmissionStatus],
    acting_user_id: str,
    comment: Optional[str] = None,
) -> Submission:
    """Move a submission to ``new_status``; the last writer wins."""
    status = _parse_status(new_status)
    submission = get_submission(db, submission_id)

    submission.status = status
    if status == SubmissionStatus.PENDING:
        submission.approved_at = None
        submission.approved_by = None
    else:
        submission.approved_at = utcnow()
        submission.approved_by = acting_user_id
    db.commit()
    db.refresh(submission)

    logger.info(
        "[APPROVAL] user %s set submission %s to %s%s",
        acting_user_id,
        submission_id,
        status.value,
        f" with comment: {comment}" if comment else "",
    )
    return submission


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_submissions(
    db: Session,
    page: int = 1,
    page_size: int = 10,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> SubmissionPage:
    """Newest-first page of all submissions with their owners."""
    if page < 1 or page_size < 1:
        raise ValidationError("page and limit must be positive")

    query = db.query(Submission).join(Submission.user)
    if status and status != STATUS_ALL:
        query = query.filter(Submission.status == _parse_status(status))
    if search:
        pattern = f"%{_escape_like(search)}%"
        query = query.filter(
            or_(
                User.name.ilike(pattern, escape="\\"),
                User.email.ilike(pattern, escape="\\"),
                User.cccd.ilike(pattern, escape="\\"),
            )
        )

    total_count = query.count()
    items = (
        query.options(contains_eager(Submission.user))
        .order_by(Submission.uploaded_at.desc(), Submission.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return SubmissionPage(
        items=items, total_count=total_count, page=page, limit=page_size
    )


def get_latest_for_user(db: Session, user_id: str) -> Submission:
    submission = (
        db.query(Submission)
        .options(joinedload(Submission.user))
        .filter(Submission.user_id == user_id)
        .order_by(Submission.uploaded_at.desc())
        .first()
    )
    if not submission:
        raise NotFoundError("Student submission not found")
    return submission


def list_for_user(db: Session, user_id: str) -> List[Submission]:
    return (
        db.query(Submission)
        .filter(Submission.user_id == user_id)
        .order_by(Submission.uploaded_at.desc())
        .all()
    )
