"""Registration, login and server-side sessions."""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, Optional, Union

from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from ..models.models import AuthSession, Role, User, utcnow
from ..schemas.user import UserCreate
from ..utils.security import (
    generate_session_token,
    get_password_hash,
    verify_password,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionPolicy:
    expires_in: timedelta = timedelta(days=7)
    # Sessions are extended at most once per update_age of activity
    update_age: timedelta = timedelta(days=1)


def normalize_email(email: str) -> str:
    """Emails are stored and looked up lowercased."""
    return email.strip().lower()


def _describe(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"])
    return f"{field}: {first['msg']}"


def create_user(
    db: Session,
    *,
    email: str,
    password: str,
    cccd: str,
    name: str,
    role: Role,
    pwd_context: CryptContext,
) -> User:
    """Validate and insert a user with the given role."""
    try:
        data = UserCreate(email=email, password=password, cccd=cccd, name=name)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e

    email = normalize_email(data.email)
    existing = (
        db.query(User)
        .filter(or_(User.email == email, User.cccd == data.cccd))
        .first()
    )
    if existing:
        if existing.email == email:
            raise ConflictError("Email already registered")
        raise ConflictError("CCCD already registered")

    user = User(
        email=email,
        cccd=data.cccd,
        name=data.name,
        password_hash=get_password_hash(data.password, pwd_context),
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # A concurrent insert won the unique constraint
        db.rollback()
        raise ConflictError("Email or CCCD already registered") from e
    db.refresh(user)
    logger.info("Created %s account %s", role.value, user.id)
    return user


def register(
    db: Session,
    email: str,
    password: str,
    cccd: str,
    name: str,
    pwd_context: CryptContext,
) -> User:
    """Self-service registration; always creates a STUDENT."""
    return create_user(
        db,
        email=email,
        password=password,
        cccd=cccd,
        name=name,
        role=Role.STUDENT,
        pwd_context=pwd_context,
    )


def authenticate(
    db: Session,
    email: str,
    password: str,
    pwd_context: CryptContext,
    policy: SessionPolicy = SessionPolicy(),
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AuthSession:
    user = (
        db.query(User).filter(User.email == normalize_email(email)).first()
    )
    if not user or not verify_password(password, user.password_hash, pwd_context):
        logger.warning("Failed login attempt for %s", email)
        raise AuthenticationError("Incorrect email or password")

    now = utcnow()
    session = AuthSession(
        token=generate_session_token(),
        user_id=user.id,
        expires_at=now + policy.expires_in,
        created_at=now,
        updated_at=now,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def resolve_session(
    db: Session, token: Optional[str], policy: SessionPolicy = SessionPolicy()
) -> AuthSession:
    """Look up a live session by token, renewing it when it is due."""
    if not token:
        raise AuthenticationError("Authentication required")
    session = db.query(AuthSession).filter(AuthSession.token == token).first()
    if not session:
        raise AuthenticationError("Authentication required")

    now = utcnow()
    if session.expires_at <= now:
        db.delete(session)
        db.commit()
        raise AuthenticationError("Session expired")

    if now - session.updated_at >= policy.update_age:
        session.expires_at = now + policy.expires_in
        session.updated_at = now
        db.commit()
    return session


def revoke_session(db: Session, token: str) -> None:
    db.query(AuthSession).filter(AuthSession.token == token).delete()
    db.commit()


def require_role(
    session: Optional[AuthSession], roles: Union[Role, Iterable[Role]]
) -> AuthSession:
    allowed = {roles} if isinstance(roles, Role) else set(roles)
    if session is None:
        raise AuthenticationError("Authentication required")
    if session.user.role not in allowed:
        raise AuthorizationError("Forbidden - insufficient permissions")
    return session
