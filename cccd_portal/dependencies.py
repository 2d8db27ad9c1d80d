from typing import Optional

from fastapi import Depends, Request
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .database import get_db
from .exceptions import AuthorizationError
from .models.models import AuthSession, Role
from .services.accounts import SessionPolicy, require_role, resolve_session
from .services.storage import StorageGateway


def get_storage(request: Request) -> StorageGateway:
    return request.app.state.storage


def get_pwd_context(request: Request) -> CryptContext:
    return request.app.state.pwd_context


def get_session_policy(request: Request) -> SessionPolicy:
    return request.app.state.session_policy


def get_session_token(request: Request) -> Optional[str]:
    """Bearer header wins over the session cookie."""
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return request.cookies.get(request.app.state.settings.session_cookie_name)


def get_current_session(
    token: Optional[str] = Depends(get_session_token),
    policy: SessionPolicy = Depends(get_session_policy),
    db: Session = Depends(get_db),
) -> AuthSession:
    return resolve_session(db, token, policy)


def require_roles(*roles: Role):
    """Dependency factory: the current session, if its role is allowed."""

    def dependency(
        session: AuthSession = Depends(get_current_session),
    ) -> AuthSession:
        return require_role(session, roles)

    return dependency


def ensure_owner(session: AuthSession, user_id: str) -> None:
    if session.user_id != user_id:
        raise AuthorizationError("Cannot act on behalf of another user")
