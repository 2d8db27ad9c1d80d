from fastapi import APIRouter, Depends, Request, Response, status
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import (
    get_current_session,
    get_pwd_context,
    get_session_policy,
)
from ..models.models import AuthSession
from ..schemas.user import (
    RegisterResponse,
    Token,
    UserCreate,
    UserLogin,
    UserResponse,
)
from ..services import accounts
from ..services.accounts import SessionPolicy

router = APIRouter(prefix="", tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(
    user: UserCreate,
    db: Session = Depends(get_db),
    pwd_context: CryptContext = Depends(get_pwd_context),
):
    """Register a new student account"""
    db_user = accounts.register(
        db, user.email, user.password, user.cccd, user.name, pwd_context
    )
    return RegisterResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(db_user),
    )


@router.post("/login", response_model=Token)
def login(
    user_credentials: UserLogin,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    pwd_context: CryptContext = Depends(get_pwd_context),
    policy: SessionPolicy = Depends(get_session_policy),
):
    """Authenticate user and open a session"""
    session = accounts.authenticate(
        db,
        user_credentials.email,
        user_credentials.password,
        pwd_context,
        policy,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )

    settings = request.app.state.settings
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.token,
        max_age=int(policy.expires_in.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return Token(
        access_token=session.token,
        expires_at=session.expires_at,
        user=UserResponse.model_validate(session.user),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    request: Request,
    session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """End the current session"""
    accounts.revoke_session(db, session.token)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(request.app.state.settings.session_cookie_name)
    return response


@router.get("/me", response_model=UserResponse)
def me(session: AuthSession = Depends(get_current_session)):
    return UserResponse.model_validate(session.user)
