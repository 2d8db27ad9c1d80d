import secrets

from passlib.context import CryptContext


def build_password_context(rounds: int = 12) -> CryptContext:
    return CryptContext(
        schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
    )


def get_password_hash(password: str, context: CryptContext) -> str:
    return context.hash(password)


def verify_password(
    plain_password: str, hashed_password: str, context: CryptContext
) -> bool:
    return context.verify(plain_password, hashed_password)


def generate_session_token() -> str:
    """Opaque token handed to the client; session data stays server-side."""
    return secrets.token_urlsafe(32)
