from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./cccd_portal.db"

    # Sessions
    session_expire_days: int = 7
    session_update_age_hours: int = 24
    session_cookie_name: str = "session_token"
    session_cookie_secure: bool = False
    bcrypt_rounds: int = 12

    # Object storage
    storage_provider: str = "s3"  # "s3" or "mock"
    s3_bucket: str = ""
    s3_endpoint_url: Optional[str] = None
    s3_region: str = "us-east-1"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    upload_url_expires: int = 300  # 5 minutes
    download_url_expires: int = 3600  # 1 hour

    # File Upload
    max_file_size: int = 15 * 1024 * 1024  # 15MB
    allowed_mime_types: List[str] = [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "image/jpeg",
        "image/png",
        "image/jpg",
    ]

    # HTTP
    cors_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


def get_settings() -> Settings:
    return Settings()
