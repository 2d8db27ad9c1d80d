from datetime import datetime

from typing import Annotated

from pydantic import BaseModel, EmailStr, Field, StringConstraints

from ..models.models import Role
from .base import CamelModel


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    cccd: str = Field(pattern=r"^[0-9]{12}$")
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class UserLogin(BaseModel):
    email: str
    password: str


class UserSummary(CamelModel):
    id: str
    name: str
    email: str
    cccd: str


class UserResponse(UserSummary):
    role: Role
    created_at: datetime


class RegisterResponse(CamelModel):
    message: str
    user: UserResponse


class Token(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse
