"""Request and response models for the auth endpoints."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """E-mail and password for sign-up and login."""
    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=256)


class AuthUser(BaseModel):
    """The authenticated identity handed to every gated operation."""
    id: str
    email: str


class SessionResponse(BaseModel):
    """A login session."""
    token: str
    user: AuthUser
    expires_at: datetime


class SignupResponse(BaseModel):
    """Result of a sign-up."""
    user: AuthUser
    message: str = "Account created. You can log in now."


class LogoutResponse(BaseModel):
    """Result of a logout."""
    message: str = "Logged out"
    redirect: Optional[str] = "/login"
