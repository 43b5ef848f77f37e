# backend/commission_dashboard/schemas/auth.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class LoginRequest(BaseModel):
    # Optional on purpose: missing fields are a 400 from the handler, not a 422.
    username: Optional[str] = None
    password: Optional[str] = None


class PublicUser(BaseModel):
    """
    A credential-store row without its password. The only user shape that
    leaves the credential store.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    username: str
    role: str = ""
    name: str = ""
    email: Optional[EmailStr] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v


class StoredUser(PublicUser):
    password: str = Field(repr=False)

    def to_public(self) -> PublicUser:
        return PublicUser(**self.model_dump(exclude={"password"}))


class LoginResponse(BaseModel):
    success: bool = True
    user: PublicUser
    message: str = "Login successful"


class LoginFailure(BaseModel):
    success: bool = False
    message: str


class SessionResponse(BaseModel):
    authenticated: bool
    user: Optional[PublicUser] = None
