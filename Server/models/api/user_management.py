"""
OrgAdmin Server - User Management API Models

Pydantic models for the user management endpoints.
UserForm is the write shape (carries the plaintext password on the way in);
UserResult is the read shape and never carries credential fields.
Wire names are camelCase; snake_case names are accepted on input too.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from models.database import User


LOGIN_ID_PATTERN = r"^[A-Za-z0-9_.@-]+$"


class UserForm(BaseModel):
    """Request model for creating or updating a user"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    login_id: str = Field(..., min_length=1, max_length=50, pattern=LOGIN_ID_PATTERN)
    password: Optional[str] = Field(
        None, min_length=User.PASSWORD_MIN_LENGTH, max_length=User.PASSWORD_MAX_LENGTH
    )
    avatar: Optional[str] = None
    org_id: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = Field(None, max_length=100)
    activated: Optional[bool] = None  # None keeps the current flag, True on create
    lang_key: Optional[str] = None
    role_id_list: Optional[List[str]] = None  # None keeps the current roles on update

    @field_validator("id", "avatar", "org_id", "name", "phone", "email", "lang_key", mode="before")
    @classmethod
    def EmptyToNone(cls, value):
        """Blank strings mean 'not supplied'"""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("password", mode="before")
    @classmethod
    def EmptyPasswordToNone(cls, value):
        """Only the empty string means "not supplied"; whitespace is a real password"""
        if value == "":
            return None
        return value

    @field_validator("password")
    @classmethod
    def CheckPasswordBytes(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value.encode("utf-8")) > User.PASSWORD_MAX_BYTES:
            raise ValueError(f"Password must not exceed {User.PASSWORD_MAX_BYTES} bytes")
        return value

    @field_validator("email")
    @classmethod
    def NormalizeEmail(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        if "@" not in value:
            raise ValueError("Email address is not valid")
        return value.strip().lower()


class UserResult(BaseModel):
    """Response model for a single user"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    login_id: str
    avatar: Optional[str] = None
    org_id: Optional[str] = None
    org_name: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    activated: bool
    lang_key: Optional[str] = None
    reset_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    last_modified_at: Optional[datetime] = None
    role_id_list: List[str] = []
    role_ids: str = ""
    role_names: str = ""
    authorities: List[str] = []
