from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional
from datetime import datetime

from quickcourt.models.enums import UserRole

class UserSummary(BaseModel):
    id: int
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True

class UserResponse(UserSummary):
    phone_number: Optional[str] = None
    role: str
    is_active: bool
    created_at: Optional[datetime] = None

class CurrentUserResponse(BaseModel):
    user: UserResponse
    home_route: str

class UserSyncRequest(BaseModel):
    """Profile data sent by the client right after signing in with the identity provider."""
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=500)
    role: Optional[UserRole] = None

    @field_validator("role")
    @classmethod
    def validate_self_assignable_role(cls, v):
        if v == UserRole.ADMIN:
            raise ValueError("Role must be user or facility_owner")
        return v

class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, pattern=r"^\+?[0-9 \-]{7,20}$")
    avatar_url: Optional[str] = Field(None, max_length=500)

class RoleUpdate(BaseModel):
    role: UserRole

class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int
    page: int
    limit: int
    total_pages: int
