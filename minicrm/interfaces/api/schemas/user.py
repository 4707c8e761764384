"""User schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RoleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    alias: str


class UserCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: str = Field(..., description="Alias of the role assigned to the user")
    company_id: int | None = Field(default=None, ge=1)
    phone: str | None = Field(default=None, max_length=30)
    avatar: str | None = Field(default=None, max_length=500)


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: EmailStr
    phone: str | None
    avatar: str | None
    company_id: int | None
    is_active: bool
    created_by: int | None
    created_at: datetime | None
    updated_at: datetime | None
    role: RoleRead
