# Pydantic schemas for user-related requests/responses
# fastapi-users provides the base schemas; the staff profile adds name + role

from pydantic import BaseModel
from uuid import UUID
from fastapi_users import schemas
from typing import Literal, Optional

Role = Literal["admin", "operator"]


class UserRead(schemas.BaseUser[UUID]):
    name: str
    role: Role


class UserCreate(schemas.BaseUserCreate):
    name: Optional[str] = None


class UserUpdate(schemas.BaseUserUpdate):
    name: Optional[str] = None


class ProfileRead(BaseModel):
    id: UUID
    email: str
    name: str
    role: Role
    is_active: bool


class RoleUpdate(BaseModel):
    role: Role
