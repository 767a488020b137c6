"""Staff profiles beyond /users/me: admin listing and role assignment."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from core.policies import require
from db.database import get_async_session, User as UserModel
from db.users import User
from schemas.users import ProfileRead, RoleUpdate

router = APIRouter()


@router.get("/", response_model=List[ProfileRead])
async def list_profiles(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("users", "select")),
):
    res = await db.execute(select(UserModel).order_by(func.lower(UserModel.name).asc()))
    return [ProfileRead(**u.to_schema) for u in res.scalars().all()]


@router.put("/{user_id}/role", response_model=ProfileRead)
async def set_role(
    user_id: UUID,
    payload: RoleUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("users", "update")),
):
    res = await db.execute(select(UserModel).where(UserModel.id == user_id))
    m = res.scalar_one_or_none()
    if not m:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if m.id == user.id and payload.role != "admin":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Admins cannot demote themselves")

    m.role = payload.role
    await db.commit()
    await db.refresh(m)
    return ProfileRead(**m.to_schema)
