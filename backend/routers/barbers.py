from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from core.policies import require
from db.database import get_async_session, Barber as BarberModel
from schemas.barbers import BarberRead, BarberCreate, BarberUpdate
from db.users import User

router = APIRouter()


@router.get("/", response_model=List[BarberRead])
async def list_barbers(
    active: Optional[bool] = None,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("barbers", "select")),
):
    stmt = select(BarberModel)
    if active is not None:
        stmt = stmt.where(BarberModel.active == active)
    res = await db.execute(stmt.order_by(func.lower(BarberModel.name).asc()))
    return [BarberRead(**b.to_schema) for b in res.scalars().all()]


@router.post("/", response_model=BarberRead, status_code=status.HTTP_201_CREATED)
async def create_barber(
    payload: BarberCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("barbers", "insert")),
):
    name = (payload.name or "").strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name is required")

    m = BarberModel(name=name, active=payload.active)
    db.add(m)
    await db.commit()
    await db.refresh(m)
    return BarberRead(**m.to_schema)


@router.patch("/{barber_id}", response_model=BarberRead)
async def update_barber(
    barber_id: UUID,
    payload: BarberUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("barbers", "update")),
):
    res = await db.execute(select(BarberModel).where(BarberModel.id == barber_id))
    m = res.scalar_one_or_none()
    if not m:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Barber not found")

    data = payload.model_dump(exclude_unset=True)
    if "name" in data and data["name"] is not None:
        name = data["name"].strip()
        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name is required")
        m.name = name
    if "active" in data and data["active"] is not None:
        m.active = bool(data["active"])

    await db.commit()
    await db.refresh(m)
    return BarberRead(**m.to_schema)


@router.delete("/{barber_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_barber(
    barber_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("barbers", "delete")),
):
    res = await db.execute(select(BarberModel).where(BarberModel.id == barber_id))
    m = res.scalar_one_or_none()
    if not m:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Barber not found")
    await db.delete(m)
    await db.commit()
