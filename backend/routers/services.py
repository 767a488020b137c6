from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from core.policies import require
from db.database import get_async_session, Service as ServiceModel
from schemas.services import ServiceRead, ServiceCreate, ServiceUpdate
from db.users import User

router = APIRouter()


async def _get_or_404(db: AsyncSession, service_id: UUID) -> ServiceModel:
    res = await db.execute(select(ServiceModel).where(ServiceModel.id == service_id))
    m = res.scalar_one_or_none()
    if not m:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return m


@router.get("/", response_model=List[ServiceRead])
async def list_services(
    active: Optional[bool] = None,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("services", "select")),
):
    stmt = select(ServiceModel)
    if active is not None:
        stmt = stmt.where(ServiceModel.active == active)
    res = await db.execute(stmt.order_by(func.lower(ServiceModel.name).asc()))
    return [ServiceRead(**s.to_schema) for s in res.scalars().all()]


@router.post("/", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: ServiceCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("services", "insert")),
):
    name = (payload.name or "").strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name is required")
    if payload.duration_minutes <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="duration_minutes must be > 0")

    m = ServiceModel(
        name=name,
        price=payload.price,
        duration_minutes=payload.duration_minutes,
        active=payload.active,
    )
    db.add(m)
    await db.commit()
    await db.refresh(m)
    return ServiceRead(**m.to_schema)


@router.patch("/{service_id}", response_model=ServiceRead)
async def update_service(
    service_id: UUID,
    payload: ServiceUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("services", "update")),
):
    m = await _get_or_404(db, service_id)

    data = payload.model_dump(exclude_unset=True)
    if "name" in data and data["name"] is not None:
        name = data["name"].strip()
        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name is required")
        m.name = name
    if "price" in data and data["price"] is not None:
        m.price = data["price"]
    if "duration_minutes" in data and data["duration_minutes"] is not None:
        m.duration_minutes = int(data["duration_minutes"])
    if "active" in data and data["active"] is not None:
        m.active = bool(data["active"])

    await db.commit()
    await db.refresh(m)
    return ServiceRead(**m.to_schema)


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(
    service_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("services", "delete")),
):
    m = await _get_or_404(db, service_id)
    await db.delete(m)
    await db.commit()
