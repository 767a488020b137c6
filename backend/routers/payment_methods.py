from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from core.policies import require
from db.database import get_async_session, PaymentMethod as PaymentMethodModel
from schemas.payment_methods import PaymentMethodRead, PaymentMethodCreate, PaymentMethodUpdate
from db.users import User

router = APIRouter()


@router.get("/", response_model=List[PaymentMethodRead])
async def list_payment_methods(
    active: Optional[bool] = None,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("payment_methods", "select")),
):
    stmt = select(PaymentMethodModel)
    if active is not None:
        stmt = stmt.where(PaymentMethodModel.active == active)
    res = await db.execute(stmt.order_by(func.lower(PaymentMethodModel.name).asc()))
    return [PaymentMethodRead(**p.to_schema) for p in res.scalars().all()]


@router.post("/", response_model=PaymentMethodRead, status_code=status.HTTP_201_CREATED)
async def create_payment_method(
    payload: PaymentMethodCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("payment_methods", "insert")),
):
    name = (payload.name or "").strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name is required")

    existing = await db.execute(select(PaymentMethodModel).where(func.lower(PaymentMethodModel.name) == name.lower()))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Payment method already exists")

    m = PaymentMethodModel(name=name, active=payload.active)
    db.add(m)
    await db.commit()
    await db.refresh(m)
    return PaymentMethodRead(**m.to_schema)


@router.patch("/{payment_method_id}", response_model=PaymentMethodRead)
async def update_payment_method(
    payment_method_id: UUID,
    payload: PaymentMethodUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("payment_methods", "update")),
):
    res = await db.execute(select(PaymentMethodModel).where(PaymentMethodModel.id == payment_method_id))
    m = res.scalar_one_or_none()
    if not m:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment method not found")

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
    return PaymentMethodRead(**m.to_schema)
