from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.policies import require
from db.database import get_async_session
from db.inventory import InventoryItem as InventoryItemModel
from db.inventory import InventoryMovement as InventoryMovementModel
from db.users import User
from schemas.inventory import (
    InventoryItemCreate,
    InventoryItemOut,
    InventoryItemUpdate,
    InventoryMovementCreate,
    InventoryMovementOut,
    InventoryMovementResult,
)
from services.inventory import record_manual_movement

router = APIRouter()


async def _get_item_or_404(db: AsyncSession, item_id: UUID) -> InventoryItemModel:
    res = await db.execute(select(InventoryItemModel).where(InventoryItemModel.id == item_id))
    it = res.scalar_one_or_none()
    if not it:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return it


async def _ensure_sku_free(db: AsyncSession, sku: Optional[str], exclude_id: Optional[UUID] = None) -> None:
    if not sku:
        return
    stmt = select(InventoryItemModel.id).where(InventoryItemModel.sku == sku)
    if exclude_id is not None:
        stmt = stmt.where(InventoryItemModel.id != exclude_id)
    if (await db.execute(stmt)).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="SKU already in use")


@router.get("/items", response_model=List[InventoryItemOut])
async def list_inventory_items(
    q: Optional[str] = None,
    in_stock: bool = False,
    user: User = Depends(require("inventory_items", "select")),
    db: AsyncSession = Depends(get_async_session),
):
    """
    List inventory items ordered by name.

    - q matches name or SKU (case-insensitive).
    - in_stock keeps only items with quantity > 0 (what the checkout screen offers).
    """
    stmt = select(InventoryItemModel)
    if q:
        qq = f"%{q.strip().lower()}%"
        stmt = stmt.where(
            func.lower(InventoryItemModel.name).like(qq) | func.lower(InventoryItemModel.sku).like(qq)
        )
    if in_stock:
        stmt = stmt.where(InventoryItemModel.quantity > 0)

    res = await db.execute(stmt.order_by(func.lower(InventoryItemModel.name).asc()))
    return [InventoryItemOut(**it.to_schema) for it in res.scalars().all()]


@router.get("/low-stock", response_model=List[InventoryItemOut])
async def list_low_stock(
    user: User = Depends(require("inventory_items", "select")),
    db: AsyncSession = Depends(get_async_session),
):
    res = await db.execute(
        select(InventoryItemModel)
        .where(InventoryItemModel.min_quantity > 0)
        .where(InventoryItemModel.quantity <= InventoryItemModel.min_quantity)
        .order_by(func.lower(InventoryItemModel.name).asc())
    )
    return [InventoryItemOut(**it.to_schema) for it in res.scalars().all()]


@router.post("/items", response_model=InventoryItemOut, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    payload: InventoryItemCreate,
    user: User = Depends(require("inventory_items", "insert")),
    db: AsyncSession = Depends(get_async_session),
):
    await _ensure_sku_free(db, payload.sku)

    model = InventoryItemModel(
        name=payload.name,
        sku=payload.sku,
        quantity=payload.quantity,
        unit=payload.unit,
        min_quantity=payload.min_quantity,
    )
    db.add(model)
    await db.commit()
    await db.refresh(model)
    return InventoryItemOut(**model.to_schema)


@router.get("/items/{item_id}", response_model=InventoryItemOut)
async def get_inventory_item(
    item_id: UUID,
    user: User = Depends(require("inventory_items", "select")),
    db: AsyncSession = Depends(get_async_session),
):
    it = await _get_item_or_404(db, item_id)
    return InventoryItemOut(**it.to_schema)


@router.patch("/items/{item_id}", response_model=InventoryItemOut)
async def update_inventory_item(
    item_id: UUID,
    payload: InventoryItemUpdate,
    user: User = Depends(require("inventory_items", "update")),
    db: AsyncSession = Depends(get_async_session),
):
    model = await _get_item_or_404(db, item_id)

    data = payload.model_dump(exclude_unset=True)
    if "name" in data and data["name"] is not None:
        model.name = data["name"]
    if "unit" in data and data["unit"] is not None:
        model.unit = data["unit"]
    if "sku" in data:
        sku = (data["sku"] or "").strip() or None
        await _ensure_sku_free(db, sku, exclude_id=item_id)
        model.sku = sku
    if "min_quantity" in data:
        model.min_quantity = data["min_quantity"]

    await db.commit()
    await db.refresh(model)
    return InventoryItemOut(**model.to_schema)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_inventory_item(
    item_id: UUID,
    user: User = Depends(require("inventory_items", "delete")),
    db: AsyncSession = Depends(get_async_session),
):
    res = await db.execute(
        select(InventoryItemModel)
        .options(selectinload(InventoryItemModel.movements))
        .where(InventoryItemModel.id == item_id)
    )
    model = res.scalar_one_or_none()
    if not model:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")

    try:
        await db.delete(model)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Item has sales and cannot be deleted")


@router.get("/items/{item_id}/movements", response_model=List[InventoryMovementOut])
async def list_movements(
    item_id: UUID,
    limit: int = Query(100, ge=1, le=1000),
    user: User = Depends(require("inventory_movements", "select")),
    db: AsyncSession = Depends(get_async_session),
):
    await _get_item_or_404(db, item_id)
    res = await db.execute(
        select(InventoryMovementModel)
        .where(InventoryMovementModel.item_id == item_id)
        .order_by(InventoryMovementModel.created_at.desc(), InventoryMovementModel.id.desc())
        .limit(limit)
    )
    return [InventoryMovementOut(**m.to_schema) for m in res.scalars().all()]


@router.post("/items/{item_id}/movements", response_model=InventoryMovementResult, status_code=status.HTTP_201_CREATED)
async def create_movement(
    item_id: UUID,
    payload: InventoryMovementCreate,
    user: User = Depends(require("inventory_movements", "insert")),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Manual stock entry/exit. 'out' beyond the quantity on hand is rejected
    with 409 and nothing is written.
    """
    movement, item = await record_manual_movement(
        db,
        item_id=item_id,
        movement_type=payload.type,
        quantity=payload.quantity,
        notes=payload.notes,
        actor_id=user.id,
    )
    return InventoryMovementResult(
        movement=InventoryMovementOut(**movement.to_schema),
        item=InventoryItemOut(**item.to_schema),
    )
