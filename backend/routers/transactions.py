from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from core.policies import require
from db.database import get_async_session, Transaction as TransactionModel
from db.users import User
from schemas.transactions import Period, TransactionCreate, TransactionItemRead, TransactionRead
from services import transactions as tx_service
from services.reports import period_start

router = APIRouter()


def _serialize_transaction(t: TransactionModel) -> TransactionRead:
    items = []
    for it in (t.items or []):
        svc = getattr(it, "service", None)
        inv = getattr(it, "inventory_item", None)
        items.append(
            TransactionItemRead(
                id=it.id,
                type=it.type,
                service_id=it.service_id,
                service_name=getattr(svc, "name", None) if svc else None,
                inventory_item_id=it.inventory_item_id,
                inventory_item_name=getattr(inv, "name", None) if inv else None,
                price=float(it.price),
                quantity=int(it.quantity),
                commission=float(it.commission or 0),
            )
        )
    barber = getattr(t, "barber", None)
    pm = getattr(t, "payment_method", None)
    return TransactionRead(
        id=t.id,
        barber_id=t.barber_id,
        barber_name=getattr(barber, "name", None) if barber else None,
        payment_method_id=t.payment_method_id,
        payment_method_name=getattr(pm, "name", None) if pm else None,
        total=float(t.total),
        commission_total=float(tx_service.commission_total(t.items or [])),
        notes=t.notes,
        created_by=t.created_by,
        created_at=t.created_at,
        items=items,
    )


@router.get("/", response_model=List[TransactionRead])
async def list_transactions(
    period: Period = Query("today"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("transactions", "select")),
):
    """Newest first. 'week' is the last 7 days, 'month' the current calendar month."""
    rows = await tx_service.list_transactions(db, since=period_start(period))
    return [_serialize_transaction(t) for t in rows]


@router.get("/{transaction_id}", response_model=TransactionRead)
async def get_transaction(
    transaction_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("transaction_items", "select")),
):
    t = await tx_service.get_transaction(db, transaction_id)
    if not t:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return _serialize_transaction(t)


@router.post(
    "/",
    response_model=TransactionRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require("transaction_items", "insert"))],
)
async def create_transaction(
    payload: TransactionCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("transactions", "insert")),
):
    """
    Register a checkout. PRODUCT lines take their quantity out of stock and
    leave an 'out' movement; the whole checkout is rejected (409) when a
    product does not have enough stock.
    """
    t = await tx_service.create_transaction(db, payload, user)
    return _serialize_transaction(t)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("transactions", "delete")),
):
    await tx_service.delete_transaction(db, transaction_id)
