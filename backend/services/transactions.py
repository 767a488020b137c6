"""
Checkout: a transaction header, its lines and their stock effects are
committed together or not at all.
"""
import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.exceptions import InactiveReferenceError, NotFoundError
from db.database import Barber, PaymentMethod, Service, Transaction, TransactionItem
from db.transaction import ITEM_PRODUCT, ITEM_SERVICE
from db.users import User
from schemas.transactions import TransactionCreate, validate_item_kind
from services.inventory import apply_product_sale, lock_items

logger = logging.getLogger(__name__)


def _with_details(stmt):
    return stmt.options(
        selectinload(Transaction.barber),
        selectinload(Transaction.payment_method),
        selectinload(Transaction.items).selectinload(TransactionItem.service),
        selectinload(Transaction.items).selectinload(TransactionItem.inventory_item),
    )


def compute_total(payload: TransactionCreate) -> Decimal:
    return sum((Decimal(it.price) * it.quantity for it in payload.items), Decimal("0"))


def commission_total(items) -> Decimal:
    return sum((Decimal(it.commission or 0) * int(it.quantity) for it in items), Decimal("0"))


async def get_transaction(db: AsyncSession, transaction_id: UUID) -> Optional[Transaction]:
    res = await db.execute(_with_details(select(Transaction)).where(Transaction.id == transaction_id))
    return res.scalar_one_or_none()


async def list_transactions(db: AsyncSession, since=None) -> List[Transaction]:
    stmt = _with_details(select(Transaction))
    if since is not None:
        stmt = stmt.where(Transaction.created_at >= since)
    res = await db.execute(stmt.order_by(Transaction.created_at.desc()))
    return list(res.scalars().all())


async def _check_references(db: AsyncSession, payload: TransactionCreate) -> None:
    barber = await db.get(Barber, payload.barber_id)
    if not barber:
        raise NotFoundError("Barber not found")
    if not barber.active:
        raise InactiveReferenceError("Barber is inactive")

    pm = await db.get(PaymentMethod, payload.payment_method_id)
    if not pm:
        raise NotFoundError("Payment method not found")
    if not pm.active:
        raise InactiveReferenceError("Payment method is inactive")

    service_ids = {it.service_id for it in payload.items if it.type == ITEM_SERVICE}
    if service_ids:
        res = await db.execute(select(Service.id).where(Service.id.in_(service_ids)))
        found = set(res.scalars().all())
        if service_ids - found:
            raise NotFoundError("Service not found")


async def create_transaction(db: AsyncSession, payload: TransactionCreate, actor: User) -> Transaction:
    """
    Insert the header, then each line; every PRODUCT line depletes stock
    right after its insert. Rolls everything back on the first failure.
    """
    try:
        await _check_references(db, payload)
        await lock_items(db, [it.inventory_item_id for it in payload.items if it.type == ITEM_PRODUCT])

        tx = Transaction(
            barber_id=payload.barber_id,
            payment_method_id=payload.payment_method_id,
            total=compute_total(payload),
            notes=payload.notes,
            created_by=actor.id,
        )
        db.add(tx)
        await db.flush()

        for it in payload.items:
            validate_item_kind(it.type, it.service_id, it.inventory_item_id)
            line = TransactionItem(
                transaction_id=tx.id,
                type=it.type,
                service_id=it.service_id,
                inventory_item_id=it.inventory_item_id,
                price=it.price,
                quantity=it.quantity,
                commission=it.commission,
            )
            db.add(line)
            await db.flush()
            await apply_product_sale(db, line)

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Transaction %s registered by %s (%d items, total %s)", tx.id, actor.id, len(payload.items), tx.total)
    # Fresh load so relationships and server defaults are populated
    db.expunge_all()
    return await get_transaction(db, tx.id)


async def delete_transaction(db: AsyncSession, transaction_id: UUID) -> None:
    res = await db.execute(
        select(Transaction).options(selectinload(Transaction.items)).where(Transaction.id == transaction_id)
    )
    tx = res.scalar_one_or_none()
    if not tx:
        raise NotFoundError("Transaction not found")
    await db.delete(tx)
    await db.commit()
    logger.info("Transaction %s deleted", transaction_id)
