"""
Stock mutations.

Both paths that change InventoryItem.quantity live here:

- record_manual_movement: an operator's in/out adjustment.
- apply_product_sale: the automatic 'out' for a PRODUCT transaction line.

Each locks the item row (SELECT ... FOR UPDATE), writes one movement and
updates the quantity inside the caller's database transaction.
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import DomainError, InsufficientStockError, NotFoundError
from db.inventory import InventoryItem, InventoryMovement, MOVEMENT_IN, MOVEMENT_OUT
from db.transaction import ITEM_PRODUCT, Transaction, TransactionItem

logger = logging.getLogger(__name__)

SALE_NOTE_TEMPLATE = "Venda automática - Transaction ID: {transaction_id}"


def sale_note(transaction_id: UUID) -> str:
    return SALE_NOTE_TEMPLATE.format(transaction_id=transaction_id)


def _as_decimal(x) -> Decimal:
    if isinstance(x, Decimal):
        return x
    return Decimal(str(x))


async def lock_item(db: AsyncSession, item_id: UUID) -> InventoryItem:
    res = await db.execute(
        select(InventoryItem).where(InventoryItem.id == item_id).with_for_update()
    )
    item = res.scalar_one_or_none()
    if not item:
        raise NotFoundError("Inventory item not found")
    return item


async def lock_items(db: AsyncSession, item_ids: Iterable[UUID]) -> List[InventoryItem]:
    # Fixed lock order so two checkouts touching the same products cannot deadlock
    return [await lock_item(db, item_id) for item_id in sorted(set(item_ids), key=str)]


async def _write_movement(
    db: AsyncSession,
    *,
    item: InventoryItem,
    movement_type: str,
    quantity: Decimal,
    new_quantity: Decimal,
    notes: Optional[str],
    actor_id: UUID,
) -> InventoryMovement:
    movement = InventoryMovement(
        item_id=item.id,
        type=movement_type,
        quantity=quantity,
        notes=notes,
        created_by=actor_id,
    )
    db.add(movement)
    await db.flush()

    item.quantity = new_quantity
    await db.flush()
    return movement


async def record_manual_movement(
    db: AsyncSession,
    *,
    item_id: UUID,
    movement_type: str,
    quantity,
    notes: Optional[str],
    actor_id: UUID,
) -> tuple[InventoryMovement, InventoryItem]:
    """
    Record an operator stock adjustment and commit it.

    'in' adds without an upper bound; 'out' is rejected with
    InsufficientStockError when it would take the quantity below zero, in
    which case nothing is written.
    """
    qty = _as_decimal(quantity)
    if qty <= 0:
        raise DomainError("quantity must be > 0")
    if movement_type not in (MOVEMENT_IN, MOVEMENT_OUT):
        raise DomainError(f"Unknown movement type: {movement_type}")

    try:
        item = await lock_item(db, item_id)
        current = _as_decimal(item.quantity or 0)
        candidate = current + qty if movement_type == MOVEMENT_IN else current - qty
        if candidate < 0:
            raise InsufficientStockError(item.id, current, qty, item_name=item.name)

        movement = await _write_movement(
            db,
            item=item,
            movement_type=movement_type,
            quantity=qty,
            new_quantity=candidate,
            notes=notes,
            actor_id=actor_id,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(movement)
    await db.refresh(item)
    logger.info(
        "Stock %s %s on %s (%s -> %s) by %s",
        movement_type, qty, item.id, current, candidate, actor_id,
    )
    return movement, item


async def apply_product_sale(
    db: AsyncSession,
    line: TransactionItem,
    *,
    allow_negative: Optional[bool] = None,
) -> Optional[InventoryMovement]:
    """
    Inventory side effect of inserting a transaction line.

    Only PRODUCT lines with an inventory reference qualify: the item is
    decremented by the line quantity and one 'out' movement is appended,
    attributed to the transaction's creator. SERVICE lines return None.

    Does not commit; the checkout that inserted the line owns the
    transaction, so a failure here discards the line as well.
    """
    if line.type != ITEM_PRODUCT or line.inventory_item_id is None:
        return None

    if allow_negative is None:
        allow_negative = settings.allow_negative_stock

    res = await db.execute(select(Transaction.created_by).where(Transaction.id == line.transaction_id))
    actor_id = res.scalar_one_or_none()
    if actor_id is None:
        raise NotFoundError("Transaction not found")

    item = await lock_item(db, line.inventory_item_id)
    qty = _as_decimal(line.quantity)
    current = _as_decimal(item.quantity or 0)
    candidate = current - qty
    if candidate < 0:
        if not allow_negative:
            logger.warning("Rejected sale of %s x %s: only %s in stock", qty, item.id, current)
            raise InsufficientStockError(item.id, current, qty, item_name=item.name)
        logger.warning("Sale of %s x %s drives stock negative (%s)", qty, item.id, candidate)

    return await _write_movement(
        db,
        item=item,
        movement_type=MOVEMENT_OUT,
        quantity=qty,
        new_quantity=candidate,
        notes=sale_note(line.transaction_id),
        actor_id=actor_id,
    )
