import uuid
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from core.exceptions import ItemKindError
from db.database import Transaction, TransactionItem
from schemas.transactions import TransactionItemCreate, validate_item_kind


def test_service_line_requires_only_service_id():
    sid = uuid.uuid4()
    assert validate_item_kind("SERVICE", sid, None) == "SERVICE"
    with pytest.raises(ItemKindError):
        validate_item_kind("SERVICE", None, None)
    with pytest.raises(ItemKindError):
        validate_item_kind("SERVICE", sid, uuid.uuid4())


def test_product_line_requires_only_inventory_item_id():
    iid = uuid.uuid4()
    assert validate_item_kind("PRODUCT", None, iid) == "PRODUCT"
    with pytest.raises(ItemKindError):
        validate_item_kind("PRODUCT", None, None)
    with pytest.raises(ItemKindError):
        validate_item_kind("PRODUCT", uuid.uuid4(), iid)


def test_unknown_kind_is_rejected():
    with pytest.raises(ItemKindError):
        validate_item_kind("GIFT_CARD", uuid.uuid4(), None)


def test_schema_rejects_mismatched_line():
    with pytest.raises(ValidationError):
        TransactionItemCreate(type="PRODUCT", service_id=uuid.uuid4(), price=Decimal("10"))

    ok = TransactionItemCreate(type="SERVICE", service_id=uuid.uuid4(), price=Decimal("40"))
    assert ok.quantity == 1
    assert ok.commission == Decimal("0")


def test_schema_rejects_non_positive_quantity():
    with pytest.raises(ValidationError):
        TransactionItemCreate(type="SERVICE", service_id=uuid.uuid4(), price=Decimal("40"), quantity=0)


async def test_check_constraint_rejects_rows_that_bypass_the_schema(db, admin, barber, payment_method, make_item):
    item = await make_item()
    tx = Transaction(
        barber_id=barber.id,
        payment_method_id=payment_method.id,
        total=Decimal("10"),
        created_by=admin.id,
    )
    db.add(tx)
    await db.commit()
    tx_id = tx.id

    # PRODUCT line that also names a service
    db.add(
        TransactionItem(
            transaction_id=tx_id,
            type="PRODUCT",
            service_id=uuid.uuid4(),
            inventory_item_id=item.id,
            price=Decimal("10"),
            quantity=1,
        )
    )
    with pytest.raises(IntegrityError):
        await db.commit()
    await db.rollback()

    # SERVICE line without a service
    db.add(TransactionItem(transaction_id=tx_id, type="SERVICE", price=Decimal("10"), quantity=1))
    with pytest.raises(IntegrityError):
        await db.commit()
    await db.rollback()


async def test_api_rejects_mismatched_line(operator_client, barber, payment_method, service):
    r = await operator_client.post(
        "/transactions/",
        json={
            "barber_id": str(barber.id),
            "payment_method_id": str(payment_method.id),
            "items": [{"type": "SERVICE", "price": 40}],
        },
    )
    assert r.status_code == 422
