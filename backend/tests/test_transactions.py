from decimal import Decimal

import pytest
from sqlalchemy import func, select

from core.config import settings
from core.exceptions import InsufficientStockError
from db.database import InventoryItem, InventoryMovement, Transaction, TransactionItem
from schemas.transactions import TransactionCreate
from services.transactions import create_transaction


def _checkout(barber, payment_method, *items, notes=None):
    return {
        "barber_id": str(barber.id),
        "payment_method_id": str(payment_method.id),
        "notes": notes,
        "items": list(items),
    }


def _service_line(service, quantity=1, commission=0):
    return {"type": "SERVICE", "service_id": str(service.id), "price": 40, "quantity": quantity, "commission": commission}


def _product_line(item, quantity=1, price=25, commission=5):
    return {
        "type": "PRODUCT",
        "inventory_item_id": str(item.id),
        "price": price,
        "quantity": quantity,
        "commission": commission,
    }


async def _stock(session_maker, item_id):
    async with session_maker() as s:
        item = await s.get(InventoryItem, item_id)
        res = await s.execute(select(InventoryMovement).where(InventoryMovement.item_id == item_id))
        return item.quantity, list(res.scalars().all())


async def _count(session_maker, model):
    async with session_maker() as s:
        return (await s.execute(select(func.count()).select_from(model))).scalar_one()


async def test_product_sale_decrements_stock_and_logs_movement(
    operator_client, session_maker, operator, barber, payment_method, make_item
):
    item = await make_item(quantity="10")

    r = await operator_client.post("/transactions/", json=_checkout(barber, payment_method, _product_line(item, 3)))
    assert r.status_code == 201, r.text
    tx = r.json()

    quantity, movements = await _stock(session_maker, item.id)
    assert quantity == Decimal("7")
    assert len(movements) == 1
    m = movements[0]
    assert m.type == "out"
    assert m.quantity == Decimal("3")
    assert m.created_by == operator.id
    assert tx["id"] in m.notes
    assert m.notes == f"Venda automática - Transaction ID: {tx['id']}"


async def test_service_sale_leaves_inventory_untouched(
    operator_client, session_maker, barber, payment_method, service, make_item
):
    item = await make_item(quantity="10")

    r = await operator_client.post("/transactions/", json=_checkout(barber, payment_method, _service_line(service, 2)))
    assert r.status_code == 201, r.text

    quantity, movements = await _stock(session_maker, item.id)
    assert quantity == Decimal("10")
    assert movements == []
    assert await _count(session_maker, InventoryMovement) == 0


async def test_mixed_checkout_totals_and_lines(
    operator_client, barber, payment_method, service, make_item
):
    item = await make_item(name="Shampoo", quantity="4")

    r = await operator_client.post(
        "/transactions/",
        json=_checkout(
            barber,
            payment_method,
            _service_line(service, 1, commission=10),
            _product_line(item, 2, price=30, commission=5),
            notes="  cliente fiel  ",
        ),
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["total"] == 100.0
    assert body["commission_total"] == 20.0
    assert body["notes"] == "cliente fiel"
    assert body["barber_name"] == "João"
    assert body["payment_method_name"] == "PIX"
    assert sorted(i["type"] for i in body["items"]) == ["PRODUCT", "SERVICE"]
    product = next(i for i in body["items"] if i["type"] == "PRODUCT")
    assert product["inventory_item_name"] == "Shampoo"
    assert product["service_id"] is None


async def test_sale_beyond_stock_is_rejected_atomically(
    operator_client, session_maker, barber, payment_method, service, make_item
):
    # Stock 2, sale of 5: the whole checkout is refused and nothing is persisted
    short = await make_item(name="Cera", quantity="2")
    plenty = await make_item(name="Gel", quantity="50")

    r = await operator_client.post(
        "/transactions/",
        json=_checkout(barber, payment_method, _service_line(service), _product_line(plenty, 1), _product_line(short, 5)),
    )
    assert r.status_code == 409
    assert "Insufficient stock" in r.json()["detail"]

    assert (await _stock(session_maker, short.id))[0] == Decimal("2")
    assert (await _stock(session_maker, plenty.id))[0] == Decimal("50")
    assert await _count(session_maker, Transaction) == 0
    assert await _count(session_maker, TransactionItem) == 0
    assert await _count(session_maker, InventoryMovement) == 0


async def test_negative_stock_allowed_when_configured(
    monkeypatch, operator_client, session_maker, barber, payment_method, make_item
):
    monkeypatch.setattr(settings, "allow_negative_stock", True)
    item = await make_item(quantity="2")

    r = await operator_client.post("/transactions/", json=_checkout(barber, payment_method, _product_line(item, 5)))
    assert r.status_code == 201, r.text

    quantity, movements = await _stock(session_maker, item.id)
    assert quantity == Decimal("-3")
    assert len(movements) == 1
    assert movements[0].quantity == Decimal("5")


async def test_service_level_checkout_raises_domain_error(session_maker, operator, barber, payment_method, make_item):
    item = await make_item(quantity="1")
    payload = TransactionCreate(**_checkout(barber, payment_method, _product_line(item, 2)))

    async with session_maker() as s:
        with pytest.raises(InsufficientStockError) as exc:
            await create_transaction(s, payload, operator)
    assert exc.value.available == Decimal("1")
    assert exc.value.requested == Decimal("2")


async def test_same_product_on_two_lines_is_cumulative(
    operator_client, session_maker, barber, payment_method, make_item
):
    item = await make_item(quantity="5")

    r = await operator_client.post(
        "/transactions/",
        json=_checkout(barber, payment_method, _product_line(item, 3), _product_line(item, 3)),
    )
    assert r.status_code == 409
    assert (await _stock(session_maker, item.id))[0] == Decimal("5")

    r = await operator_client.post(
        "/transactions/",
        json=_checkout(barber, payment_method, _product_line(item, 3), _product_line(item, 2)),
    )
    assert r.status_code == 201
    quantity, movements = await _stock(session_maker, item.id)
    assert quantity == Decimal("0")
    assert len(movements) == 2


async def test_inactive_barber_is_rejected(operator_client, admin_client, barber, payment_method, service):
    r = await admin_client.patch(f"/barbers/{barber.id}", json={"active": False})
    assert r.status_code == 200

    r = await operator_client.post("/transactions/", json=_checkout(barber, payment_method, _service_line(service)))
    assert r.status_code == 400
    assert r.json()["detail"] == "Barber is inactive"


async def test_unknown_references_are_404(operator_client, barber, payment_method):
    missing = "00000000-0000-0000-0000-000000000000"
    r = await operator_client.post(
        "/transactions/",
        json=_checkout(barber, payment_method, {"type": "SERVICE", "service_id": missing, "price": 10}),
    )
    assert r.status_code == 404

    r = await operator_client.post(
        "/transactions/",
        json=_checkout(barber, payment_method, {"type": "PRODUCT", "inventory_item_id": missing, "price": 10}),
    )
    assert r.status_code == 404


async def test_empty_checkout_is_rejected(operator_client, barber, payment_method):
    r = await operator_client.post("/transactions/", json=_checkout(barber, payment_method))
    assert r.status_code == 422


async def test_list_get_and_delete(operator_client, admin_client, session_maker, barber, payment_method, service):
    r = await operator_client.post("/transactions/", json=_checkout(barber, payment_method, _service_line(service)))
    tx_id = r.json()["id"]

    r = await operator_client.get("/transactions/", params={"period": "today"})
    assert r.status_code == 200
    assert [t["id"] for t in r.json()] == [tx_id]

    r = await operator_client.get(f"/transactions/{tx_id}")
    assert r.status_code == 200
    assert r.json()["items"][0]["service_name"] == "Corte"

    r = await operator_client.delete(f"/transactions/{tx_id}")
    assert r.status_code == 403

    r = await admin_client.delete(f"/transactions/{tx_id}")
    assert r.status_code == 204
    assert await _count(session_maker, Transaction) == 0
    assert await _count(session_maker, TransactionItem) == 0


@pytest.mark.parametrize("override", [{"price": "25.001"}, {"commission": "0.005"}, {"price": -1}, {"commission": -5}])
async def test_checkout_rejects_invalid_amounts(operator_client, session_maker, barber, payment_method, make_item, override):
    item = await make_item(quantity="10")
    line = {**_product_line(item), **override}

    r = await operator_client.post("/transactions/", json=_checkout(barber, payment_method, line))
    assert r.status_code == 422

    async with session_maker() as s:
        assert (await s.execute(select(func.count(Transaction.id)))).scalar_one() == 0
        assert (await s.get(InventoryItem, item.id)).quantity == Decimal("10")
