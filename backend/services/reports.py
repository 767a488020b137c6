"""Revenue and commission figures for the dashboard and reports screens."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import Barber, Transaction, TransactionItem

PERIODS = ("today", "week", "month", "all")


def utcnow() -> datetime:
    # Timestamps are stored as naive UTC (server now())
    return datetime.now(timezone.utc).replace(tzinfo=None)


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime) -> datetime:
    # Weeks start on Sunday (pt-BR calendar)
    today = start_of_day(now)
    return today - timedelta(days=(today.weekday() + 1) % 7)


def start_of_month(now: datetime) -> datetime:
    return start_of_day(now).replace(day=1)


def period_start(period: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Lower bound for a report period; None means no bound.

    'week' is a rolling 7 days here, unlike the dashboard's calendar week.
    """
    now = now or utcnow()
    if period == "today":
        return start_of_day(now)
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return start_of_month(now)
    if period == "all":
        return None
    raise ValueError(f"Unknown period: {period}")


async def _revenue_since(db: AsyncSession, since: datetime) -> tuple[Decimal, int]:
    res = await db.execute(
        select(func.coalesce(func.sum(Transaction.total), 0), func.count(Transaction.id))
        .where(Transaction.created_at >= since)
    )
    total, count = res.one()
    return Decimal(str(total or 0)), int(count or 0)


async def dashboard_stats(db: AsyncSession, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    daily, daily_count = await _revenue_since(db, start_of_day(now))
    weekly, _ = await _revenue_since(db, start_of_week(now))
    monthly, _ = await _revenue_since(db, start_of_month(now))
    return {
        "daily_revenue": float(daily),
        "weekly_revenue": float(weekly),
        "monthly_revenue": float(monthly),
        "daily_transactions": daily_count,
    }


async def commission_report(db: AsyncSession, period: str, now: Optional[datetime] = None) -> dict:
    since = period_start(period, now)

    revenue_stmt = select(
        Transaction.barber_id,
        func.count(Transaction.id),
        func.coalesce(func.sum(Transaction.total), 0),
    ).group_by(Transaction.barber_id)

    commission_stmt = (
        select(
            Transaction.barber_id,
            func.coalesce(func.sum(func.coalesce(TransactionItem.commission, 0) * TransactionItem.quantity), 0),
        )
        .join(TransactionItem, TransactionItem.transaction_id == Transaction.id)
        .group_by(Transaction.barber_id)
    )
    if since is not None:
        revenue_stmt = revenue_stmt.where(Transaction.created_at >= since)
        commission_stmt = commission_stmt.where(Transaction.created_at >= since)

    revenue_rows = (await db.execute(revenue_stmt)).all()
    commission_by_barber = {
        barber_id: Decimal(str(c or 0)) for barber_id, c in (await db.execute(commission_stmt)).all()
    }

    names = {}
    if revenue_rows:
        res = await db.execute(select(Barber.id, Barber.name).where(Barber.id.in_([r[0] for r in revenue_rows])))
        names = dict(res.all())

    barbers = []
    for barber_id, count, revenue in revenue_rows:
        barbers.append(
            {
                "barber_id": barber_id,
                "barber_name": names.get(barber_id),
                "transactions": int(count),
                "revenue": float(Decimal(str(revenue or 0))),
                "commission": float(commission_by_barber.get(barber_id, Decimal("0"))),
            }
        )
    barbers.sort(key=lambda b: (-b["revenue"], (b["barber_name"] or "").lower()))

    return {
        "period": period,
        "total_revenue": sum(b["revenue"] for b in barbers),
        "total_commission": sum(b["commission"] for b in barbers),
        "barbers": barbers,
    }
