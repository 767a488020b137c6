from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.policies import require
from db.database import get_async_session
from db.users import User
from schemas.reports import CommissionReport, DashboardStats
from schemas.transactions import Period
from services import reports as report_service

router = APIRouter()


@router.get("/dashboard", response_model=DashboardStats)
async def dashboard(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("transactions", "select")),
):
    """Revenue today / this week (from Sunday) / this month, and today's transaction count."""
    return DashboardStats(**await report_service.dashboard_stats(db))


@router.get("/commissions", response_model=CommissionReport)
async def commissions(
    period: Period = Query("month"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(require("transaction_items", "select")),
):
    return CommissionReport(**await report_service.commission_report(db, period))
