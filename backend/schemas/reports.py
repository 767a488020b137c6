from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID


class DashboardStats(BaseModel):
    daily_revenue: float
    weekly_revenue: float
    monthly_revenue: float
    daily_transactions: int


class BarberCommission(BaseModel):
    barber_id: UUID
    barber_name: Optional[str] = None
    transactions: int
    revenue: float
    commission: float


class CommissionReport(BaseModel):
    period: str
    total_revenue: float
    total_commission: float
    barbers: List[BarberCommission]
