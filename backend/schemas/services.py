from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID


class ServiceRead(BaseModel):
    id: UUID
    name: str
    price: float
    duration_minutes: int
    active: bool


class ServiceCreate(BaseModel):
    name: str
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    duration_minutes: int = 30
    active: bool = True


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    duration_minutes: Optional[int] = None
    active: Optional[bool] = None
