from pydantic import BaseModel
from typing import Optional
from uuid import UUID


class PaymentMethodRead(BaseModel):
    id: UUID
    name: str
    active: bool


class PaymentMethodCreate(BaseModel):
    name: str
    active: bool = True


class PaymentMethodUpdate(BaseModel):
    name: Optional[str] = None
    active: Optional[bool] = None
