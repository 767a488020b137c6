from pydantic import BaseModel
from typing import Optional
from uuid import UUID


class BarberRead(BaseModel):
    id: UUID
    name: str
    active: bool


class BarberCreate(BaseModel):
    name: str
    active: bool = True


class BarberUpdate(BaseModel):
    name: Optional[str] = None
    active: Optional[bool] = None
