from fastapi_users.db import SQLAlchemyBaseUserTableUUID
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func
from .database import Base


# 'admin' | 'operator'
ROLE_ADMIN = "admin"
ROLE_OPERATOR = "operator"
ROLES = (ROLE_ADMIN, ROLE_OPERATOR)


class User(SQLAlchemyBaseUserTableUUID, Base):
    """Auth user merged with the staff profile (display name + role)."""
    __tablename__ = "users"

    name = Column(String, nullable=False, default="")
    role = Column(Text, nullable=False, default=ROLE_OPERATOR, server_default=ROLE_OPERATOR, index=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN or bool(self.is_superuser)

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "is_active": self.is_active,
        }