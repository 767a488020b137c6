"""
Per-table access policies.

Each (table, operation) pair maps to a predicate over the authenticated user.
Routers declare what they touch with `Depends(require("barbers", "insert"))`;
pairs missing from POLICIES are denied.

Row-scoped rules (e.g. "created_by must be the caller") are enforced by the
service layer always stamping the caller's id, so the predicates here only
need the user.
"""
import logging
from typing import Callable, Dict, Tuple

from fastapi import Depends, HTTPException, status

from core.auth import current_active_user
from db.users import User

logger = logging.getLogger(__name__)

SELECT = "select"
INSERT = "insert"
UPDATE = "update"
DELETE = "delete"

Predicate = Callable[[User], bool]


def authenticated(user: User) -> bool:
    return user is not None and bool(user.is_active)


def admin(user: User) -> bool:
    return authenticated(user) and user.is_admin


def _admin_managed(table: str) -> Dict[Tuple[str, str], Predicate]:
    return {
        (table, SELECT): authenticated,
        (table, INSERT): admin,
        (table, UPDATE): admin,
        (table, DELETE): admin,
    }


POLICIES: Dict[Tuple[str, str], Predicate] = {
    **_admin_managed("barbers"),
    **_admin_managed("services"),
    **_admin_managed("payment_methods"),
    ("transactions", SELECT): authenticated,
    ("transactions", INSERT): authenticated,
    ("transactions", UPDATE): admin,
    ("transactions", DELETE): admin,
    ("transaction_items", SELECT): authenticated,
    ("transaction_items", INSERT): authenticated,
    ("inventory_items", SELECT): authenticated,
    ("inventory_items", INSERT): authenticated,
    ("inventory_items", UPDATE): authenticated,
    ("inventory_items", DELETE): authenticated,
    ("inventory_movements", SELECT): authenticated,
    ("inventory_movements", INSERT): authenticated,
    # listing every profile / changing roles; own-row access is handled by /users/me
    ("users", SELECT): admin,
    ("users", UPDATE): admin,
}


def is_allowed(user: User, table: str, operation: str) -> bool:
    predicate = POLICIES.get((table, operation))
    if predicate is None:
        return False
    return predicate(user)


def require(table: str, operation: str):
    """FastAPI dependency: resolve the current user and check the policy."""

    async def _check(user: User = Depends(current_active_user)) -> User:
        if not is_allowed(user, table, operation):
            logger.warning("Denied %s on %s for user %s", operation, table, getattr(user, "id", None))
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed")
        return user

    return _check
