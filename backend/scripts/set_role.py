"""
Give an existing user the admin (or operator) role.

The first admin has to be created this way since only admins can change roles
through the API:
  cd backend && PYTHONPATH=. python scripts/set_role.py owner@example.com admin
"""

from __future__ import annotations

import argparse
import asyncio

from sqlalchemy import func, select

from db.database import User, async_session_maker
from db.users import ROLES


async def main(email: str, role: str) -> int:
    async with async_session_maker() as db:
        res = await db.execute(select(User).where(func.lower(User.email) == email.strip().lower()))
        user = res.scalar_one_or_none()
        if not user:
            print(f"No user with e-mail {email}")
            return 1
        user.role = role
        await db.commit()
        print(f"{user.email} is now {role}")
        return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email")
    parser.add_argument("role", choices=ROLES)
    args = parser.parse_args()
    raise SystemExit(asyncio.run(main(args.email, args.role)))
