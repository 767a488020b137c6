"""
Insert the default payment methods (Dinheiro, débito, crédito, PIX) if missing.

Run locally:
  cd backend && PYTHONPATH=. python scripts/seed_payment_methods.py

It uses the same DATABASE_* env vars as the backend (dotenv supported by core.config).
"""

from __future__ import annotations

import asyncio

from sqlalchemy import func, select

from db.database import DEFAULT_PAYMENT_METHODS, PaymentMethod, async_session_maker, create_db_and_tables


async def main() -> None:
    await create_db_and_tables()
    async with async_session_maker() as db:
        res = await db.execute(select(func.lower(PaymentMethod.name)))
        existing = set(res.scalars().all())

        added = 0
        for name in DEFAULT_PAYMENT_METHODS:
            if name.lower() in existing:
                continue
            db.add(PaymentMethod(name=name, active=True))
            added += 1
        await db.commit()
        print(f"Payment methods added: {added}, already present: {len(DEFAULT_PAYMENT_METHODS) - added}")


if __name__ == "__main__":
    asyncio.run(main())
