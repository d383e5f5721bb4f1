"""Seed the subscription plan catalog.

Safe to run repeatedly; plans that already exist (by name) are left alone.

Run inside the backend container:
    python -m app.billing.scripts.seed_plans
"""

import asyncio

from app.billing.plans import seed_subscription_plans
from app.billing.scripts._session import script_session


async def main() -> None:
    print("Seeding subscription plans...")
    async with script_session() as db:
        results = await seed_subscription_plans(db)

    for result in results:
        if result.created:
            print(f"  Created {result.name} plan")
        else:
            print(f"  {result.name} plan already exists")
    print("Plans seeded successfully!")


if __name__ == "__main__":
    asyncio.run(main())
