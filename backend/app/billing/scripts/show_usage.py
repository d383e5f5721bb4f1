"""Print a user's plan, quota and uploads for the current billing period.

    python -m app.billing.scripts.show_usage someone@example.com
"""

import argparse
import asyncio
import sys

from sqlalchemy import select

from app.billing.scripts._session import script_session
from app.models.user import User
from app.services.usage_service import get_usage_summary


async def main(email: str) -> int:
    async with script_session() as db:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            print(f"ERROR: No user with email {email}")
            return 1
        summary = await get_usage_summary(db, user.id)

    print(f"User:     {email} ({user.id})")
    print(f"Plan:     {summary.plan_name}")
    print(f"Period:   {summary.period_start:%Y-%m-%d} to {summary.period_end:%Y-%m-%d}")
    print(f"Uploads:  {summary.current_usage}/{summary.monthly_limit} ({summary.remaining} remaining)")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("email", help="Email of the user to inspect")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.email)))
