"""Reset a user's upload count for the current billing period.

    python -m app.billing.scripts.reset_usage someone@example.com
"""

import argparse
import asyncio
import sys

from app.billing.scripts._session import script_session
from app.services.usage_service import reset_usage_by_email


async def main(email: str) -> int:
    async with script_session() as db:
        outcome = await reset_usage_by_email(db, email)

    if outcome.status == "user_not_found":
        print(f"ERROR: No user with email {email}")
        return 1
    if outcome.status == "no_usage":
        print(f"No usage recorded for {email} this period, nothing to reset")
        return 0

    print(f"Reset upload count for {email} (user {outcome.user_id}): {outcome.previous_count} -> 0")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("email", help="Email of the user whose usage should be reset")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.email)))
