"""Shared API dependencies — single import point for all routers.

Re-exports database session, authentication, billing and gateway
dependencies so that router modules can import everything they need from
one place::

    from app.api.deps import get_db, get_current_user
"""

from app.auth.dependencies import (
    get_admin_user,
    get_current_user,
    get_optional_user,
)
from app.billing.dependencies import check_upload_quota
from app.billing.stripe_client import get_stripe_gateway
from app.database import get_db

__all__ = [
    "get_db",
    "get_current_user",
    "get_optional_user",
    "get_admin_user",
    "check_upload_quota",
    "get_stripe_gateway",
]
