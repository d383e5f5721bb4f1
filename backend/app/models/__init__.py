"""SQLAlchemy models for LuminaryLab.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from app.models.preferences import UserPreferences
from app.models.preset import Preset
from app.models.project import Image, Project
from app.models.subscription import SubscriptionPlan, UserSubscription
from app.models.usage import UsageTracking
from app.models.user import User

__all__ = [
    "Image",
    "Preset",
    "Project",
    "SubscriptionPlan",
    "UsageTracking",
    "User",
    "UserPreferences",
    "UserSubscription",
]
