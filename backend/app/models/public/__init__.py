"""Account-level models (users, organizations, stores)."""

from app.models.public.organization import OnboardingStatus, Organization, Store
from app.models.public.user import User

__all__ = ["OnboardingStatus", "Organization", "Store", "User"]
