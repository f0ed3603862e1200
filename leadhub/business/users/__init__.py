from leadhub.business.users.models import AppUser
from leadhub.business.users.repository import UserRepository
from leadhub.business.users.schemas import UserRead, UserSummary

__all__ = [
    "AppUser",
    "UserRepository",
    "UserRead",
    "UserSummary",
]
