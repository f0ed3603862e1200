from leadhub.platform.security.context import ROLE_ADMIN, ROLE_USER, Identity
from leadhub.platform.security.repository import BaseRepository
from leadhub.platform.security.scope import OwnerScope, SubmissionScope, UnrestrictedScope, resolve_scope

__all__ = [
    "ROLE_ADMIN",
    "ROLE_USER",
    "Identity",
    "BaseRepository",
    "OwnerScope",
    "SubmissionScope",
    "UnrestrictedScope",
    "resolve_scope",
]
