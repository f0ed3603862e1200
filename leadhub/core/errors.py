from __future__ import annotations

from typing import Any


class LeadHubError(Exception):
    """Base class for errors that map onto the response envelope."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(LeadHubError):
    status_code = 400
    code = "validation_error"

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"{field} is required and cannot be empty", details={"field": field})


class AuthenticationError(LeadHubError):
    status_code = 401
    code = "authentication_required"

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class ForbiddenError(LeadHubError):
    status_code = 403
    code = "forbidden"


class ForbiddenFieldError(ForbiddenError):
    """Raised when a payload touches fields the caller may not write."""

    code = "forbidden_fields"

    def __init__(self, resource: str, fields: list[str]) -> None:
        self.resource = resource
        self.fields = sorted(set(fields))
        super().__init__(
            f"Forbidden fields for resource '{resource}': {', '.join(self.fields)}",
            details={"fields": self.fields},
        )


class NotFoundError(LeadHubError):
    status_code = 404
    code = "not_found"


class InfrastructureError(LeadHubError):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
