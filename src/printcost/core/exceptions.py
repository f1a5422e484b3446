import logging
from typing import Any, Dict, Optional

from fastapi import status

logger = logging.getLogger(__name__)


class PrintCostError(Exception):
    """Base exception for all domain errors.

    `status_code` and `public_message` describe how the error is surfaced at
    the HTTP boundary. Errors flagged `internal` are logged with full detail
    and answered with a generic message.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    public_message: Optional[str] = None
    internal: bool = False

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_response(self) -> Dict[str, Any]:
        """Convert to API response format."""
        if self.internal:
            return {"detail": "An unexpected error occurred"}
        return {"detail": self.public_message or self.message}


class ValidationFailure(PrintCostError):
    """A request that is well formed but breaks a business rule."""
    status_code = status.HTTP_400_BAD_REQUEST


class PlanLimitExceeded(ValidationFailure):
    """Sheet body exceeds the owner's plan quota."""

    def __init__(self, reason: str, context: Optional[Dict[str, Any]] = None):
        self.reason = reason
        super().__init__(reason, context)


class InvalidProfileData(ValidationFailure):
    pass


class EmailAlreadyRegistered(ValidationFailure):
    def __init__(self, email: str):
        super().__init__("Email already registered", {"email": email})


class InvalidCredentials(PrintCostError):
    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Invalid credentials"


class NotFound(PrintCostError):
    status_code = status.HTTP_404_NOT_FOUND


class SheetNotFound(NotFound):
    """Raised for missing sheets and for sheets owned by someone else."""

    def __init__(self, sheet_id: Any):
        super().__init__("Sheet not found", {"sheet_id": str(sheet_id)})


class RoleNotFound(NotFound):
    def __init__(self, role_id: Any):
        super().__init__("Role not found", {"role_id": str(role_id)})


class PermissionNotFound(NotFound):
    def __init__(self, permission_ids: list):
        super().__init__(
            "Permission not found",
            {"permission_ids": [str(p) for p in permission_ids]},
        )


class UserNotFound(NotFound):
    """Unknown user id.

    Behind an authenticated request this should not happen, so sheet
    operations raise it with `internal=True`.
    """

    def __init__(self, user_id: Any, internal: bool = False):
        self.internal = internal
        if internal:
            self.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        super().__init__("User not found", {"user_id": str(user_id)})


class UnknownPlanError(PrintCostError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    internal = True

    def __init__(self, tier: Any):
        super().__init__(f"Unknown plan tier: {tier!r}", {"tier": str(tier)})


class DefaultRoleMissing(PrintCostError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    internal = True

    def __init__(self, role_name: str):
        super().__init__(
            f"Default role '{role_name}' not found, run the seed first",
            {"role": role_name},
        )
