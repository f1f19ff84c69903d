"""Role-based access control."""

from enum import Enum
from typing import Any, Callable

from fastapi import Depends

from rentflow.api.deps import get_current_active_user
from rentflow.core.exceptions import AuthorizationError
from rentflow.models.user import User


class UserRole(str, Enum):
    """User roles in the system."""

    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"


# Roles that operate the counter: pickups, returns, status updates
OPERATOR_ROLES = frozenset({UserRole.STAFF, UserRole.ADMIN})


def is_operator(user: User | None) -> bool:
    """Whether the user may act on bookings they do not own."""
    return user is not None and user.role in {r.value for r in OPERATOR_ROLES}


def require_role(*allowed_roles: UserRole) -> Callable[..., Any]:
    """Dependency to require specific roles."""
    allowed = {r.value for r in allowed_roles}

    async def role_checker(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in allowed:
            raise AuthorizationError(
                f"Role '{current_user.role}' is not authorized for this action"
            )
        return current_user

    return role_checker


# Staff and admins
require_operator = require_role(UserRole.STAFF, UserRole.ADMIN)
