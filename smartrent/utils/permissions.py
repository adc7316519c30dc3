"""
Authorization policy.

A closed set of actions evaluated against the caller's freshly loaded role and,
for owner-scoped actions, whether the caller owns the resource.
"""

from typing import Optional, Union
from smartrent.models.user import UserRole
from smartrent.utils.exceptions import InsufficientPermissionsError
import enum


class Action(str, enum.Enum):
    """Operations that are subject to authorization."""
    CREATE_LISTING = "create listings"
    UPDATE_LISTING = "update this listing"
    DELETE_LISTING = "delete this listing"
    MODERATE_LISTING = "moderate listings"
    VIEW_ANALYTICS = "view analytics"
    MANAGE_FAVORITES = "manage favorites"
    WRITE_REVIEW = "write reviews"


_ROLE_ACTIONS = {
    Action.CREATE_LISTING: {UserRole.OWNER, UserRole.ADMIN},
    Action.UPDATE_LISTING: {UserRole.USER, UserRole.OWNER, UserRole.ADMIN},
    Action.DELETE_LISTING: {UserRole.USER, UserRole.OWNER, UserRole.ADMIN},
    Action.MODERATE_LISTING: {UserRole.ADMIN},
    Action.VIEW_ANALYTICS: {UserRole.ADMIN},
    Action.MANAGE_FAVORITES: {UserRole.USER, UserRole.OWNER, UserRole.ADMIN},
    Action.WRITE_REVIEW: {UserRole.USER, UserRole.OWNER, UserRole.ADMIN},
}

# Actions that additionally require the caller to own the resource, whatever the role
_OWNERSHIP_REQUIRED = {Action.UPDATE_LISTING, Action.DELETE_LISTING}


def _coerce_role(role: Union[UserRole, str, None]) -> Optional[UserRole]:
    if role is None or isinstance(role, UserRole):
        return role
    try:
        return UserRole(role)
    except ValueError:
        return None


def is_allowed(
    role: Union[UserRole, str, None],
    action: Action,
    is_owner: Optional[bool] = None
) -> bool:
    """
    Decide whether a caller may perform an action.

    Args:
        role: Caller's role as stored in the users table
        action: Action being attempted
        is_owner: Whether the caller owns the target resource; None when not yet known

    Returns:
        True if allowed. For owner-scoped actions an unknown ownership (None)
        is allowed so the data layer can scope the write to the caller's rows.
    """
    resolved = _coerce_role(role)
    if resolved is None:
        return False

    if resolved not in _ROLE_ACTIONS[action]:
        return False

    if action in _OWNERSHIP_REQUIRED and is_owner is False:
        return False

    return True


def authorize(
    role: Union[UserRole, str, None],
    action: Action,
    is_owner: Optional[bool] = None
) -> None:
    """
    Enforce the policy.

    The listing and review services call this before the owner is known and
    pass no `is_owner`. Ownership is then enforced by the repositories:
    `update_owned` and `delete_owned` filter on the caller's id, so a
    non-owner's write matches no row.

    Raises:
        InsufficientPermissionsError: If the action is denied
    """
    if not is_allowed(role, action, is_owner):
        raise InsufficientPermissionsError(action.value)
