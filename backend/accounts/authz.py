# accounts/authz.py
"""
Authorization utilities.

Provides:
- ActorContext: Immutable context for the current request
- resolve_actor: Extract actor context from request
- require: Check permissions and raise if not granted

Permissions come from the user's role (accounts.permission_defaults).
Superusers are treated as admins.
"""

from dataclasses import dataclass
from typing import FrozenSet

from django.core.exceptions import PermissionDenied
from rest_framework.exceptions import NotAuthenticated

from accounts.models import User
from accounts.permission_defaults import ROLE_DEFAULTS


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor.

    Passed to commands and policies so they know who is acting.
    The user is recorded as `created_by` on everything the actor posts.

    Attributes:
        user: The authenticated user
        role: The user's role at the time the context was built
        perms: Permission codes granted to that role
    """
    user: object  # User model
    role: str
    perms: FrozenSet[str]

    def has(self, code: str) -> bool:
        if not getattr(self.user, "is_active", True):
            return False
        return code in self.perms

    @property
    def is_admin(self) -> bool:
        return self.role == User.Role.ADMIN


def actor_for_user(user) -> ActorContext:
    """Build an ActorContext straight from a user (commands, tasks, tests)."""
    role = User.Role.ADMIN if user.is_superuser else user.role
    return ActorContext(
        user=user,
        role=role,
        perms=frozenset(ROLE_DEFAULTS.get(role, ())),
    )


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    The role is read from the freshly authenticated user on every
    request, so role changes take effect immediately.

    Raises:
        NotAuthenticated: If user is not authenticated
    """
    user = getattr(request, "user", None)

    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication required.")

    return actor_for_user(user)


def require(actor: ActorContext, code: str) -> None:
    """
    Require that the actor has a specific permission.

    Raises:
        PermissionDenied: If permission is not granted

    Example:
        require(actor, "journal.post")
        # If we get here, permission is granted
    """
    if not actor.has(code):
        raise PermissionDenied(f"Permission denied: {code}")
