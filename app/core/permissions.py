"""
Capability checks for reservation records.

Every RSVP read-by-id and mutation goes through ``require_rsvp_access``. A
caller is allowed when any of the registered policies grants access; the
policies cover record owners and administrators.
"""
from dataclasses import dataclass
from typing import Optional, Sequence
from app.core.exceptions import AccessDenied

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Principal:
    """An externally authenticated caller, built from verified token claims."""

    user_id: str
    role: str = "user"
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


class AccessPolicy:
    def allows(self, principal: Principal, owner_id: str) -> bool:
        raise NotImplementedError


class OwnerPolicy(AccessPolicy):
    def allows(self, principal: Principal, owner_id: str) -> bool:
        return str(principal.user_id) == str(owner_id)


class AdministratorPolicy(AccessPolicy):
    def allows(self, principal: Principal, owner_id: str) -> bool:
        return principal.is_admin


RSVP_POLICIES: Sequence[AccessPolicy] = (AdministratorPolicy(), OwnerPolicy())


def can_access(principal: Principal, owner_id: str, policies: Sequence[AccessPolicy] = RSVP_POLICIES) -> bool:
    return any(policy.allows(principal, owner_id) for policy in policies)


def require_rsvp_access(principal: Principal, owner_id: str) -> None:
    """Raise AccessDenied unless the principal owns the record or is an administrator."""
    if not can_access(principal, owner_id):
        raise AccessDenied()


def visible_owner(principal: Principal) -> Optional[str]:
    """
    Owner filter to apply on list reads.

    Administrators see every record (None); anyone else only their own.
    """
    if principal.is_admin:
        return None
    return str(principal.user_id)
