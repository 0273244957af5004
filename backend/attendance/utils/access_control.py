from dataclasses import dataclass

from attendance.errors import Forbidden, Unauthorized
from attendance.models import UserRole

ANY_ROLE = (UserRole.admin, UserRole.teacher)


@dataclass(frozen=True)
class Caller:
    """Identity of whoever is invoking an operation, resolved once per request."""
    user_id: int
    username: str
    role: UserRole

    @classmethod
    def from_user(cls, user):
        return cls(user_id=user.id, username=user.username, role=user.role)


def authorize(caller, *allowed_roles):
    """
    Checks an explicit caller against the roles allowed for an operation.
    - No caller ➜ Unauthorized
    - Role outside allowed_roles ➜ Forbidden
    No roles given means any authenticated role.
    """
    if caller is None:
        raise Unauthorized()

    allowed = {UserRole(r) if isinstance(r, str) else r for r in allowed_roles} or set(ANY_ROLE)
    if caller.role not in allowed:
        if allowed == {UserRole.admin}:
            raise Forbidden("Admin access required")
        raise Forbidden()
    return caller
