from typing import FrozenSet

import attrs

from src.service.shared_kernel.domain.enum.user_role import UserRole


@attrs.frozen
class Principal:
    """Authenticated caller, rebuilt from the identity token (no user table lookup)."""

    id: int
    role: UserRole
    name: str = ''
    email: str = ''
    permissions: FrozenSet[str] = attrs.field(factory=frozenset, converter=frozenset)

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can_manage_event(self, host_id: int) -> bool:
        """Admins manage every event; hosts only their own."""
        return self.is_admin or (self.role == UserRole.HOST and self.id == host_id)
