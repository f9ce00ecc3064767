"""In-memory directory of profiles: manager lookups and role partitioning."""

from __future__ import annotations

import uuid
from typing import Iterable, Optional

from leavedesk.common.constants import UserRole
from leavedesk.common.exceptions import NotFoundException
from leavedesk.profiles.models import Profile


class ProfileDirectory:
    """Read-only view over a snapshot of profiles, indexed by id."""

    def __init__(self, profiles: Iterable[Profile]) -> None:
        self._by_id: dict[uuid.UUID, Profile] = {p.id: p for p in profiles}

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, profile_id: Optional[uuid.UUID]) -> Optional[Profile]:
        if profile_id is None:
            return None
        return self._by_id.get(profile_id)

    def require(self, profile_id: uuid.UUID) -> Profile:
        profile = self.get(profile_id)
        if profile is None:
            raise NotFoundException("Profile", str(profile_id))
        return profile

    def department_of(self, profile_id: uuid.UUID) -> Optional[str]:
        profile = self.get(profile_id)
        return profile.department if profile else None

    def direct_reports(self, manager_id: uuid.UUID) -> list[Profile]:
        return sorted(
            (p for p in self._by_id.values() if p.manager_id == manager_id),
            key=lambda p: (p.full_name, str(p.id)),
        )

    def partition_by_role(self) -> dict[UserRole, list[Profile]]:
        groups: dict[UserRole, list[Profile]] = {role: [] for role in UserRole}
        for profile in self._by_id.values():
            groups.setdefault(profile.role, []).append(profile)
        return groups

    def departments(self) -> list[str]:
        return sorted({p.department for p in self._by_id.values() if p.department})

    def managers(self, exclude_id: Optional[uuid.UUID] = None) -> list[Profile]:
        """Profiles eligible as someone's manager, ordered by name."""
        return sorted(
            (
                p for p in self._by_id.values()
                if p.role == UserRole.manager and p.id != exclude_id
            ),
            key=lambda p: (p.full_name, str(p.id)),
        )
