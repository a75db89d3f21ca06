"""Role labels and the capability model derived from them.

Capabilities are computed once per identity resolution from the role set and
handed to whoever needs them. They drive which admin panels mount; the API
guards re-check them on every mutating request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional


class Role:
    ADMINISTRATOR = "administrator"
    TENDER_MANAGER = "tender_manager"
    LEGAL_MANAGER = "legal_manager"


ALL_ROLES = frozenset({Role.ADMINISTRATOR, Role.TENDER_MANAGER, Role.LEGAL_MANAGER})


@dataclass(frozen=True)
class Capabilities:
    is_administrator: bool = False
    can_manage_tenders: bool = False
    can_manage_legal_content: bool = False

    @property
    def has_console_access(self) -> bool:
        return self.is_administrator or self.can_manage_tenders or self.can_manage_legal_content

    def to_dict(self) -> dict:
        return {
            "is_administrator": self.is_administrator,
            "can_manage_tenders": self.can_manage_tenders,
            "can_manage_legal_content": self.can_manage_legal_content,
        }


def capabilities_for(roles: Iterable[str]) -> Capabilities:
    role_set = frozenset(roles)
    is_admin = Role.ADMINISTRATOR in role_set
    return Capabilities(
        is_administrator=is_admin,
        can_manage_tenders=is_admin or Role.TENDER_MANAGER in role_set,
        can_manage_legal_content=is_admin or Role.LEGAL_MANAGER in role_set,
    )


LEGAL_PANELS = ("leadership", "laws", "legal_school", "lawyers")
TENDER_PANELS = ("tenders", "tender_questions", "tender_responses", "enterprises")


def visible_panels(capabilities: Capabilities) -> List[str]:
    """Admin console panels shown for `capabilities`, in console order.

    No capability at all means no console.
    """
    if not capabilities.has_console_access:
        return []
    panels = ["statistics"]
    if capabilities.can_manage_legal_content:
        panels.extend(LEGAL_PANELS)
    if capabilities.can_manage_tenders:
        panels.extend(TENDER_PANELS)
    panels.append("feedback")
    if capabilities.is_administrator:
        panels.append("users")
    return panels


@dataclass(frozen=True)
class RoleResolution:
    """Outcome of resolving one identity's roles.

    `available` is False when the lookup itself failed; roles are then empty
    and callers must show an access-unavailable state instead of a denial.
    """

    identity_id: Optional[str]
    roles: FrozenSet[str] = frozenset()
    available: bool = True
    capabilities: Capabilities = field(default_factory=Capabilities)

    @classmethod
    def of(cls, identity_id: Optional[str], roles: Iterable[str], available: bool = True) -> "RoleResolution":
        role_set = frozenset(roles)
        return cls(
            identity_id=identity_id,
            roles=role_set,
            available=available,
            capabilities=capabilities_for(role_set),
        )

    def to_dict(self) -> dict:
        return {
            "identity_id": self.identity_id,
            "roles": sorted(self.roles),
            "available": self.available,
            "capabilities": self.capabilities.to_dict(),
            "panels": visible_panels(self.capabilities),
        }


__all__ = [
    "Role",
    "ALL_ROLES",
    "Capabilities",
    "RoleResolution",
    "capabilities_for",
    "visible_panels",
    "LEGAL_PANELS",
    "TENDER_PANELS",
]
