"""Organization context for request authorization."""

from dataclasses import dataclass
from nexus.models.user import User
from nexus.models.organization import Organization
from nexus.models.role import OrganizationRole

ROLE_HIERARCHY = {
    OrganizationRole.OWNER: 4,
    OrganizationRole.ADMIN: 3,
    OrganizationRole.MEMBER: 2,
    OrganizationRole.VIEWER: 1,
}


@dataclass
class OrgContext:
    """
    Authenticated user, the organization being accessed, and the user's role in it.

    Built once per request by the get_org_context dependency and passed to
    every service call; services use org.id for isolation and the role
    helpers for permission checks.
    """

    user: User
    organization: Organization
    role: OrganizationRole

    @property
    def org_id(self) -> int:
        return self.organization.id

    def has_permission(self, required_role: OrganizationRole) -> bool:
        """True if the user's role meets or exceeds required_role."""
        return ROLE_HIERARCHY[self.role] >= ROLE_HIERARCHY[required_role]

    def is_owner(self) -> bool:
        return self.role == OrganizationRole.OWNER

    def is_admin_or_higher(self) -> bool:
        return self.has_permission(OrganizationRole.ADMIN)

    def can_write(self) -> bool:
        """MEMBER or higher may create, change and delete records."""
        return self.has_permission(OrganizationRole.MEMBER)

    def __repr__(self) -> str:
        return (
            f"<OrgContext(user_id={self.user.id}, org_id={self.organization.id}, "
            f"role={self.role.value})>"
        )
