import logging
from sqlalchemy.orm import Session

from nexus.models.organization import Organization
from nexus.models.organization_membership import OrganizationMembership
from nexus.models.user import User
from nexus.models.org_context import OrgContext
from nexus.models.role import OrganizationRole
from nexus.repositories.organization_repository import OrganizationRepository
from nexus.repositories.organization_membership_repository import (
    OrganizationMembershipRepository,
)
from nexus.repositories.user_repository import UserRepository
from nexus.schemas.organization_schemas import (
    OrganizationUpdate,
    OrganizationInviteRequest,
    OrganizationRoleUpdate,
)
from nexus.core.exceptions import (
    NotFoundException,
    ForbiddenException,
    ValidationException,
)

logger = logging.getLogger(__name__)


class OrganizationService:
    """Service layer for organization and membership management"""

    def __init__(self, db: Session):
        self.db = db
        self.org_repo = OrganizationRepository(db)
        self.membership_repo = OrganizationMembershipRepository(db)
        self.user_repo = UserRepository(db)

    def create_personal_organization(self, user: User) -> OrganizationMembership:
        """
        Create an organization owned by `user`.

        Used the first time a user without any membership makes a request.

        Returns:
            The OWNER membership of the new organization
        """
        organization = self.org_repo.create_no_commit(
            Organization(name=f"{user.auth_user_id}'s Business")
        )
        membership = OrganizationMembership(
            org_id=organization.id,
            user_id=user.id,
            role=OrganizationRole.OWNER,
        )
        membership = self.membership_repo.create(membership)
        logger.info("Created personal organization %s for user %s", organization.id, user.id)
        return membership

    def list_user_organizations(self, user: User) -> list[dict]:
        """
        List all organizations a user belongs to, with the user's role in each.
        """
        result = []
        for membership in self.membership_repo.get_user_memberships(user.id):
            organization = self.org_repo.get_by_id(membership.org_id)
            if organization:
                result.append(
                    {
                        "id": organization.id,
                        "name": organization.name,
                        "role": membership.role,
                        "created_at": organization.created_at,
                        "updated_at": organization.updated_at,
                    }
                )
        return result

    def get_current_organization(self, context: OrgContext) -> Organization:
        return context.organization

    def update_organization(
        self, org_update: OrganizationUpdate, context: OrgContext
    ) -> Organization:
        """
        Rename the organization (OWNER only).

        Raises:
            ForbiddenException: If user is not OWNER
        """
        if not context.is_owner():
            raise ForbiddenException("Only owner can update organization details")

        context.organization.name = org_update.name
        return self.org_repo.update(context.organization)

    def _member_dict(self, membership: OrganizationMembership) -> dict:
        user = self.user_repo.get_by_id(membership.user_id)
        return {
            "id": membership.id,
            "user_id": membership.user_id,
            "auth_user_id": user.auth_user_id if user else "unknown",
            "role": membership.role,
            "created_at": membership.created_at,
        }

    def get_members(self, context: OrgContext) -> list[dict]:
        """All members of the current organization with their identity provider IDs."""
        memberships = self.membership_repo.get_org_members(context.org_id)
        return [self._member_dict(membership) for membership in memberships]

    def invite_member(
        self, invite_request: OrganizationInviteRequest, context: OrgContext
    ) -> dict:
        """
        Invite new member to the organization (ADMIN or OWNER).

        Args:
            invite_request: Invite details with auth_user_id and role
            context: Organization context

        Returns:
            Created membership with user info

        Raises:
            ForbiddenException: If user lacks admin permissions
            ValidationException: If user is already a member
        """
        if not context.is_admin_or_higher():
            raise ForbiddenException("Only admins and owners can invite members")

        # ADMINs cannot invite as OWNER
        if invite_request.role == OrganizationRole.OWNER and not context.is_owner():
            raise ForbiddenException("Only owner can invite other owners")

        user = self.user_repo.get_or_create_by_auth_id(invite_request.auth_user_id)

        existing = self.membership_repo.get_membership(user.id, context.org_id)
        if existing:
            raise ValidationException(f"User {invite_request.auth_user_id} is already a member")

        membership = OrganizationMembership(
            org_id=context.org_id,
            user_id=user.id,
            role=invite_request.role,
        )
        membership = self.membership_repo.create(membership)
        logger.info(
            "User %s invited %s to organization %s as %s",
            context.user.id,
            user.id,
            context.org_id,
            membership.role.value,
        )
        return self._member_dict(membership)

    def update_member_role(
        self, user_id: int, role_update: OrganizationRoleUpdate, context: OrgContext
    ) -> dict:
        """
        Change a member's role (OWNER only).

        Raises:
            ForbiddenException: If user is not OWNER or targets self / the owner
            NotFoundException: If membership not found
        """
        if not context.is_owner():
            raise ForbiddenException("Only owner can change member roles")

        membership = self.membership_repo.get_membership(user_id, context.org_id)
        if not membership:
            raise NotFoundException("Member not found in this organization")

        if user_id == context.user.id:
            raise ForbiddenException("Cannot change your own role")

        if membership.role == OrganizationRole.OWNER:
            raise ForbiddenException("Cannot change owner's role")

        membership.role = role_update.role
        membership = self.membership_repo.update(membership)
        return self._member_dict(membership)

    def remove_member(self, user_id: int, context: OrgContext) -> None:
        """
        Remove member from the organization (ADMIN or OWNER).

        Raises:
            ForbiddenException: If user lacks permissions or targets self / the owner
            NotFoundException: If membership not found
        """
        if not context.is_admin_or_higher():
            raise ForbiddenException("Only admins and owners can remove members")

        membership = self.membership_repo.get_membership(user_id, context.org_id)
        if not membership:
            raise NotFoundException("Member not found in this organization")

        if user_id == context.user.id:
            raise ForbiddenException("Cannot remove yourself from organization")

        if membership.role == OrganizationRole.OWNER:
            raise ForbiddenException("Cannot remove owner from organization")

        self.membership_repo.delete(membership)
        logger.info("Removed user %s from organization %s", user_id, context.org_id)
