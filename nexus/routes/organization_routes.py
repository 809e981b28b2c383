from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from nexus.database import get_db
from nexus.dependencies import get_org_context, get_current_user
from nexus.models.org_context import OrgContext
from nexus.models.user import User
from nexus.services.organization_service import OrganizationService
from nexus.schemas.organization_schemas import (
    OrganizationResponse,
    OrganizationUpdate,
    OrganizationMemberResponse,
    OrganizationInviteRequest,
    OrganizationRoleUpdate,
    OrganizationMemberRemoveResponse,
    UserOrganizationResponse,
)

router = APIRouter()


@router.get("", response_model=list[UserOrganizationResponse])
async def list_user_organizations(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List all organizations the authenticated user belongs to.

    Does not require an organization context; useful for switching
    organizations (pass the chosen id as the token's org_id claim).
    """
    service = OrganizationService(db)
    return service.list_user_organizations(user)


@router.get("/me", response_model=OrganizationResponse)
async def get_current_organization(
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = OrganizationService(db)
    return service.get_current_organization(context)


@router.patch("/me", response_model=OrganizationResponse)
async def update_organization(
    org_update: OrganizationUpdate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Rename the current organization.

    - **Requires OWNER permissions**
    """
    service = OrganizationService(db)
    return service.update_organization(org_update, context)


@router.get("/me/members", response_model=list[OrganizationMemberResponse])
async def list_members(
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """List all members of the current organization. Available to every member."""
    service = OrganizationService(db)
    return service.get_members(context)


@router.post(
    "/me/members",
    response_model=OrganizationMemberResponse,
    status_code=status.HTTP_201_CREATED,
)
async def invite_member(
    invite_request: OrganizationInviteRequest,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Invite new member to the organization.

    - **Requires ADMIN or OWNER permissions**
    - Default role: MEMBER
    - Only OWNER can invite as OWNER
    - User will be auto-created if doesn't exist
    """
    service = OrganizationService(db)
    return service.invite_member(invite_request, context)


@router.patch("/me/members/{user_id}/role", response_model=OrganizationMemberResponse)
async def update_member_role(
    user_id: int,
    role_update: OrganizationRoleUpdate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Update member's role.

    - **Requires OWNER permissions**
    - Cannot change OWNER's role
    - Cannot change your own role
    """
    service = OrganizationService(db)
    return service.update_member_role(user_id, role_update, context)


@router.delete(
    "/me/members/{user_id}",
    response_model=OrganizationMemberRemoveResponse,
    status_code=status.HTTP_200_OK,
)
async def remove_member(
    user_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Remove member from the organization.

    - **Requires ADMIN or OWNER permissions**
    - Cannot remove OWNER
    - Cannot remove yourself
    """
    service = OrganizationService(db)
    service.remove_member(user_id, context)

    return {
        "message": "Member removed successfully",
        "removed_user_id": user_id,
    }
