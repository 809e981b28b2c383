from pydantic import BaseModel, Field
from datetime import datetime
from nexus.models.role import OrganizationRole


class OrganizationResponse(BaseModel):
    """Organization details response"""

    id: int
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserOrganizationResponse(BaseModel):
    """Organization the user belongs to, with the user's role in it"""

    id: int
    name: str
    role: OrganizationRole
    created_at: datetime
    updated_at: datetime


class OrganizationUpdate(BaseModel):
    """Rename organization (OWNER only)"""

    name: str = Field(..., min_length=1, max_length=255)


class OrganizationMemberResponse(BaseModel):
    """Organization member with identity provider user ID"""

    id: int
    user_id: int
    auth_user_id: str
    role: OrganizationRole
    created_at: datetime

    model_config = {"from_attributes": True}


class OrganizationInviteRequest(BaseModel):
    """Invite new member to the organization"""

    auth_user_id: str = Field(..., description="Identity provider user ID to invite", min_length=1)
    role: OrganizationRole = Field(
        default=OrganizationRole.MEMBER, description="Role to assign (default: MEMBER)"
    )


class OrganizationRoleUpdate(BaseModel):
    """Change a member's role (OWNER only)"""

    role: OrganizationRole = Field(..., description="New role to assign")


class OrganizationMemberRemoveResponse(BaseModel):
    message: str
    removed_user_id: int
