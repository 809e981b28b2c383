from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from nexus.core.security import decode_jwt, extract_org_id, extract_user_id
from nexus.core.exceptions import UnauthorizedException
from nexus.database import get_db
from nexus.models.org_context import OrgContext
from nexus.models.user import User
from nexus.repositories.organization_membership_repository import (
    OrganizationMembershipRepository,
)
from nexus.repositories.user_repository import UserRepository
from nexus.services.organization_service import OrganizationService

security = HTTPBearer()


def _unauthorized(e: UnauthorizedException) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=str(e),
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security), db: Session = Depends(get_db)
) -> User:
    """
    FastAPI dependency to validate JWT and get/create user.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using shared SECRET_KEY
    3. Extract auth_user_id from 'sub' claim
    4. Get or auto-create User record
    5. Return User object for use in endpoints

    Raises:
        HTTPException 401: If token invalid or expired
    """
    try:
        auth_user_id = extract_user_id(credentials.credentials)
    except UnauthorizedException as e:
        raise _unauthorized(e)

    user_repo = UserRepository(db)
    return user_repo.get_or_create_by_auth_id(auth_user_id)


async def get_org_context(
    credentials: HTTPAuthorizationCredentials = Depends(security), db: Session = Depends(get_db)
) -> OrgContext:
    """
    FastAPI dependency resolving the organization a request acts on.

    Flow:
    1. Validate JWT and get/create the user (as get_current_user)
    2. If the token carries an 'org_id' claim, require a membership there
    3. Otherwise use the user's oldest membership
    4. A user with no membership at all gets a personal organization as OWNER

    Raises:
        HTTPException 401: If token invalid or expired
        HTTPException 403: If the user is not a member of the requested organization
    """
    try:
        payload = decode_jwt(credentials.credentials)
        org_id = extract_org_id(payload)
    except UnauthorizedException as e:
        raise _unauthorized(e)

    user = UserRepository(db).get_or_create_by_auth_id(payload["sub"])
    membership_repo = OrganizationMembershipRepository(db)

    if org_id is not None:
        membership = membership_repo.get_membership(user.id, org_id)
        if not membership:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not a member of this organization",
            )
    else:
        memberships = membership_repo.get_user_memberships(user.id)
        if memberships:
            membership = memberships[0]
        else:
            membership = OrganizationService(db).create_personal_organization(user)

    return OrgContext(user=user, organization=membership.organization, role=membership.role)
