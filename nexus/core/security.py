from jose import JWTError, jwt
from nexus.config import settings
from nexus.core.exceptions import UnauthorizedException


def decode_jwt(token: str) -> dict:
    """
    Decode and validate JWT token using shared SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub' (user_id), 'exp' and optional 'org_id'

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")

    if payload.get("exp") is None:
        raise UnauthorizedException("Token missing expiration")

    if payload.get("sub") is None:
        raise UnauthorizedException("Token missing user identifier")

    return payload


def extract_user_id(token: str) -> str:
    """Extract auth_user_id from JWT token"""
    payload = decode_jwt(token)
    return payload["sub"]


def extract_org_id(payload: dict) -> int | None:
    """
    Read the optional 'org_id' claim.

    Raises:
        UnauthorizedException: If the claim is present but not an integer
    """
    org_id = payload.get("org_id")
    if org_id is None:
        return None
    try:
        return int(org_id)
    except (TypeError, ValueError):
        raise UnauthorizedException("Token has malformed organization identifier")
