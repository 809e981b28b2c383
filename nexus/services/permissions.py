from nexus.core.exceptions import ForbiddenException
from nexus.models.org_context import OrgContext


def require_write(context: OrgContext) -> None:
    """
    Raise unless the caller may change records in the organization.

    Raises:
        ForbiddenException: If the caller is a VIEWER
    """
    if not context.can_write():
        raise ForbiddenException("Viewers have read-only access")
