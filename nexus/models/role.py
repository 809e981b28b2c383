"""Organization role enum for role-based access control."""

from enum import Enum as PyEnum


class OrganizationRole(str, PyEnum):
    """
    Organization membership roles with hierarchical permissions.

    Role Hierarchy (highest to lowest):
    1. OWNER - Full control, manages all users
    2. ADMIN - Manages data, invites/removes users (except owner)
    3. MEMBER - Reads and writes business records (stock, tenants, customers)
    4. VIEWER - Read-only access, including reports and exports
    """

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"
