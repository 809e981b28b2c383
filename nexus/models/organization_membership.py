"""Membership model linking users to organizations with roles."""

from sqlalchemy import Integer, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from nexus.models.base import Base, TimestampMixin, enum_values
from nexus.models.role import OrganizationRole

if TYPE_CHECKING:
    from nexus.models.user import User
    from nexus.models.organization import Organization


class OrganizationMembership(Base, TimestampMixin):
    """
    Join table linking users to organizations with roles.

    Constraints:
    - Unique(org_id, user_id) - one membership per user per organization
    - Each organization has exactly one OWNER (enforced at application layer)
    """

    __tablename__ = "organization_memberships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    org_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[OrganizationRole] = mapped_column(
        Enum(OrganizationRole, native_enum=False, values_callable=enum_values),
        nullable=False,
        default=OrganizationRole.MEMBER,
    )

    organization: Mapped["Organization"] = relationship(
        "Organization", back_populates="memberships"
    )
    user: Mapped["User"] = relationship("User", back_populates="memberships")

    __table_args__ = (UniqueConstraint("org_id", "user_id", name="uq_org_user"),)

    def __repr__(self) -> str:
        return (
            f"<OrganizationMembership(org_id={self.org_id}, user_id={self.user_id}, "
            f"role={self.role.value})>"
        )
