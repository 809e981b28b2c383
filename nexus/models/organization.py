"""Organization model: the isolation boundary for business records."""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from nexus.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from nexus.models.organization_membership import OrganizationMembership


class Organization(Base, TimestampMixin):
    """
    A business whose records are shared by its members.

    Products, buildings, tenants, payments, receipts and customers all carry
    an org_id. Users reach them only through a membership with a role
    (Owner, Admin, Member, Viewer); ids from another organization behave as
    if they did not exist.
    """

    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    memberships: Mapped[list["OrganizationMembership"]] = relationship(
        "OrganizationMembership",
        back_populates="organization",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name='{self.name}')>"
