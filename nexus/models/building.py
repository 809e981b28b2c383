from sqlalchemy import String, Integer, Numeric, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from nexus.core import calculations
from nexus.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from nexus.models.tenant import Tenant


class Building(Base, TimestampMixin):
    """
    Rental building.

    occupied_units, total_rent and collected_rent are running totals kept in
    step by the tenant and payment services (not edited directly).
    """

    __tablename__ = "property_buildings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    org_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_units: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    occupied_units: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_rent: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )
    collected_rent: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )

    tenants: Mapped[list["Tenant"]] = relationship(
        "Tenant", back_populates="building", passive_deletes="all"
    )

    @property
    def vacant_units(self) -> int:
        return self.total_units - self.occupied_units

    @property
    def occupancy_rate(self) -> float:
        return calculations.percentage(self.occupied_units, self.total_units)

    @property
    def collection_rate(self) -> float:
        return calculations.percentage(self.collected_rent, self.total_rent)

    def __repr__(self) -> str:
        return f"<Building(id={self.id}, name='{self.name}')>"
