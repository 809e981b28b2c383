import logging
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from nexus.core import calculations, csv_export
from nexus.core.exceptions import NotFoundException, ValidationException
from nexus.models.base import utcnow
from nexus.models.building import Building
from nexus.models.enums import PaymentMethod, PaymentRecordStatus, PaymentStatus, TenantStatus
from nexus.models.org_context import OrgContext
from nexus.models.payment import Payment
from nexus.models.tenant import Tenant
from nexus.repositories.building_repository import BuildingRepository
from nexus.repositories.payment_repository import PaymentRepository
from nexus.repositories.tenant_repository import TenantRepository
from nexus.schemas.payment_schemas import PaymentBulkCreate, PaymentCreate, PaymentUpdate
from nexus.services.permissions import require_write

logger = logging.getLogger(__name__)

DEFAULT_REPORT_MONTHS = 6
MAX_REPORT_MONTHS = 24

PAYMENT_COLUMNS = [
    "Payment Date",
    "Tenant",
    "Building",
    csv_export.money_header("Amount"),
    "Payment Method",
    "Receipt Number",
    "Status",
    "Notes",
]


def _shift_month(year: int, month: int, months_back: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) - months_back
    return index // 12, index % 12 + 1


class PaymentService:
    """
    Service layer for rent payments.

    Recording, changing or deleting a payment moves the building's
    collected_rent by the same amount, in the same commit.
    """

    def __init__(self, db: Session):
        self.db = db
        self.payment_repo = PaymentRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.building_repo = BuildingRepository(db)

    def _get_building(self, building_id: int, context: OrgContext) -> Building:
        building = self.building_repo.get_by_id_and_org(building_id, context.org_id)
        if not building:
            raise NotFoundException(f"Building {building_id} not found")
        return building

    def _get_paying_tenant(self, tenant_id: int, building: Building, context: OrgContext) -> Tenant:
        """
        Tenant that may pay rent for `building`.

        Raises:
            NotFoundException: If tenant doesn't exist or was removed
            ValidationException: If tenant lives in another building
        """
        tenant = self.tenant_repo.get_by_id_and_org(tenant_id, context.org_id)
        if not tenant or tenant.status != TenantStatus.ACTIVE:
            raise NotFoundException(f"Tenant {tenant_id} not found")
        if tenant.building_id != building.id:
            raise ValidationException(
                f"Tenant {tenant_id} does not belong to building {building.id}"
            )
        return tenant

    def _get_owned(self, payment_id: int, context: OrgContext) -> Payment:
        payment = self.payment_repo.get_by_id_and_org(payment_id, context.org_id)
        if not payment:
            raise NotFoundException(f"Payment {payment_id} not found")
        return payment

    @staticmethod
    def _move_collected_rent(building: Building, delta: float) -> None:
        building.collected_rent = calculations.round_money(
            max(calculations.to_float(building.collected_rent) + delta, 0)
        )

    def add_payment(self, payment_data: PaymentCreate, context: OrgContext) -> Payment:
        """
        Record a rent payment.

        The tenant is marked paid and the building's collected_rent grows by
        the amount.

        Raises:
            NotFoundException: If building or tenant not found
            ValidationException: If tenant is not in the building
        """
        require_write(context)
        building = self._get_building(payment_data.building_id, context)
        tenant = self._get_paying_tenant(payment_data.tenant_id, building, context)

        payment = Payment(
            org_id=context.org_id,
            status=PaymentRecordStatus.COMPLETED,
            **payment_data.model_dump(),
        )
        payment = self.payment_repo.create_no_commit(payment)

        tenant.payment_status = PaymentStatus.PAID
        self._move_collected_rent(building, payment_data.amount)

        self.db.commit()
        self.db.refresh(payment)
        logger.info(
            "Recorded payment %s of %.2f for tenant %s", payment.id, payment_data.amount, tenant.id
        )
        return payment

    def add_bulk_payments(
        self, bulk_data: PaymentBulkCreate, context: OrgContext
    ) -> list[Payment]:
        """
        Record the same payment for several tenants of one building.

        Every tenant is validated before anything is written, so either all
        payments are recorded or none are.

        Raises:
            ValidationException: On duplicate tenant ids or a tenant outside the building
        """
        require_write(context)
        building = self._get_building(bulk_data.building_id, context)

        if len(set(bulk_data.tenant_ids)) != len(bulk_data.tenant_ids):
            raise ValidationException("Each tenant may appear only once in a bulk payment")

        tenants = [
            self._get_paying_tenant(tenant_id, building, context)
            for tenant_id in bulk_data.tenant_ids
        ]

        payments = [
            Payment(
                org_id=context.org_id,
                tenant_id=tenant.id,
                building_id=building.id,
                amount=bulk_data.amount,
                payment_date=bulk_data.payment_date,
                payment_method=bulk_data.payment_method,
                status=PaymentRecordStatus.COMPLETED,
                notes=bulk_data.notes,
            )
            for tenant in tenants
        ]

        try:
            self.payment_repo.create_bulk(payments)
            for tenant in tenants:
                tenant.payment_status = PaymentStatus.PAID
            self._move_collected_rent(building, bulk_data.amount * len(tenants))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        for payment in payments:
            self.db.refresh(payment)
        logger.info("Recorded %s bulk payments for building %s", len(payments), building.id)
        return payments

    def get_payment(self, payment_id: int, context: OrgContext) -> Payment:
        return self._get_owned(payment_id, context)

    def get_payments(
        self,
        context: OrgContext,
        tenant_id: Optional[int] = None,
        building_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        payment_method: Optional[PaymentMethod] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[list[Payment], int]:
        """Payments newest first with optional filters."""
        return self.payment_repo.get_with_filters(
            org_id=context.org_id,
            tenant_id=tenant_id,
            building_id=building_id,
            start_date=start_date,
            end_date=end_date,
            payment_method=payment_method,
            limit=limit,
            offset=offset,
        )

    def update_payment(
        self, payment_id: int, payment_data: PaymentUpdate, context: OrgContext
    ) -> Payment:
        """Update a payment; an amount change moves collected_rent by the difference."""
        require_write(context)
        payment = self._get_owned(payment_id, context)

        old_amount = calculations.to_float(payment.amount)
        for field, value in payment_data.model_dump(exclude_none=True).items():
            setattr(payment, field, value)

        if payment_data.amount is not None and payment_data.amount != old_amount:
            building = self._get_building(payment.building_id, context)
            self._move_collected_rent(building, payment_data.amount - old_amount)

        self.db.commit()
        self.db.refresh(payment)
        return payment

    def delete_payment(self, payment_id: int, context: OrgContext) -> None:
        """Delete a payment and take its amount back out of collected_rent."""
        require_write(context)
        payment = self._get_owned(payment_id, context)
        building = self.building_repo.get_by_id_and_org(payment.building_id, context.org_id)

        amount = calculations.to_float(payment.amount)
        self.payment_repo.delete_no_commit(payment)
        if building:
            self._move_collected_rent(building, -amount)

        self.db.commit()
        logger.info("Deleted payment %s", payment_id)

    def get_payment_report(
        self,
        context: OrgContext,
        months: int = DEFAULT_REPORT_MONTHS,
        building_id: Optional[int] = None,
        today: Optional[date] = None,
    ) -> dict:
        """
        Collection summary, method breakdown and monthly trends.

        Args:
            months: Number of months of trend data (1..24), ending with the current month
            building_id: Limit the report to one building
            today: Reference date for the trend window (defaults to current UTC date)

        Returns:
            Dict matching PaymentReport; monthly_trends is oldest first
        """
        if not 1 <= months <= MAX_REPORT_MONTHS:
            raise ValidationException(f"months must be between 1 and {MAX_REPORT_MONTHS}")

        if building_id is not None:
            buildings = [self._get_building(building_id, context)]
        else:
            buildings = self.building_repo.get_by_org(context.org_id)

        payments, total = self.payment_repo.get_with_filters(
            org_id=context.org_id, building_id=building_id
        )
        tenants = self.tenant_repo.get_active(context.org_id, building_id=building_id)

        total_amount = calculations.round_money(
            sum(calculations.to_float(p.amount) for p in payments)
        )
        expected_rent = sum(calculations.to_float(b.total_rent) for b in buildings)

        method_breakdown = {method.value: 0 for method in PaymentMethod}
        for payment in payments:
            method_breakdown[payment.payment_method.value] += 1

        today = today or utcnow().date()
        trends = []
        for months_back in range(months - 1, -1, -1):
            year, month = _shift_month(today.year, today.month, months_back)
            in_month = [
                p
                for p in payments
                if p.payment_date.year == year and p.payment_date.month == month
            ]
            trends.append(
                {
                    "month": date(year, month, 1).strftime("%b %Y"),
                    "year": year,
                    "month_number": month,
                    "amount": calculations.round_money(
                        sum(calculations.to_float(p.amount) for p in in_month)
                    ),
                    "count": len(in_month),
                }
            )

        logger.debug(
            "Built payment report for org %s over %s payments", context.org_id, total
        )
        return {
            "total_payments": total,
            "total_amount": total_amount,
            "paid_tenants": sum(1 for t in tenants if t.payment_status == PaymentStatus.PAID),
            "overdue_tenants": sum(
                1 for t in tenants if t.payment_status == PaymentStatus.OVERDUE
            ),
            "collection_rate": calculations.round_money(
                calculations.percentage(total_amount, expected_rent)
            ),
            "method_breakdown": method_breakdown,
            "monthly_trends": trends,
        }

    def export_payments_csv(
        self,
        context: OrgContext,
        tenant_id: Optional[int] = None,
        building_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        payment_method: Optional[PaymentMethod] = None,
    ) -> str:
        """Filtered payments as CSV with a TOTALS row summing the amounts."""
        payments, _ = self.get_payments(
            context,
            tenant_id=tenant_id,
            building_id=building_id,
            start_date=start_date,
            end_date=end_date,
            payment_method=payment_method,
        )
        building_names = {b.id: b.name for b in self.building_repo.get_by_org(context.org_id)}

        rows = []
        total_amount = 0.0
        for payment in payments:
            amount = calculations.round_money(payment.amount)
            total_amount += amount
            rows.append(
                [
                    csv_export.format_date(payment.payment_date),
                    payment.tenant.full_name if payment.tenant else "",
                    building_names.get(payment.building_id, ""),
                    csv_export.format_money(amount),
                    csv_export.humanize(payment.payment_method),
                    payment.receipt_number,
                    csv_export.humanize(payment.status),
                    payment.notes,
                ]
            )
        rows.append(
            [
                csv_export.TOTALS_LABEL,
                "",
                "",
                csv_export.format_money(total_amount),
                "",
                "",
                "",
                "",
            ]
        )
        return csv_export.render_csv(PAYMENT_COLUMNS, rows)
