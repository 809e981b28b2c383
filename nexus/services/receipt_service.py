import logging
import random
import time
from typing import Optional
from sqlalchemy.orm import Session

from nexus.config import settings
from nexus.core import calculations
from nexus.core.exceptions import ConflictException, NotFoundException, ValidationException
from nexus.models.org_context import OrgContext
from nexus.models.receipt import Receipt
from nexus.repositories.building_repository import BuildingRepository
from nexus.repositories.payment_repository import PaymentRepository
from nexus.repositories.receipt_repository import ReceiptRepository
from nexus.repositories.tenant_repository import TenantRepository
from nexus.schemas.receipt_schemas import ReceiptCreate, ReceiptItem, ReceiptUpdate
from nexus.services.permissions import require_write

logger = logging.getLogger(__name__)

NUMBER_ATTEMPTS = 5


def generate_receipt_number(prefix: Optional[str] = None) -> str:
    """PREFIX-<last 6 digits of epoch ms>-<3 random digits>, e.g. REC-482913-057."""
    prefix = prefix or settings.RECEIPT_PREFIX
    millis = int(time.time() * 1000)
    return f"{prefix}-{millis % 1_000_000:06d}-{random.randint(0, 999):03d}"


def receipt_totals(items: list[ReceiptItem]) -> tuple[float, float, float]:
    """(subtotal, tax, total) for receipt items; receipts carry no tax."""
    subtotal = calculations.round_money(sum(item.price * item.quantity for item in items))
    tax = 0.0
    return subtotal, tax, calculations.round_money(subtotal + tax)


class ReceiptService:
    """Service layer for tenant receipts"""

    def __init__(self, db: Session):
        self.db = db
        self.receipt_repo = ReceiptRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.building_repo = BuildingRepository(db)
        self.payment_repo = PaymentRepository(db)

    def _get_owned(self, receipt_id: int, context: OrgContext) -> Receipt:
        receipt = self.receipt_repo.get_by_id_and_org(receipt_id, context.org_id)
        if not receipt:
            raise NotFoundException(f"Receipt {receipt_id} not found")
        return receipt

    def _unique_number(self, context: OrgContext) -> str:
        for _ in range(NUMBER_ATTEMPTS):
            number = generate_receipt_number()
            if not self.receipt_repo.get_by_number(number, context.org_id):
                return number
        raise ConflictException("Could not allocate a unique receipt number, please retry")

    def add_receipt(self, receipt_data: ReceiptCreate, context: OrgContext) -> Receipt:
        """
        Issue a receipt to a tenant.

        Raises:
            NotFoundException: If tenant, building or payment not found
            ValidationException: If tenant is not in the building, or the payment
                belongs to another tenant or building
            ConflictException: If the given receipt number already exists
        """
        require_write(context)

        building = self.building_repo.get_by_id_and_org(receipt_data.building_id, context.org_id)
        if not building:
            raise NotFoundException(f"Building {receipt_data.building_id} not found")

        tenant = self.tenant_repo.get_by_id_and_org(receipt_data.tenant_id, context.org_id)
        if not tenant:
            raise NotFoundException(f"Tenant {receipt_data.tenant_id} not found")
        if tenant.building_id != building.id:
            raise ValidationException(
                f"Tenant {tenant.id} does not belong to building {building.id}"
            )

        if receipt_data.payment_id is not None:
            payment = self.payment_repo.get_by_id_and_org(receipt_data.payment_id, context.org_id)
            if not payment:
                raise NotFoundException(f"Payment {receipt_data.payment_id} not found")
            if payment.tenant_id != tenant.id or payment.building_id != building.id:
                raise ValidationException(
                    f"Payment {payment.id} was not made by tenant {tenant.id} "
                    f"in building {building.id}"
                )

        if receipt_data.receipt_number:
            if self.receipt_repo.get_by_number(receipt_data.receipt_number, context.org_id):
                raise ConflictException(
                    f"Receipt number '{receipt_data.receipt_number}' already exists"
                )
            number = receipt_data.receipt_number
        else:
            number = self._unique_number(context)

        subtotal, tax, total = receipt_totals(receipt_data.items)
        receipt = Receipt(
            org_id=context.org_id,
            receipt_number=number,
            date=receipt_data.date,
            due_date=receipt_data.due_date,
            tenant_id=tenant.id,
            building_id=building.id,
            payment_id=receipt_data.payment_id,
            items=[item.model_dump() for item in receipt_data.items],
            subtotal=subtotal,
            tax_amount=tax,
            total=total,
            payment_method=receipt_data.payment_method,
            notes=receipt_data.notes,
        )
        receipt = self.receipt_repo.create(receipt)
        logger.info("Issued receipt %s to tenant %s", receipt.receipt_number, tenant.id)
        return receipt

    def get_receipt(self, receipt_id: int, context: OrgContext) -> Receipt:
        return self._get_owned(receipt_id, context)

    def get_receipts(
        self,
        context: OrgContext,
        tenant_id: Optional[int] = None,
        building_id: Optional[int] = None,
    ) -> list[Receipt]:
        return self.receipt_repo.get_with_filters(
            context.org_id, tenant_id=tenant_id, building_id=building_id
        )

    def update_receipt(
        self, receipt_id: int, receipt_data: ReceiptUpdate, context: OrgContext
    ) -> Receipt:
        """Update a receipt; new items recompute subtotal and total."""
        require_write(context)
        receipt = self._get_owned(receipt_id, context)

        if receipt_data.date is not None:
            receipt.date = receipt_data.date
        if receipt_data.due_date is not None:
            receipt.due_date = receipt_data.due_date
        if receipt_data.payment_method is not None:
            receipt.payment_method = receipt_data.payment_method
        if receipt_data.notes is not None:
            receipt.notes = receipt_data.notes
        if receipt_data.items is not None:
            subtotal, tax, total = receipt_totals(receipt_data.items)
            receipt.items = [item.model_dump() for item in receipt_data.items]
            receipt.subtotal = subtotal
            receipt.tax_amount = tax
            receipt.total = total

        return self.receipt_repo.update(receipt)

    def delete_receipt(self, receipt_id: int, context: OrgContext) -> None:
        require_write(context)
        receipt = self._get_owned(receipt_id, context)
        number = receipt.receipt_number
        self.receipt_repo.delete(receipt)
        logger.info("Deleted receipt %s", number)
