import logging
from sqlalchemy.orm import Session

from nexus.config import settings
from nexus.models.base import utcnow
from nexus.models.org_context import OrgContext
from nexus.services.building_service import BuildingService
from nexus.services.credit_service import CreditService
from nexus.services.customer_service import CustomerService
from nexus.services.product_service import ProductService

logger = logging.getLogger(__name__)


class ReportService:
    """Cross-module reporting built from each module's own stats"""

    def __init__(self, db: Session):
        self.db = db
        self.product_service = ProductService(db)
        self.building_service = BuildingService(db)
        self.customer_service = CustomerService(db)
        self.credit_service = CreditService(db)

    def get_dashboard(self, context: OrgContext) -> dict:
        logger.debug("Building dashboard for org %s", context.org_id)
        return {
            "generated_at": utcnow(),
            "currency_symbol": settings.CURRENCY_SYMBOL,
            "inventory": self.product_service.get_stats(context),
            "portfolio": self.building_service.get_portfolio_overview(context),
            "customers": self.customer_service.get_stats(context),
            "credit": self.credit_service.get_stats(context),
        }
