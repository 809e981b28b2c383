from datetime import datetime
from pydantic import BaseModel

from nexus.schemas.building_schemas import PortfolioOverview
from nexus.schemas.credit_schemas import CreditStats
from nexus.schemas.customer_schemas import CustomerStats
from nexus.schemas.product_schemas import InventoryStats


class DashboardSummary(BaseModel):
    """Headline figures from every module in one response"""

    generated_at: datetime
    currency_symbol: str
    inventory: InventoryStats
    portfolio: PortfolioOverview
    customers: CustomerStats
    credit: CreditStats
