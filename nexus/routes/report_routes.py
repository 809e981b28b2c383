from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nexus.database import get_db
from nexus.dependencies import get_org_context
from nexus.models.org_context import OrgContext
from nexus.services.report_service import ReportService
from nexus.schemas.report_schemas import DashboardSummary

router = APIRouter()


@router.get("/dashboard", response_model=DashboardSummary)
async def get_dashboard(
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """Inventory, property, customer and credit figures in one call."""
    service = ReportService(db)
    return service.get_dashboard(context)
