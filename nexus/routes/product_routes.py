from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from nexus.core import csv_export
from nexus.database import get_db
from nexus.dependencies import get_org_context
from nexus.models.org_context import OrgContext
from nexus.routes.csv_response import csv_response
from nexus.services.product_service import ProductService
from nexus.schemas.product_schemas import (
    InventoryStats,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    ProfitAnalysis,
    StockAdjustment,
    StockAlertListResponse,
)

router = APIRouter()

STOCK_STATUS_PATTERN = "^(all|in_stock|low_stock|out_of_stock)$"
ALERT_TYPE_PATTERN = "^(all|out_of_stock|low_stock)$"


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Create a product.

    - SKU must be unique within the organization (409 otherwise)
    - Requires MEMBER or higher permissions
    """
    service = ProductService(db)
    return service.create_product(product_data, context)


@router.get("", response_model=ProductListResponse)
async def list_products(
    search: Optional[str] = Query(None, description="Match name, SKU or category"),
    category: Optional[str] = Query(None, description="Exact category, or 'all'"),
    stock_status: Optional[str] = Query(
        None, pattern=STOCK_STATUS_PATTERN, description="all / in_stock / low_stock / out_of_stock"
    ),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    limit: int = Query(100, ge=1, le=1000, description="Max results"),
    offset: int = Query(0, ge=0, description="Pagination offset"),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    List products with optional filters.

    A product is listed only if it matches every filter given.
    Results sorted by name.
    """
    service = ProductService(db)
    products, total = service.get_products(
        context,
        search=search,
        category=category,
        stock_status=stock_status,
        is_active=is_active,
        limit=limit,
        offset=offset,
    )
    return ProductListResponse(products=products, total=total)


@router.get("/categories", response_model=list[str])
async def list_categories(
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = ProductService(db)
    return service.get_categories(context)


@router.get("/stats", response_model=InventoryStats)
async def get_inventory_stats(
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = ProductService(db)
    return service.get_stats(context)


@router.get("/profit-analysis", response_model=ProfitAnalysis)
async def get_profit_analysis(
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """Inventory totals with the top 5 products by profit and by margin."""
    service = ProductService(db)
    return service.get_profit_analysis(context)


@router.get("/alerts", response_model=StockAlertListResponse)
async def get_stock_alerts(
    alert_type: str = Query("all", pattern=ALERT_TYPE_PATTERN),
    search: Optional[str] = Query(None),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """Out-of-stock and low-stock products with value at risk."""
    service = ProductService(db)
    return service.get_stock_alerts(context, alert_type=alert_type, search=search)


@router.get("/alerts/export")
async def export_stock_alerts(
    alert_type: str = Query("all", pattern=ALERT_TYPE_PATTERN),
    search: Optional[str] = Query(None),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = ProductService(db)
    content = service.export_alerts_csv(context, alert_type=alert_type, search=search)
    return csv_response(content, csv_export.export_filename("stock-alerts"))


@router.get("/export")
async def export_inventory(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    stock_status: Optional[str] = Query(None, pattern=STOCK_STATUS_PATTERN),
    is_active: Optional[bool] = Query(None),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Download the filtered inventory as CSV.

    - Same filters as the product list
    - Last row holds the TOTALS
    """
    service = ProductService(db)
    content = service.export_inventory_csv(
        context,
        search=search,
        category=category,
        stock_status=stock_status,
        is_active=is_active,
    )
    return csv_response(content, csv_export.export_filename("inventory"))


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """Returns 404 if product doesn't exist or belongs to another organization."""
    service = ProductService(db)
    return service.get_product(product_id, context)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = ProductService(db)
    return service.update_product(product_id, product_data, context)


@router.post("/{product_id}/stock", response_model=ProductResponse)
async def adjust_stock(
    product_id: int,
    adjustment: StockAdjustment,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Change stock by a signed quantity.

    - Returns 400 if the quantity would go below zero
    """
    service = ProductService(db)
    return service.adjust_stock(product_id, adjustment, context)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = ProductService(db)
    service.delete_product(product_id, context)
