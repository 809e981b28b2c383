from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from nexus.models.enums import StockStatus


class ProductCreate(BaseModel):
    """Schema for creating a product"""

    name: str = Field(..., min_length=1, max_length=255)
    sku: Optional[str] = Field(None, max_length=100)
    barcode: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    price: float = Field(default=0.00, ge=0, description="Selling price")
    cost_price: float = Field(default=0.00, ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    min_stock_level: Optional[int] = Field(None, ge=0)
    is_active: bool = True


class ProductUpdate(BaseModel):
    """Schema for updating a product (only provided fields change)"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sku: Optional[str] = Field(None, max_length=100)
    barcode: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    min_stock_level: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class StockAdjustment(BaseModel):
    """Signed change to a product's stock quantity"""

    quantity_change: int = Field(..., description="Positive to receive stock, negative to remove")
    reason: Optional[str] = Field(None, max_length=255)


class ProductResponse(BaseModel):
    """Product with derived stock and value figures"""

    model_config = {"from_attributes": True}

    id: int
    org_id: int
    name: str
    sku: Optional[str]
    barcode: Optional[str]
    category: Optional[str]
    price: float
    cost_price: float
    stock_quantity: int
    min_stock_level: Optional[int]
    is_active: bool
    stock_status: StockStatus
    profit_margin: float
    total_cost_value: float
    total_selling_value: float
    expected_profit: float
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    total: int


class InventoryStats(BaseModel):
    """Aggregate stock figures for an organization"""

    total_products: int
    total_stock_quantity: int
    total_cost_value: float
    total_selling_value: float
    expected_profit: float
    average_profit_margin: float
    low_stock_count: int
    out_of_stock_count: int


class ProductProfit(BaseModel):
    id: int
    name: str
    sku: Optional[str]
    category: Optional[str]
    stock_quantity: int
    profit_per_unit: float
    total_profit: float
    profit_margin: float


class ProfitAnalysis(BaseModel):
    """Totals plus the most profitable products by amount and by margin"""

    total_cost_value: float
    total_selling_value: float
    expected_profit: float
    average_profit_margin: float
    top_by_profit: list[ProductProfit]
    top_by_margin: list[ProductProfit]


class StockAlert(BaseModel):
    id: int
    name: str
    sku: Optional[str]
    category: Optional[str]
    stock_quantity: int
    min_stock_level: int
    stock_status: StockStatus
    price: float
    value_at_risk: float


class StockAlertSummary(BaseModel):
    total_alerts: int
    out_of_stock_count: int
    low_stock_count: int
    total_value_at_risk: float


class StockAlertListResponse(BaseModel):
    alerts: list[StockAlert]
    summary: StockAlertSummary
