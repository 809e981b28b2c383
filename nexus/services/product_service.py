import logging
from typing import Optional
from sqlalchemy.orm import Session

from nexus.core import calculations, csv_export
from nexus.core.exceptions import ConflictException, NotFoundException, ValidationException
from nexus.models.enums import StockStatus
from nexus.models.org_context import OrgContext
from nexus.models.product import Product
from nexus.repositories.product_repository import ProductRepository
from nexus.schemas.product_schemas import ProductCreate, ProductUpdate, StockAdjustment
from nexus.services.permissions import require_write

logger = logging.getLogger(__name__)

ALL = "all"
TOP_PRODUCTS = 5
ALERT_STATUSES = (StockStatus.OUT_OF_STOCK, StockStatus.LOW_STOCK)

INVENTORY_COLUMNS = [
    "Product Name",
    "SKU",
    "Barcode",
    "Category",
    "Stock Quantity",
    "Min Stock Level",
    "Stock Status",
    csv_export.money_header("Cost Price"),
    csv_export.money_header("Selling Price"),
    "Profit Margin (%)",
    csv_export.money_header("Total Cost Value"),
    csv_export.money_header("Total Selling Value"),
    csv_export.money_header("Expected Profit"),
    "Status",
    "Created Date",
]

ALERT_COLUMNS = [
    "Product Name",
    "SKU",
    "Category",
    "Current Stock",
    "Min Stock Level",
    "Stock Status",
    csv_export.money_header("Selling Price"),
    "Value at Risk",
]


def _unless_all(value: Optional[str]) -> Optional[str]:
    """Treat the 'all' filter value as no filter."""
    if value is None or value == ALL:
        return None
    return value


def _matches_search(product: Product, search: Optional[str]) -> bool:
    if not search:
        return True
    needle = search.lower()
    return any(
        needle in (field or "").lower()
        for field in (product.name, product.sku, product.category)
    )


class ProductService:
    """Service layer for inventory business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.product_repo = ProductRepository(db)

    def _get_owned(self, product_id: int, context: OrgContext) -> Product:
        product = self.product_repo.get_by_id_and_org(product_id, context.org_id)
        if not product:
            raise NotFoundException(f"Product {product_id} not found")
        return product

    def _ensure_sku_free(
        self, sku: Optional[str], context: OrgContext, product_id: Optional[int] = None
    ) -> None:
        if not sku:
            return
        existing = self.product_repo.get_by_sku(sku, context.org_id)
        if existing and existing.id != product_id:
            raise ConflictException(f"SKU '{sku}' is already used by another product")

    def create_product(self, product_data: ProductCreate, context: OrgContext) -> Product:
        """
        Create a product in the caller's organization.

        Raises:
            ForbiddenException: If caller is a VIEWER
            ConflictException: If the SKU is already taken in the organization
        """
        require_write(context)
        self._ensure_sku_free(product_data.sku, context)

        product = Product(org_id=context.org_id, **product_data.model_dump())
        product = self.product_repo.create(product)
        logger.info("Created product %s (sku=%s) in org %s", product.id, product.sku, context.org_id)
        return product

    def get_product(self, product_id: int, context: OrgContext) -> Product:
        return self._get_owned(product_id, context)

    def get_products(
        self,
        context: OrgContext,
        search: Optional[str] = None,
        category: Optional[str] = None,
        stock_status: Optional[str] = None,
        is_active: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        """
        Products matching every given filter, ordered by name.

        `category` and `stock_status` accept "all" for no filter.

        Returns:
            Tuple of (products, total_count)
        """
        status = _unless_all(stock_status)
        return self.product_repo.get_with_filters(
            org_id=context.org_id,
            search=search,
            category=_unless_all(category),
            stock_status=StockStatus(status) if status else None,
            is_active=is_active,
            limit=limit,
            offset=offset,
        )

    def update_product(
        self, product_id: int, product_data: ProductUpdate, context: OrgContext
    ) -> Product:
        """
        Update provided product fields.

        Raises:
            NotFoundException: If product not in organization
            ConflictException: If the new SKU is already taken
        """
        require_write(context)
        product = self._get_owned(product_id, context)

        changes = product_data.model_dump(exclude_none=True)
        if "sku" in changes:
            self._ensure_sku_free(changes["sku"], context, product_id=product.id)

        for field, value in changes.items():
            setattr(product, field, value)

        return self.product_repo.update(product)

    def delete_product(self, product_id: int, context: OrgContext) -> None:
        require_write(context)
        product = self._get_owned(product_id, context)
        self.product_repo.delete(product)
        logger.info("Deleted product %s from org %s", product_id, context.org_id)

    def adjust_stock(
        self, product_id: int, adjustment: StockAdjustment, context: OrgContext
    ) -> Product:
        """
        Apply a signed change to the stock quantity.

        Raises:
            ValidationException: If the resulting quantity would be negative
        """
        require_write(context)
        product = self._get_owned(product_id, context)

        new_quantity = product.stock_quantity + adjustment.quantity_change
        if new_quantity < 0:
            logger.warning(
                "Rejected stock adjustment of %s for product %s (on hand %s)",
                adjustment.quantity_change,
                product.id,
                product.stock_quantity,
            )
            raise ValidationException(
                f"Insufficient stock: {product.stock_quantity} on hand, "
                f"cannot remove {-adjustment.quantity_change}"
            )

        product.stock_quantity = new_quantity
        product = self.product_repo.update(product)
        logger.info(
            "Adjusted stock of product %s by %s (%s)",
            product.id,
            adjustment.quantity_change,
            adjustment.reason or "no reason given",
        )
        return product

    def get_categories(self, context: OrgContext) -> list[str]:
        return self.product_repo.get_categories(context.org_id)

    def _totals(self, products: list[Product]) -> dict:
        total_cost = calculations.round_money(sum(p.total_cost_value for p in products))
        total_selling = calculations.round_money(sum(p.total_selling_value for p in products))
        expected_profit = calculations.round_money(total_selling - total_cost)
        return {
            "total_cost_value": total_cost,
            "total_selling_value": total_selling,
            "expected_profit": expected_profit,
            "average_profit_margin": calculations.round_money(
                calculations.percentage(expected_profit, total_selling)
            ),
        }

    def get_stats(self, context: OrgContext) -> dict:
        """Aggregate stock quantity, value and alert counts for the organization."""
        products, total = self.product_repo.get_with_filters(org_id=context.org_id)
        statuses = [p.stock_status for p in products]
        return {
            "total_products": total,
            "total_stock_quantity": sum(p.stock_quantity for p in products),
            **self._totals(products),
            "low_stock_count": statuses.count(StockStatus.LOW_STOCK),
            "out_of_stock_count": statuses.count(StockStatus.OUT_OF_STOCK),
        }

    def get_profit_analysis(self, context: OrgContext) -> dict:
        """
        Inventory totals with the top products by profit and by margin.

        top_by_profit ranks by (price - cost) * quantity; top_by_margin only
        considers products with a positive margin.
        """
        products, _ = self.product_repo.get_with_filters(org_id=context.org_id)

        rows = []
        for product in products:
            per_unit = calculations.to_float(product.price) - calculations.to_float(
                product.cost_price
            )
            rows.append(
                {
                    "id": product.id,
                    "name": product.name,
                    "sku": product.sku,
                    "category": product.category,
                    "stock_quantity": product.stock_quantity,
                    "profit_per_unit": calculations.round_money(per_unit),
                    "total_profit": calculations.round_money(per_unit * product.stock_quantity),
                    "profit_margin": calculations.round_money(product.profit_margin),
                }
            )

        top_by_profit = sorted(rows, key=lambda row: row["total_profit"], reverse=True)
        top_by_margin = sorted(
            (row for row in rows if row["profit_margin"] > 0),
            key=lambda row: row["profit_margin"],
            reverse=True,
        )
        logger.debug("Built profit analysis over %s products for org %s", len(rows), context.org_id)
        return {
            **self._totals(products),
            "top_by_profit": top_by_profit[:TOP_PRODUCTS],
            "top_by_margin": top_by_margin[:TOP_PRODUCTS],
        }

    def get_stock_alerts(
        self,
        context: OrgContext,
        alert_type: str = ALL,
        search: Optional[str] = None,
    ) -> dict:
        """
        Out-of-stock and low-stock products with value at risk.

        Args:
            alert_type: "all", "out_of_stock" or "low_stock"
            search: Case-insensitive substring of name, SKU or category
        """
        wanted = _unless_all(alert_type)
        alerts = []
        for product in self.product_repo.get_alerts(context.org_id):
            status = product.stock_status
            if status not in ALERT_STATUSES:
                continue
            if wanted and status.value != wanted:
                continue
            if not _matches_search(product, search):
                continue
            alerts.append(
                {
                    "id": product.id,
                    "name": product.name,
                    "sku": product.sku,
                    "category": product.category,
                    "stock_quantity": product.stock_quantity,
                    "min_stock_level": product.stock_threshold,
                    "stock_status": status,
                    "price": calculations.to_float(product.price),
                    "value_at_risk": calculations.round_money(
                        calculations.value_at_risk(
                            product.price, product.stock_quantity, product.stock_threshold
                        )
                    ),
                }
            )

        statuses = [alert["stock_status"] for alert in alerts]
        summary = {
            "total_alerts": len(alerts),
            "out_of_stock_count": statuses.count(StockStatus.OUT_OF_STOCK),
            "low_stock_count": statuses.count(StockStatus.LOW_STOCK),
            "total_value_at_risk": calculations.round_money(
                sum(alert["value_at_risk"] for alert in alerts)
            ),
        }
        return {"alerts": alerts, "summary": summary}

    def export_inventory_csv(
        self,
        context: OrgContext,
        search: Optional[str] = None,
        category: Optional[str] = None,
        stock_status: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> str:
        """
        Filtered inventory as CSV, followed by a TOTALS row.

        Totals are summed from the rounded row values so they always equal
        the sum of the rows above them.
        """
        products, _ = self.get_products(
            context,
            search=search,
            category=category,
            stock_status=stock_status,
            is_active=is_active,
        )

        rows = []
        total_quantity = 0
        total_cost = total_selling = total_profit = 0.0
        for product in products:
            cost_value = calculations.round_money(product.total_cost_value)
            selling_value = calculations.round_money(product.total_selling_value)
            profit = calculations.round_money(product.expected_profit)
            total_quantity += product.stock_quantity
            total_cost += cost_value
            total_selling += selling_value
            total_profit += profit
            rows.append(
                [
                    product.name,
                    product.sku,
                    product.barcode,
                    product.category,
                    product.stock_quantity,
                    product.stock_threshold,
                    csv_export.humanize(product.stock_status),
                    csv_export.format_money(product.cost_price),
                    csv_export.format_money(product.price),
                    csv_export.format_percent(product.profit_margin),
                    csv_export.format_money(cost_value),
                    csv_export.format_money(selling_value),
                    csv_export.format_money(profit),
                    "Active" if product.is_active else "Inactive",
                    csv_export.format_date(product.created_at),
                ]
            )

        rows.append(
            [
                csv_export.TOTALS_LABEL,
                "",
                "",
                "",
                total_quantity,
                "",
                "",
                "",
                "",
                csv_export.format_percent(calculations.percentage(total_profit, total_selling)),
                csv_export.format_money(total_cost),
                csv_export.format_money(total_selling),
                csv_export.format_money(total_profit),
                "",
                "",
            ]
        )
        logger.debug("Exported %s products to CSV for org %s", len(products), context.org_id)
        return csv_export.render_csv(INVENTORY_COLUMNS, rows)

    def export_alerts_csv(
        self, context: OrgContext, alert_type: str = ALL, search: Optional[str] = None
    ) -> str:
        report = self.get_stock_alerts(context, alert_type=alert_type, search=search)
        rows = [
            [
                alert["name"],
                alert["sku"],
                alert["category"],
                alert["stock_quantity"],
                alert["min_stock_level"],
                csv_export.humanize(alert["stock_status"]),
                csv_export.format_money(alert["price"]),
                csv_export.format_money(alert["value_at_risk"]),
            ]
            for alert in report["alerts"]
        ]
        rows.append(
            [
                csv_export.TOTALS_LABEL,
                "",
                "",
                sum(alert["stock_quantity"] for alert in report["alerts"]),
                "",
                "",
                "",
                csv_export.format_money(report["summary"]["total_value_at_risk"]),
            ]
        )
        return csv_export.render_csv(ALERT_COLUMNS, rows)
