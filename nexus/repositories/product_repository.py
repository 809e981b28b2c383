from typing import Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from nexus.config import settings
from nexus.models.enums import StockStatus
from nexus.models.product import Product
from nexus.repositories.search import LIKE_ESCAPE, contains_pattern


class ProductRepository:
    """Repository for Product data access, scoped by organization"""

    def __init__(self, db: Session):
        self.db = db

    def _threshold_expr(self):
        # Mirrors calculations.stock_threshold: NULL or 0 falls back to the default
        return func.coalesce(
            func.nullif(Product.min_stock_level, 0), settings.DEFAULT_MIN_STOCK_LEVEL
        )

    def get_by_id_and_org(self, product_id: int, org_id: int) -> Optional[Product]:
        """Returns None if product doesn't exist or belongs to another organization."""
        return (
            self.db.query(Product)
            .filter(Product.id == product_id, Product.org_id == org_id)
            .first()
        )

    def get_by_sku(self, sku: str, org_id: int) -> Optional[Product]:
        return (
            self.db.query(Product)
            .filter(Product.sku == sku, Product.org_id == org_id)
            .first()
        )

    def get_with_filters(
        self,
        org_id: int,
        search: Optional[str] = None,
        category: Optional[str] = None,
        stock_status: Optional[StockStatus] = None,
        is_active: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        """
        Get products matching every given filter.

        Args:
            org_id: Organization ID for isolation
            search: Case-insensitive substring of name, SKU or category
            category: Exact category match
            stock_status: in_stock / low_stock / out_of_stock
            is_active: Active flag
            limit: Maximum number of results (None = all)
            offset: Pagination offset

        Returns:
            Tuple of (products list, total count)
        """
        query = self.db.query(Product).filter(Product.org_id == org_id)

        if search:
            pattern = contains_pattern(search)
            query = query.filter(
                or_(
                    Product.name.ilike(pattern, escape=LIKE_ESCAPE),
                    Product.sku.ilike(pattern, escape=LIKE_ESCAPE),
                    Product.category.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )

        if category is not None:
            query = query.filter(Product.category == category)

        if stock_status is not None:
            threshold = self._threshold_expr()
            if stock_status == StockStatus.OUT_OF_STOCK:
                query = query.filter(Product.stock_quantity == 0)
            elif stock_status == StockStatus.LOW_STOCK:
                query = query.filter(
                    Product.stock_quantity > 0, Product.stock_quantity <= threshold
                )
            else:
                query = query.filter(Product.stock_quantity > threshold)

        if is_active is not None:
            query = query.filter(Product.is_active == is_active)

        total = query.count()

        query = query.order_by(Product.name, Product.id).offset(offset)
        if limit is not None:
            query = query.limit(limit)

        return query.all(), total

    def get_alerts(self, org_id: int) -> list[Product]:
        """Products that are out of stock or at/below their threshold."""
        return (
            self.db.query(Product)
            .filter(
                Product.org_id == org_id,
                Product.stock_quantity <= self._threshold_expr(),
            )
            .order_by(Product.stock_quantity, Product.name)
            .all()
        )

    def get_categories(self, org_id: int) -> list[str]:
        rows = (
            self.db.query(Product.category)
            .filter(
                Product.org_id == org_id,
                Product.category.is_not(None),
                Product.category != "",
            )
            .distinct()
            .order_by(Product.category)
            .all()
        )
        return [row[0] for row in rows]

    def create(self, product: Product) -> Product:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def update(self, product: Product) -> Product:
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete(self, product: Product) -> None:
        self.db.delete(product)
        self.db.commit()
