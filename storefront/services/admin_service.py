# ==============================================================================
# ADMIN SERVICE - Back-office Dashboard
# ==============================================================================

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict

from storefront.core.constants import DatabaseConstants, OrderConstants
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.schemas.order import OrderResponse
from storefront.schemas.product import ProductResponse
from storefront.services.product_service import discount_percentage
from storefront.utils.helpers import round_money, utc_now


class AdminService:
    """Store-wide summary figures for the back office."""

    RECENT_ORDERS = 5
    TOP_PRODUCTS = 5
    SALES_WINDOW_DAYS = 30

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        self._adapter = adapter

    async def dashboard(self) -> Dict[str, Any]:
        users = await self._adapter.count(DatabaseConstants.USERS_COLLECTION)
        products = await self._adapter.count(DatabaseConstants.PRODUCTS_COLLECTION, {"is_active": True})
        orders = await self._adapter.count(DatabaseConstants.ORDERS_COLLECTION)
        pending = await self._adapter.count(
            DatabaseConstants.ORDERS_COLLECTION,
            {"status": OrderConstants.STATUS_PENDING},
        )

        recent = await self._adapter.get_all(
            DatabaseConstants.ORDERS_COLLECTION,
            limit=self.RECENT_ORDERS,
            sort_by="created_at",
            sort_order="desc",
        )

        since = utc_now() - timedelta(days=self.SALES_WINDOW_DAYS)
        rows = await self._adapter.aggregate(DatabaseConstants.ORDERS_COLLECTION, [
            {"$match": {
                "created_at": {"$gte": since},
                "status": {"$in": [OrderConstants.STATUS_DELIVERED, OrderConstants.STATUS_SHIPPED]},
            }},
            {"$group": {"_id": None, "total_sales": {"$sum": "$final_amount"}, "order_count": {"$sum": 1}}},
        ])
        sales = rows[0] if rows else {"total_sales": 0, "order_count": 0}

        top = await self._adapter.get_all(
            DatabaseConstants.PRODUCTS_COLLECTION,
            limit=self.TOP_PRODUCTS,
            filters={"is_active": True},
            sort_by="rating",
            sort_order="desc",
        )
        top_products = []
        for product in top:
            product["discount_percentage"] = discount_percentage(product.get("price", 0), product.get("new_price", 0))
            top_products.append(ProductResponse.model_validate(product))

        return {
            "stats": {
                "total_users": users,
                "total_products": products,
                "total_orders": orders,
                "pending_orders": pending,
            },
            "recent_orders": [OrderResponse.model_validate(order) for order in recent],
            "sales": {
                "period_days": self.SALES_WINDOW_DAYS,
                "total_sales": round_money(sales["total_sales"]),
                "order_count": sales["order_count"],
            },
            "top_products": top_products,
        }
