# ==============================================================================
# ANALYTICS SERVICE - Event Tracking & Reporting
# ==============================================================================
# Records storefront events and aggregates them for the admin dashboard
# ==============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from storefront.core.constants import AnalyticsEvents, DatabaseConstants, OrderConstants
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.utils.helpers import round_money, utc_now

logger = logging.getLogger(__name__)

EVENTS = DatabaseConstants.ANALYTICS_COLLECTION
ORDERS = DatabaseConstants.ORDERS_COLLECTION
USERS = DatabaseConstants.USERS_COLLECTION
PRODUCTS = DatabaseConstants.PRODUCTS_COLLECTION


def _day_key(field: str) -> Dict[str, Any]:
    """Group key for the calendar day of a date field."""
    return {
        "year": {"$year": f"${field}"},
        "month": {"$month": f"${field}"},
        "day": {"$dayOfMonth": f"${field}"},
    }


def _format_day(key: Dict[str, int]) -> str:
    return f"{key['year']:04d}-{key['month']:02d}-{key['day']:02d}"


def _growth(current: float, previous: float) -> float:
    """Percentage change versus the previous period."""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 1)


class AnalyticsService:
    """
    Event tracking and reporting.

    Tracking helpers write one document per event. ``track_safely``
    wraps ``track`` for callers that must not fail because of analytics.
    Reporting methods run aggregation pipelines over events, orders
    and users for a trailing window of ``days``.
    """

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        self._adapter = adapter

    # ==========================================================================
    # TRACKING
    # ==========================================================================

    async def track(
        self,
        event_type: str,
        user_id: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        session_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Record a single analytics event."""
        return await self._adapter.create(
            EVENTS,
            {
                "type": event_type,
                "user_id": user_id,
                "session_id": session_id,
                "data": data or {},
                "metadata": metadata or {},
                "date": utc_now(),
            },
        )

    async def track_safely(self, event_type: str, **kwargs: Any) -> None:
        """Record an event, logging instead of raising on failure."""
        try:
            await self.track(event_type, **kwargs)
        except Exception:
            logger.exception(f"Failed to track analytics event {event_type}")

    async def track_product_view(self, product_id: str, user_id: Optional[str] = None) -> None:
        await self.track_safely(
            AnalyticsEvents.PRODUCT_VIEW,
            user_id=user_id,
            data={"product_id": product_id},
        )

    async def track_search(self, query: str, results_count: int, user_id: Optional[str] = None) -> None:
        await self.track_safely(
            AnalyticsEvents.SEARCH,
            user_id=user_id,
            data={"query": query.lower(), "results_count": results_count},
        )

    async def track_cart_action(self, action: str, product_id: str, quantity: int, user_id: str) -> None:
        await self.track(action, user_id=user_id, data={"product_id": product_id, "quantity": quantity})

    async def track_order_event(self, event_type: str, order: Dict[str, Any]) -> None:
        await self.track(
            event_type,
            user_id=order.get("user_id"),
            data={
                "order_id": order.get("id"),
                "order_number": order.get("order_number"),
                "amount": order.get("final_amount"),
            },
        )

    async def track_user_event(self, event_type: str, user_id: str) -> None:
        await self.track(event_type, user_id=user_id)

    # ==========================================================================
    # AGGREGATION HELPERS
    # ==========================================================================

    async def _aggregate(self, collection: str, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return await self._adapter.aggregate(collection, pipeline)

    async def _count_events(self, event_type: str, start: datetime, end: Optional[datetime] = None) -> int:
        date_range: Dict[str, Any] = {"$gte": start}
        if end is not None:
            date_range["$lt"] = end
        return await self._adapter.count(EVENTS, {"type": event_type, "date": date_range})

    async def _revenue(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> float:
        match: Dict[str, Any] = {"payment_status": OrderConstants.PAYMENT_COMPLETED}
        if start is not None:
            match["created_at"] = {"$gte": start}
            if end is not None:
                match["created_at"]["$lt"] = end
        rows = await self._aggregate(ORDERS, [
            {"$match": match},
            {"$group": {"_id": None, "total": {"$sum": "$final_amount"}, "count": {"$sum": 1}}},
        ])
        return round_money(rows[0]["total"]) if rows else 0.0

    async def _daily_series(
        self,
        collection: str,
        match: Dict[str, Any],
        date_field: str,
        value: Any = 1,
    ) -> List[Dict[str, Any]]:
        """Per-day count and summed value, oldest first."""
        rows = await self._aggregate(collection, [
            {"$match": match},
            {"$group": {
                "_id": _day_key(date_field),
                "count": {"$sum": 1},
                "value": {"$sum": value},
            }},
        ])
        series = [
            {"date": _format_day(row["_id"]), "count": row["count"], "value": row["value"]}
            for row in rows
        ]
        return sorted(series, key=lambda point: point["date"])

    async def _top_event_values(
        self,
        event_type: str,
        field: str,
        start: datetime,
        limit: int = 10,
    ) -> List[Dict[str, Any]]:
        rows = await self._aggregate(EVENTS, [
            {"$match": {"type": event_type, "date": {"$gte": start}}},
            {"$group": {"_id": f"$data.{field}", "count": {"$sum": 1}}},
            {"$sort": {"count": -1}},
            {"$limit": limit},
        ])
        return [{field: row["_id"], "count": row["count"]} for row in rows if row["_id"]]

    async def _top_viewed_products(self, start: datetime, limit: int = 10) -> List[Dict[str, Any]]:
        top = await self._top_event_values(AnalyticsEvents.PRODUCT_VIEW, "product_id", start, limit)
        if not top:
            return top
        products = await self._adapter.get_all(
            PRODUCTS,
            limit=len(top),
            filters={"id": {"$in": [row["product_id"] for row in top]}},
        )
        names = {p["id"]: p.get("name") for p in products}
        for row in top:
            row["name"] = names.get(row["product_id"])
        return top

    # ==========================================================================
    # REPORTS
    # ==========================================================================

    async def dashboard(self, days: int = 30) -> Dict[str, Any]:
        """Overview: totals, growth, event mix, top products and conversion funnel."""
        now = utc_now()
        start = now - timedelta(days=days)
        previous_start = start - timedelta(days=days)

        orders_now = await self._adapter.count(ORDERS, {"created_at": {"$gte": start}})
        orders_before = await self._adapter.count(
            ORDERS, {"created_at": {"$gte": previous_start, "$lt": start}}
        )
        revenue_now = await self._revenue(start)
        revenue_before = await self._revenue(previous_start, start)
        users_now = await self._adapter.count(USERS, {"created_at": {"$gte": start}})
        users_before = await self._adapter.count(
            USERS, {"created_at": {"$gte": previous_start, "$lt": start}}
        )

        events_by_type = await self._aggregate(EVENTS, [
            {"$match": {"date": {"$gte": start}}},
            {"$group": {"_id": "$type", "count": {"$sum": 1}}},
            {"$sort": {"count": -1}},
        ])

        views = await self._count_events(AnalyticsEvents.PRODUCT_VIEW, start)
        cart_adds = await self._count_events(AnalyticsEvents.CART_ADD, start)

        return {
            "period_days": days,
            "totals": {
                "users": await self._adapter.count(USERS),
                "products": await self._adapter.count(PRODUCTS, {"is_active": True}),
                "orders": await self._adapter.count(ORDERS),
                "revenue": await self._revenue(),
            },
            "period": {
                "new_users": users_now,
                "orders": orders_now,
                "revenue": revenue_now,
            },
            "growth": {
                "users": _growth(users_now, users_before),
                "orders": _growth(orders_now, orders_before),
                "revenue": _growth(revenue_now, revenue_before),
            },
            "events_by_type": {row["_id"]: row["count"] for row in events_by_type},
            "top_products": await self._top_viewed_products(start),
            "top_searches": await self._top_event_values(AnalyticsEvents.SEARCH, "query", start),
            "conversion_funnel": {
                "product_views": views,
                "cart_adds": cart_adds,
                "orders": orders_now,
                "view_to_cart_rate": round(cart_adds / views * 100, 1) if views else 0.0,
                "cart_to_order_rate": round(orders_now / cart_adds * 100, 1) if cart_adds else 0.0,
            },
        }

    async def sales(self, days: int = 30) -> Dict[str, Any]:
        """Daily revenue over paid orders and best-selling products."""
        start = utc_now() - timedelta(days=days)
        paid = {"payment_status": OrderConstants.PAYMENT_COMPLETED, "created_at": {"$gte": start}}

        daily = await self._daily_series(ORDERS, paid, "created_at", "$final_amount")
        top_selling = await self._aggregate(ORDERS, [
            {"$match": paid},
            {"$unwind": "$items"},
            {"$group": {
                "_id": "$items.product_id",
                "name": {"$first": "$items.name"},
                "quantity": {"$sum": "$items.quantity"},
                "revenue": {"$sum": {"$multiply": ["$items.price", "$items.quantity"]}},
            }},
            {"$sort": {"quantity": -1}},
            {"$limit": 10},
        ])

        return {
            "period_days": days,
            "daily_revenue": [
                {"date": p["date"], "orders": p["count"], "revenue": round_money(p["value"])}
                for p in daily
            ],
            "total_revenue": round_money(sum(p["value"] for p in daily)),
            "top_selling_products": [
                {
                    "product_id": row["_id"],
                    "name": row.get("name"),
                    "quantity": row["quantity"],
                    "revenue": round_money(row["revenue"]),
                }
                for row in top_selling
            ],
        }

    async def users(self, days: int = 30) -> Dict[str, Any]:
        """Registrations and logins per day."""
        start = utc_now() - timedelta(days=days)
        registrations = await self._daily_series(USERS, {"created_at": {"$gte": start}}, "created_at")
        logins = await self._daily_series(
            EVENTS, {"type": AnalyticsEvents.USER_LOGIN, "date": {"$gte": start}}, "date"
        )
        return {
            "period_days": days,
            "registrations": [{"date": p["date"], "count": p["count"]} for p in registrations],
            "logins": [{"date": p["date"], "count": p["count"]} for p in logins],
            "total_users": await self._adapter.count(USERS),
            "active_users": await self._adapter.count(USERS, {"is_active": True}),
            "new_users": sum(p["count"] for p in registrations),
        }

    async def products(self, days: int = 30) -> Dict[str, Any]:
        """Most viewed products and product views per day."""
        start = utc_now() - timedelta(days=days)
        views = await self._daily_series(
            EVENTS, {"type": AnalyticsEvents.PRODUCT_VIEW, "date": {"$gte": start}}, "date"
        )
        return {
            "period_days": days,
            "top_viewed": await self._top_viewed_products(start),
            "views_per_day": [{"date": p["date"], "count": p["count"]} for p in views],
        }

    async def searches(self, days: int = 30) -> Dict[str, Any]:
        """Most frequent search terms and searches per day."""
        start = utc_now() - timedelta(days=days)
        per_day = await self._daily_series(
            EVENTS, {"type": AnalyticsEvents.SEARCH, "date": {"$gte": start}}, "date"
        )
        return {
            "period_days": days,
            "top_searches": await self._top_event_values(AnalyticsEvents.SEARCH, "query", start),
            "searches_per_day": [{"date": p["date"], "count": p["count"]} for p in per_day],
        }
