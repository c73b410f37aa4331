"""Read-only aggregates for the admin dashboards."""
from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import LOW_STOCK_THRESHOLD
from services.auth_service.models import User, utcnow
from services.auth_service.repository import UserRepository
from services.category_service.repository import CategoryRepository
from services.order_service.models import Order
from services.order_service.repository import OrderRepository
from services.product_service.models import Product
from services.product_service.repository import ProductRepository
from services.review_service.repository import ReviewRepository

PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}


def _top_products(rows):
    return [
        {"product_id": product_id, "name": name, "sold": int(sold), "revenue": float(revenue or 0)}
        for product_id, name, sold, revenue in rows
    ]


class AdminService:

    @staticmethod
    async def dashboard(db: AsyncSession) -> dict:
        now = utcnow()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        recent_orders, _ = await OrderRepository.list_orders(db, skip=0, limit=5)
        month_revenue, month_orders = await OrderRepository.revenue(db, Order.created_at >= month_start)

        return {
            "totals": {
                "users": await UserRepository.count(db),
                "products": await ProductRepository.count(db),
                "orders": await OrderRepository.count(db),
                "categories": await CategoryRepository.count(db),
                "reviews": await ReviewRepository.count(db),
            },
            "recent_orders": recent_orders,
            "low_stock_products": await ProductRepository.low_stock(db, LOW_STOCK_THRESHOLD, limit=10),
            "top_products": _top_products(await OrderRepository.top_selling(db, limit=10)),
            "monthly": {"revenue": float(month_revenue), "orders": month_orders},
        }

    @staticmethod
    async def analytics(db: AsyncSession, period: str) -> dict:
        since = utcnow() - timedelta(days=PERIOD_DAYS[period])

        revenue = [
            {"day": date(int(y), int(m), int(d)), "revenue": float(total or 0), "orders": count}
            for y, m, d, total, count in await OrderRepository.revenue_by_day(db, since)
        ]
        registrations = [
            {"day": date(int(y), int(m), int(d)), "count": count}
            for y, m, d, count in await UserRepository.registrations_by_day(db, since)
        ]
        performance = await OrderRepository.top_selling(db, Order.created_at >= since, limit=10)

        return {
            "period": period,
            "since": since.date(),
            "revenue": revenue,
            "registrations": registrations,
            "product_performance": _top_products(performance),
        }

    @staticmethod
    async def user_statistics(db: AsyncSession) -> dict:
        by_month = await UserRepository.registrations_by_month(db, limit=12)
        return {
            "total": await UserRepository.count(db),
            "active": await UserRepository.count(db, User.is_active.is_(True)),
            "customers": await UserRepository.count(db, User.role == "customer"),
            "admins": await UserRepository.count(db, User.role == "admin"),
            "registrations_by_month": [
                {"year": int(y), "month": int(m), "count": count} for y, m, count in by_month
            ],
        }

    @staticmethod
    async def order_statistics(db: AsyncSession) -> dict:
        revenue, paid_orders = await OrderRepository.revenue(db)
        revenue = float(revenue)
        return {
            "total": await OrderRepository.count(db),
            "by_status": await OrderRepository.count_by_status(db),
            "revenue": revenue,
            "average_order_value": round(revenue / paid_orders, 2) if paid_orders else 0.0,
        }

    @staticmethod
    async def product_statistics(db: AsyncSession) -> dict:
        return {
            "total": await ProductRepository.count(db),
            "active": await ProductRepository.count(db, Product.is_active.is_(True)),
            "out_of_stock": await ProductRepository.count(db, Product.stock == 0),
            "low_stock": await ProductRepository.count(
                db, Product.stock > 0, Product.stock <= LOW_STOCK_THRESHOLD
            ),
            "by_category": [
                {"category": name, "count": count}
                for name, count in await ProductRepository.count_by_category(db)
            ],
        }
