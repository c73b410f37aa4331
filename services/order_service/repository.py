from datetime import datetime
from typing import Optional

from sqlalchemy import extract, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.models import Product
from .models import Order, OrderItem


class OrderRepository:
    """Order ledger. Writes that belong to a larger unit of work only flush."""

    @staticmethod
    async def create_order(db: AsyncSession, order: Order) -> Order:
        db.add(order)
        await db.flush()
        return order

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Optional[Order]:
        result = await db.execute(
            select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def save_order(db: AsyncSession, order: Order) -> Order:
        db.add(order)
        await db.commit()
        return await OrderRepository.get_order(db, order.id)

    @staticmethod
    async def mark_cancelled(
        db: AsyncSession,
        order_id: int,
        expected_status: str,
        cancelled_by: int,
        reason: str | None,
        cancelled_at: datetime,
    ) -> bool:
        """
        Compare-and-set the order to cancelled.

        Only succeeds while the stored status still equals ``expected_status``;
        a concurrent cancel or status change makes this return False.
        """
        result = await db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status == expected_status)
            .values(
                status="cancelled",
                version=Order.version + 1,
                cancelled_at=cancelled_at,
                cancelled_by=cancelled_by,
                cancellation_reason=reason,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    async def list_orders(db: AsyncSession, *criteria, skip: int = 0, limit: int = 10):
        total = await db.execute(select(func.count(Order.id)).where(*criteria))
        result = await db.execute(
            select(Order)
            .where(*criteria)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return result.scalars().all(), total.scalar_one()

    @staticmethod
    async def count(db: AsyncSession, *criteria) -> int:
        result = await db.execute(select(func.count(Order.id)).where(*criteria))
        return result.scalar_one()

    @staticmethod
    async def count_by_status(db: AsyncSession):
        result = await db.execute(select(Order.status, func.count(Order.id)).group_by(Order.status))
        return dict(result.all())

    @staticmethod
    async def revenue(db: AsyncSession, *criteria):
        """Sum of total_amount and order count over non-cancelled orders."""
        result = await db.execute(
            select(func.coalesce(func.sum(Order.total_amount), 0), func.count(Order.id))
            .where(Order.status != "cancelled", *criteria)
        )
        return result.one()

    @staticmethod
    async def revenue_by_day(db: AsyncSession, since: datetime):
        year = extract("year", Order.created_at)
        month = extract("month", Order.created_at)
        day = extract("day", Order.created_at)
        result = await db.execute(
            select(year, month, day, func.sum(Order.total_amount), func.count(Order.id))
            .where(Order.created_at >= since, Order.status != "cancelled")
            .group_by(year, month, day)
            .order_by(year, month, day)
        )
        return result.all()

    @staticmethod
    async def top_selling(db: AsyncSession, *criteria, limit: int = 10):
        """Best sellers by quantity over non-cancelled orders, joined to live product names."""
        sold = func.sum(OrderItem.quantity)
        revenue = func.sum(OrderItem.price * OrderItem.quantity)
        result = await db.execute(
            select(OrderItem.product_id, Product.name, sold, revenue)
            .join(Order, Order.id == OrderItem.order_id)
            .join(Product, Product.id == OrderItem.product_id)
            .where(Order.status != "cancelled", *criteria)
            .group_by(OrderItem.product_id, Product.name)
            .order_by(sold.desc(), OrderItem.product_id)
            .limit(limit)
        )
        return result.all()

    @staticmethod
    async def top_categories_for_user(db: AsyncSession, user_id: int, limit: int = 3):
        purchases = func.count(OrderItem.id)
        result = await db.execute(
            select(Product.category_id, purchases)
            .join(Order, Order.id == OrderItem.order_id)
            .join(Product, Product.id == OrderItem.product_id)
            .where(Order.user_id == user_id, Product.category_id.is_not(None))
            .group_by(Product.category_id)
            .order_by(purchases.desc(), Product.category_id)
            .limit(limit)
        )
        return [category_id for category_id, _ in result.all()]
