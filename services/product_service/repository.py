from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import String, cast, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from services.category_service.models import Category
from services.review_service.models import Review
from .models import Product

SORT_ORDERS = {
    "price_asc": (Product.price.asc(),),
    "price_desc": (Product.price.desc(),),
    "name_asc": (Product.name.asc(),),
    "name_desc": (Product.name.desc(),),
    "rating_desc": (Product.average_rating.desc(),),
    "newest": (Product.created_at.desc(),),
}


def search_clause(term: str):
    pattern = f"%{term.lower()}%"
    return or_(
        func.lower(Product.name).like(pattern),
        func.lower(Product.description).like(pattern),
        func.lower(cast(Product.tags, String)).like(pattern),
    )


class ProductRepository:
    """Catalog store. Stock mutations are single conditional UPDATEs."""

    @staticmethod
    async def create_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        return await ProductRepository.get_product_by_id(db, product.id)

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int) -> Optional[Product]:
        result = await db.execute(select(Product).where(Product.id == product_id).execution_options(populate_existing=True))
        return result.scalars().first()

    @staticmethod
    async def list_products(
        db: AsyncSession,
        *,
        category_id: int | None = None,
        min_price=None,
        max_price=None,
        search: str | None = None,
        sort: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ):
        criteria = [Product.is_active.is_(True)]
        if search:
            criteria.append(search_clause(search))
            order_by = (Product.average_rating.desc(), Product.created_at.desc())
        else:
            if category_id is not None:
                criteria.append(Product.category_id == category_id)
            if min_price is not None:
                criteria.append(Product.price >= min_price)
            if max_price is not None:
                criteria.append(Product.price <= max_price)
            order_by = SORT_ORDERS.get(sort, SORT_ORDERS["newest"])

        total = await db.execute(select(func.count(Product.id)).where(*criteria))
        result = await db.execute(
            select(Product).where(*criteria).order_by(*order_by, Product.id.desc()).offset(skip).limit(limit)
        )
        return result.scalars().all(), total.scalar_one()

    @staticmethod
    async def list_featured(db: AsyncSession, limit: int = 10):
        result = await db.execute(
            select(Product)
            .where(Product.is_active.is_(True), Product.is_featured.is_(True))
            .order_by(Product.created_at.desc(), Product.id.desc())
            .limit(limit)
        )
        return result.scalars().all()

    @staticmethod
    async def update_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        return await ProductRepository.get_product_by_id(db, product.id)

    @staticmethod
    async def delete_product(db: AsyncSession, product: Product) -> None:
        reviews = await db.execute(select(Review).where(Review.product_id == product.id))
        for review in reviews.scalars().all():
            await db.delete(review)
        await db.delete(product)
        await db.commit()

    @staticmethod
    async def decrement_stock(db: AsyncSession, product_id: int, quantity: int) -> Optional[int]:
        """
        Atomically take ``quantity`` units if at least that many are left.

        Returns the remaining stock, or None when the product is missing,
        inactive or short. Does not commit: the caller owns the transaction.
        """
        result = await db.execute(
            update(Product)
            .where(Product.id == product_id, Product.is_active.is_(True), Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .returning(Product.stock)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def increment_stock(db: AsyncSession, product_id: int, quantity: int) -> Optional[int]:
        """Give back ``quantity`` units. Returns None if the product is gone."""
        result = await db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + quantity)
            .returning(Product.stock)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def stock_state(db: AsyncSession, product_id: int):
        """(stock, is_active) as stored, or None if the product is gone."""
        result = await db.execute(select(Product.stock, Product.is_active).where(Product.id == product_id))
        return result.one_or_none()

    @staticmethod
    async def recompute_rating(db: AsyncSession, product_id: int) -> None:
        """Refresh average_rating/num_reviews from active reviews. No commit."""
        result = await db.execute(
            select(func.avg(Review.rating), func.count(Review.id))
            .where(Review.product_id == product_id, Review.is_active.is_(True))
        )
        average, count = result.one()
        await db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(
                average_rating=float(Decimal(str(average)).quantize(Decimal("0.1"), ROUND_HALF_UP)) if count else 0.0,
                num_reviews=count,
            )
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    async def count(db: AsyncSession, *criteria) -> int:
        result = await db.execute(select(func.count(Product.id)).where(*criteria))
        return result.scalar_one()

    @staticmethod
    async def low_stock(db: AsyncSession, threshold: int, limit: int = 10):
        result = await db.execute(
            select(Product).where(Product.stock <= threshold).order_by(Product.stock.asc(), Product.id).limit(limit)
        )
        return result.scalars().all()

    @staticmethod
    async def count_by_category(db: AsyncSession):
        """Product count per category name; uncategorised products are grouped under None."""
        result = await db.execute(
            select(Category.name, func.count(Product.id))
            .select_from(Product)
            .outerjoin(Category, Category.id == Product.category_id)
            .group_by(Category.name)
            .order_by(func.count(Product.id).desc())
        )
        return result.all()

    @staticmethod
    async def in_categories(db: AsyncSession, category_ids, exclude_ids=(), limit: int = 10):
        """Active products from the given categories, best rated first."""
        if not category_ids:
            return []
        stmt = select(Product).where(
            Product.category_id.in_(category_ids),
            Product.is_active.is_(True),
        )
        if exclude_ids:
            stmt = stmt.where(Product.id.not_in(exclude_ids))
        result = await db.execute(
            stmt.order_by(Product.average_rating.desc(), Product.id).limit(limit)
        )
        return result.scalars().all()
