from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.models import Product
from .models import Category


class CategoryRepository:

    @staticmethod
    async def create_category(db: AsyncSession, category: Category) -> Category:
        db.add(category)
        await db.commit()
        return await CategoryRepository.get_category(db, category.id)

    @staticmethod
    async def get_category(db: AsyncSession, category_id: int) -> Optional[Category]:
        result = await db.execute(
            select(Category)
            .options(selectinload(Category.children))
            .where(Category.id == category_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def get_by_name_or_slug(db: AsyncSession, name: str, slug: str) -> Optional[Category]:
        result = await db.execute(
            select(Category).where((Category.name == name) | (Category.slug == slug))
        )
        return result.scalars().first()

    @staticmethod
    async def list_active(db: AsyncSession):
        result = await db.execute(
            select(Category)
            .options(selectinload(Category.children))
            .where(Category.is_active.is_(True))
            .order_by(Category.order.asc(), Category.name.asc())
        )
        return result.scalars().all()

    @staticmethod
    async def list_with_product_counts(db: AsyncSession):
        product_count = (
            select(func.count(Product.id))
            .where(Product.category_id == Category.id, Product.is_active.is_(True))
            .correlate(Category)
            .scalar_subquery()
        )
        result = await db.execute(
            select(Category, product_count)
            .options(selectinload(Category.children))
            .where(Category.is_active.is_(True))
            .order_by(Category.order.asc(), Category.name.asc())
        )
        return result.all()

    @staticmethod
    async def count_dependents(db: AsyncSession, category_id: int) -> tuple[int, int]:
        products = await db.execute(select(func.count(Product.id)).where(Product.category_id == category_id))
        children = await db.execute(select(func.count(Category.id)).where(Category.parent_id == category_id))
        return products.scalar_one(), children.scalar_one()

    @staticmethod
    async def count(db: AsyncSession) -> int:
        result = await db.execute(select(func.count(Category.id)))
        return result.scalar_one()

    @staticmethod
    async def save(db: AsyncSession, category: Category) -> Category:
        db.add(category)
        await db.commit()
        return await CategoryRepository.get_category(db, category.id)

    @staticmethod
    async def delete(db: AsyncSession, category: Category) -> None:
        await db.delete(category)
        await db.commit()

    @staticmethod
    async def parent_id_of(db: AsyncSession, category_id: int) -> Optional[int]:
        result = await db.execute(select(Category.parent_id).where(Category.id == category_id))
        return result.scalar_one_or_none()
