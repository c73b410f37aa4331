from typing import Optional

from sqlalchemy import extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import User


class UserRepository:

    @staticmethod
    async def create(db: AsyncSession, user: User) -> User:
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def save(db: AsyncSession, user: User) -> User:
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    @staticmethod
    async def count(db: AsyncSession, *criteria) -> int:
        result = await db.execute(select(func.count(User.id)).where(*criteria))
        return result.scalar_one()

    @staticmethod
    async def registrations_by_day(db: AsyncSession, since):
        year = extract("year", User.created_at)
        month = extract("month", User.created_at)
        day = extract("day", User.created_at)
        result = await db.execute(
            select(year, month, day, func.count(User.id))
            .where(User.created_at >= since)
            .group_by(year, month, day)
            .order_by(year, month, day)
        )
        return result.all()

    @staticmethod
    async def registrations_by_month(db: AsyncSession, limit: int = 12):
        year = extract("year", User.created_at)
        month = extract("month", User.created_at)
        result = await db.execute(
            select(year, month, func.count(User.id))
            .group_by(year, month)
            .order_by(year.desc(), month.desc())
            .limit(limit)
        )
        return list(reversed(result.all()))
