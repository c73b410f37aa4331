from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Review, ReviewReport, ReviewVote


class ReviewRepository:

    @staticmethod
    async def add(db: AsyncSession, review: Review) -> Review:
        db.add(review)
        await db.flush()
        return review

    @staticmethod
    async def get_review(db: AsyncSession, review_id: int) -> Optional[Review]:
        result = await db.execute(
            select(Review).where(Review.id == review_id).execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def get_by_user_and_product(db: AsyncSession, user_id: int, product_id: int) -> Optional[Review]:
        result = await db.execute(
            select(Review).where(Review.user_id == user_id, Review.product_id == product_id)
        )
        return result.scalars().first()

    @staticmethod
    async def list_reviews(db: AsyncSession, *criteria, skip: int = 0, limit: int = 10):
        total = await db.execute(select(func.count(Review.id)).where(*criteria))
        result = await db.execute(
            select(Review)
            .where(*criteria)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return result.scalars().all(), total.scalar_one()

    @staticmethod
    async def count(db: AsyncSession, *criteria) -> int:
        result = await db.execute(select(func.count(Review.id)).where(*criteria))
        return result.scalar_one()

    @staticmethod
    async def delete(db: AsyncSession, review: Review) -> None:
        await db.delete(review)
        await db.flush()

    @staticmethod
    async def upsert_vote(db: AsyncSession, review: Review, user_id: int, helpful: bool) -> None:
        vote = next((v for v in review.votes if v.user_id == user_id), None)
        if vote:
            vote.helpful = helpful
        else:
            review.votes.append(ReviewVote(user_id=user_id, helpful=helpful))
        await db.commit()

    @staticmethod
    async def upsert_report(db: AsyncSession, review: Review, user_id: int, reason: str, comment: str | None) -> None:
        report = next((r for r in review.reports if r.user_id == user_id), None)
        if report:
            report.reason = reason
            report.comment = comment
        else:
            review.reports.append(ReviewReport(user_id=user_id, reason=reason, comment=comment))
        await db.commit()
