from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from shared.errors import ConflictError, FieldValidationError, NotFoundError, PermissionDeniedError
from shared.security import Principal
from services.product_service.repository import ProductRepository
from .models import Review
from .repository import ReviewRepository
from .schemas import HelpfulVote, ReviewCreate, ReviewReportCreate, ReviewUpdate

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = frozenset(ReviewUpdate.model_fields)


class ReviewService:
    """Review lifecycle. Every rating change recomputes the product rating in the same commit."""

    @staticmethod
    async def get_review(db: AsyncSession, review_id: int) -> Review:
        review = await ReviewRepository.get_review(db, review_id)
        if not review:
            raise NotFoundError("review", review_id)
        return review

    @staticmethod
    async def list_for_product(db: AsyncSession, product_id: int, skip: int, limit: int):
        return await ReviewRepository.list_reviews(
            db, Review.product_id == product_id, Review.is_active.is_(True), skip=skip, limit=limit
        )

    @staticmethod
    async def list_for_user(db: AsyncSession, user_id: int, skip: int, limit: int):
        return await ReviewRepository.list_reviews(db, Review.user_id == user_id, skip=skip, limit=limit)

    @staticmethod
    async def create_review(db: AsyncSession, user_id: int, data: ReviewCreate) -> Review:
        if not await ProductRepository.get_product_by_id(db, data.product_id):
            raise NotFoundError("product", data.product_id)
        if await ReviewRepository.get_by_user_and_product(db, user_id, data.product_id):
            raise ConflictError("You have already reviewed this product")

        review = Review(user_id=user_id, **data.model_dump())
        await ReviewRepository.add(db, review)
        await ProductRepository.recompute_rating(db, data.product_id)
        await db.commit()

        logger.info("review.created", review_id=review.id, product_id=data.product_id, rating=data.rating)
        return await ReviewRepository.get_review(db, review.id)

    @staticmethod
    async def update_review(db: AsyncSession, review_id: int, user_id: int, data: ReviewUpdate) -> Review:
        review = await ReviewService.get_review(db, review_id)
        if review.user_id != user_id:
            raise PermissionDeniedError("Not authorized to update this review")

        changes = data.model_dump(exclude_unset=True)
        for field in ("rating", "comment", "images"):
            if field in changes and changes[field] is None:
                raise FieldValidationError(field, "may not be null")
        for field, value in changes.items():
            if field in UPDATABLE_FIELDS:
                setattr(review, field, value)

        await db.flush()
        if "rating" in changes:
            await ProductRepository.recompute_rating(db, review.product_id)
        await db.commit()
        return await ReviewRepository.get_review(db, review.id)

    @staticmethod
    async def delete_review(db: AsyncSession, review_id: int, principal: Principal) -> None:
        review = await ReviewService.get_review(db, review_id)
        if not principal.is_admin and review.user_id != principal.user_id:
            raise PermissionDeniedError("Not authorized to delete this review")

        product_id = review.product_id
        await ReviewRepository.delete(db, review)
        await ProductRepository.recompute_rating(db, product_id)
        await db.commit()
        logger.info("review.deleted", review_id=review_id, product_id=product_id, by=principal.user_id)

    @staticmethod
    async def mark_helpful(db: AsyncSession, review_id: int, user_id: int, vote: HelpfulVote) -> None:
        review = await ReviewService.get_review(db, review_id)
        await ReviewRepository.upsert_vote(db, review, user_id, vote.helpful)

    @staticmethod
    async def report(db: AsyncSession, review_id: int, user_id: int, data: ReviewReportCreate) -> None:
        review = await ReviewService.get_review(db, review_id)
        await ReviewRepository.upsert_report(db, review, user_id, data.reason, data.comment)
        logger.info("review.reported", review_id=review_id, reason=data.reason)
