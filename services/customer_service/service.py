from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from shared.errors import FieldValidationError, NotFoundError
from services.auth_service.models import User
from services.auth_service.repository import UserRepository
from services.auth_service.schemas import Address
from services.order_service.models import Order
from services.order_service.repository import OrderRepository
from services.product_service.repository import ProductRepository
from services.review_service.models import Review
from services.review_service.repository import ReviewRepository
from .schemas import ProfileUpdate

logger = structlog.get_logger(__name__)


class CustomerService:

    @staticmethod
    async def _get_user(db: AsyncSession, user_id: int) -> User:
        user = await UserRepository.get_by_id(db, user_id)
        if not user:
            raise NotFoundError("user", user_id)
        return user

    @staticmethod
    async def dashboard(db: AsyncSession, user_id: int) -> dict:
        mine = Order.user_id == user_id
        total_spent, _ = await OrderRepository.revenue(db, mine)
        recent_orders, _ = await OrderRepository.list_orders(db, mine, skip=0, limit=5)
        recent_reviews, _ = await ReviewRepository.list_reviews(db, Review.user_id == user_id, skip=0, limit=5)

        category_ids = await OrderRepository.top_categories_for_user(db, user_id, limit=3)
        recently_bought = {item.product_id for order in recent_orders for item in order.items}
        recommended = await ProductRepository.in_categories(
            db, category_ids, exclude_ids=sorted(recently_bought), limit=10
        )

        return {
            "order_stats": {
                "total": await OrderRepository.count(db, mine),
                "pending": await OrderRepository.count(db, mine, Order.status == "pending"),
                "delivered": await OrderRepository.count(db, mine, Order.status == "delivered"),
            },
            "total_spent": float(total_spent),
            "recent_orders": recent_orders,
            "recent_reviews": recent_reviews,
            "recommended_products": recommended,
        }

    @staticmethod
    async def get_profile(db: AsyncSession, user_id: int) -> User:
        return await CustomerService._get_user(db, user_id)

    @staticmethod
    async def update_profile(db: AsyncSession, user_id: int, data: ProfileUpdate) -> User:
        user = await CustomerService._get_user(db, user_id)
        changes = data.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] is None:
            raise FieldValidationError("name", "may not be null")
        for field, value in changes.items():
            setattr(user, field, value)

        user = await UserRepository.save(db, user)
        logger.info("customer.profile_updated", user_id=user_id, fields=sorted(changes))
        return user

    @staticmethod
    async def list_addresses(db: AsyncSession, user_id: int) -> list:
        user = await CustomerService._get_user(db, user_id)
        return [user.address] if user.address else []

    @staticmethod
    async def set_address(db: AsyncSession, user_id: int, address: Address) -> dict:
        # One address per account; posting replaces it.
        user = await CustomerService._get_user(db, user_id)
        user.address = address.model_dump()
        user = await UserRepository.save(db, user)
        return user.address
