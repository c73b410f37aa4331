from typing import List, Optional

from pydantic import BaseModel, Field

from services.auth_service.schemas import Address
from services.order_service.schemas import OrderResponse
from services.product_service.schemas import ProductResponse
from services.review_service.schemas import ReviewResponse


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=30)
    address: Optional[Address] = None

    class Config:
        extra = "forbid"


class OrderStats(BaseModel):
    total: int
    pending: int
    delivered: int


class CustomerDashboard(BaseModel):
    order_stats: OrderStats
    total_spent: float
    recent_orders: List[OrderResponse]
    recent_reviews: List[ReviewResponse]
    recommended_products: List[ProductResponse]
