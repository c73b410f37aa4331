from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from services.auth_service.schemas import UserSummary

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]
PaymentMethod = Literal["credit_card", "paypal", "stripe", "cash_on_delivery"]
# Statuses an admin may move an order to; cancellation has its own endpoint.
FulfilmentStatus = Literal["processing", "shipped", "delivered"]


class OrderItemRequest(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)


class ShippingAddress(BaseModel):
    name: str = Field(min_length=1)
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    country: str = "USA"
    phone: str = Field(min_length=1)


class OrderCreate(BaseModel):
    # No total here: the amount is always computed from catalog prices.
    items: List[OrderItemRequest] = Field(min_length=1)
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    notes: Optional[str] = Field(default=None, max_length=500)


class OrderCancel(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class OrderStatusUpdate(BaseModel):
    status: Optional[FulfilmentStatus] = None
    payment_status: Optional[PaymentStatus] = None
    tracking_number: Optional[str] = Field(default=None, max_length=100)
    tracking_url: Optional[str] = None
    estimated_delivery: Optional[datetime] = None

    class Config:
        extra = "forbid"


class OrderItemResponse(BaseModel):
    product_id: int
    name: str
    quantity: int
    price: float
    image: Optional[str] = None

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    order_number: str
    user_id: int
    buyer: Optional[UserSummary] = None
    items: List[OrderItemResponse]
    subtotal: float
    total_amount: float
    tax_amount: float
    shipping_amount: float
    discount_amount: float
    final_total: float
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    shipping_address: ShippingAddress
    notes: Optional[str] = None
    tracking_number: Optional[str] = None
    tracking_url: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[int] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
