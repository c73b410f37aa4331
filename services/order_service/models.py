from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from shared.config.database import Base
from services.auth_service.models import User

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")
PAYMENT_METHODS = ("credit_card", "paypal", "stripe", "cash_on_delivery")

# Forward order of the fulfilment pipeline. "cancelled" sits outside it.
STATUS_RANK = {"pending": 0, "processing": 1, "shipped": 2, "delivered": 3}
TERMINAL_STATUSES = frozenset({"delivered", "cancelled"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"
    # We use a separate schema to simulate microservice isolation
    __table_args__ = {"schema": "order_schema"}

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("auth_schema.users.id"), nullable=False, index=True)
    total_amount = Column(Numeric(12, 2), nullable=False) # computed from items at creation
    tax_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    shipping_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    discount_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    status = Column(String(20), nullable=False, default="pending", index=True)
    payment_status = Column(String(20), nullable=False, default="pending", index=True)
    payment_method = Column(String(30), nullable=False)
    shipping_address = Column(JSON, nullable=False) # snapshot, never rewritten
    notes = Column(String(500), nullable=True)
    tracking_number = Column(String(100), nullable=True)
    tracking_url = Column(String, nullable=True)
    estimated_delivery = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(Integer, nullable=True)
    cancellation_reason = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    version = Column(Integer, nullable=False)

    # Optimistic locking: a flush against a stale version raises StaleDataError.
    __mapper_args__ = {"version_id_col": version}

    items = relationship(
        "OrderItem",
        back_populates="order",
        lazy="selectin",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
    )
    buyer = relationship(User, lazy="selectin")

    @property
    def order_number(self) -> str:
        return f"ORD-{self.id:08d}"

    @property
    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))

    @property
    def final_total(self) -> Decimal:
        return self.total_amount + self.tax_amount + self.shipping_amount - self.discount_amount

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class OrderItem(Base):
    """Purchase-time snapshot of a product. Never re-derived from the catalog."""
    __tablename__ = "order_items"
    __table_args__ = {"schema": "order_schema"}

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("order_schema.orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    # No FK: the product may be deleted later, the snapshot stays.
    product_id = Column(Integer, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    image = Column(String, nullable=True)

    order = relationship("Order", back_populates="items")

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity
