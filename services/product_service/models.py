from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, Numeric, String,
)
from sqlalchemy.orm import relationship

from shared.config.database import Base
from shared.config.settings import LOW_STOCK_THRESHOLD
from services.category_service.models import Category


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"
    __table_args__ = {"schema": "product_schema"}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(1000), nullable=False, default="")
    price = Column(Numeric(12, 2), nullable=False)
    original_price = Column(Numeric(12, 2), nullable=True)
    category_id = Column(Integer, ForeignKey("product_schema.categories.id"), nullable=True, index=True)
    brand = Column(String(100), nullable=True)
    stock = Column(Integer, nullable=False, default=0) # never below zero, see ProductRepository.decrement_stock
    images = Column(JSON, nullable=False, default=list)
    specifications = Column(JSON, nullable=False, default=dict)
    tags = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    is_featured = Column(Boolean, default=False, nullable=False, index=True)
    average_rating = Column(Float, default=0.0, nullable=False)
    num_reviews = Column(Integer, default=0, nullable=False)
    sku = Column(String(64), unique=True, nullable=True)
    weight = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    category = relationship(Category, lazy="selectin")

    @property
    def discount_amount(self) -> Decimal:
        if not self.original_price or self.original_price <= self.price:
            return Decimal("0")
        return self.original_price - self.price

    @property
    def discount_percentage(self) -> int:
        if not self.original_price or self.original_price <= self.price:
            return 0
        return round((self.original_price - self.price) / self.original_price * 100)

    @property
    def stock_status(self) -> str:
        if self.stock == 0:
            return "out-of-stock"
        if self.stock <= LOW_STOCK_THRESHOLD:
            return "low-stock"
        return "in-stock"

    @property
    def primary_image(self) -> str | None:
        return self.images[0] if self.images else None
