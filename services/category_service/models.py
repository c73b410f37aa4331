import re

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from shared.config.database import Base


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


class Category(Base):
    __tablename__ = "categories"
    __table_args__ = {"schema": "product_schema"}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)
    slug = Column(String(60), unique=True, nullable=False, index=True)
    description = Column(String(500), nullable=True)
    image = Column(String, nullable=True)
    parent_id = Column(Integer, ForeignKey("product_schema.categories.id"), nullable=True)
    order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Only direct children are serialized; repositories load them explicitly.
    children = relationship("Category", lazy="raise", order_by="Category.order")
