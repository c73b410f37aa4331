from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from shared.config.database import Base
from services.auth_service.models import User
from services.product_service.models import Product


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_review_user_product"),
        {"schema": "review_schema"},
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("auth_schema.users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("product_schema.products.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    title = Column(String(100), nullable=True)
    comment = Column(String(500), nullable=False)
    images = Column(JSON, nullable=False, default=list)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    votes = relationship("ReviewVote", back_populates="review", lazy="selectin", cascade="all, delete-orphan")
    reports = relationship("ReviewReport", back_populates="review", lazy="selectin", cascade="all, delete-orphan")
    author = relationship(User, lazy="selectin")
    product = relationship(Product, lazy="selectin")

    @property
    def helpful_count(self) -> int:
        return sum(1 for v in self.votes if v.helpful)

    @property
    def unhelpful_count(self) -> int:
        return sum(1 for v in self.votes if not v.helpful)

    @property
    def reported_count(self) -> int:
        return len(self.reports)


class ReviewVote(Base):
    __tablename__ = "review_votes"
    __table_args__ = (
        UniqueConstraint("review_id", "user_id", name="uq_vote_review_user"),
        {"schema": "review_schema"},
    )

    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(Integer, ForeignKey("review_schema.reviews.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=False)
    helpful = Column(Boolean, default=True, nullable=False)

    review = relationship("Review", back_populates="votes")


class ReviewReport(Base):
    __tablename__ = "review_reports"
    __table_args__ = (
        UniqueConstraint("review_id", "user_id", name="uq_report_review_user"),
        {"schema": "review_schema"},
    )

    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(Integer, ForeignKey("review_schema.reviews.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=False)
    reason = Column(String(20), nullable=False) # inappropriate, spam, fake, other
    comment = Column(String(500), nullable=True)

    review = relationship("Review", back_populates="reports")
