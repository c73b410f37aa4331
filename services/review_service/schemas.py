from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    product_id: int
    rating: int = Field(ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=100)
    comment: str = Field(min_length=1, max_length=500)
    images: List[str] = []

    class Config:
        extra = "forbid"


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=100)
    comment: Optional[str] = Field(default=None, min_length=1, max_length=500)
    images: Optional[List[str]] = None

    class Config:
        extra = "forbid"


class HelpfulVote(BaseModel):
    helpful: bool = True


class ReviewReportCreate(BaseModel):
    reason: Literal["inappropriate", "spam", "fake", "other"]
    comment: Optional[str] = Field(default=None, max_length=500)


class ReviewAuthor(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class ReviewProduct(BaseModel):
    id: int
    name: str
    images: List[str]

    class Config:
        from_attributes = True


class ReviewResponse(BaseModel):
    id: int
    user_id: int
    author: Optional[ReviewAuthor] = None
    product_id: int
    product: Optional[ReviewProduct] = None
    rating: int
    title: Optional[str] = None
    comment: str
    images: List[str]
    is_verified: bool
    is_active: bool
    helpful_count: int
    unhelpful_count: int
    reported_count: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
