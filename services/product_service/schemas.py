from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class CategorySummary(BaseModel):
    id: int
    name: str
    slug: str

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    price: Decimal = Field(ge=0, decimal_places=2)
    original_price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    category_id: Optional[int] = None
    brand: Optional[str] = Field(default=None, max_length=100)
    stock: int = Field(default=0, ge=0)
    images: List[str] = []
    specifications: Dict[str, str] = {}
    tags: List[str] = []
    is_active: bool = True
    is_featured: bool = False
    sku: Optional[str] = Field(default=None, max_length=64)
    weight: Optional[float] = Field(default=None, ge=0)

    class Config:
        extra = "forbid"


class ProductUpdate(BaseModel):
    """Admin edit. Only these fields are writable; ratings are derived."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    original_price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    category_id: Optional[int] = None
    brand: Optional[str] = Field(default=None, max_length=100)
    stock: Optional[int] = Field(default=None, ge=0)
    images: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    sku: Optional[str] = Field(default=None, max_length=64)
    weight: Optional[float] = Field(default=None, ge=0)

    class Config:
        extra = "forbid"


class ProductResponse(BaseModel):
    id: int
    name: str
    description: str
    price: float
    original_price: Optional[float] = None
    category_id: Optional[int] = None
    category: Optional[CategorySummary] = None
    brand: Optional[str] = None
    stock: int
    stock_status: str
    images: List[str]
    specifications: Dict[str, str]
    tags: List[str]
    is_active: bool
    is_featured: bool
    average_rating: float
    num_reviews: int
    discount_percentage: int
    discount_amount: float
    sku: Optional[str] = None
    weight: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LowStockProduct(BaseModel):
    id: int
    name: str
    stock: int
    price: float

    class Config:
        from_attributes = True


ProductSort = Literal["price_asc", "price_desc", "name_asc", "name_desc", "rating_desc", "newest"]
