from typing import List, Optional

from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=500)
    image: Optional[str] = None
    parent_id: Optional[int] = None
    order: int = 0
    is_active: bool = True

    class Config:
        extra = "forbid"


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=500)
    image: Optional[str] = None
    parent_id: Optional[int] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None

    class Config:
        extra = "forbid"


class CategoryChild(BaseModel):
    id: int
    name: str
    slug: str

    class Config:
        from_attributes = True


class CategoryResponse(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None
    order: int
    is_active: bool
    children: List[CategoryChild] = []

    class Config:
        from_attributes = True


class CategoryWithCount(CategoryResponse):
    product_count: int
