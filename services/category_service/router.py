from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import require_admin
from .schemas import CategoryCreate, CategoryResponse, CategoryUpdate, CategoryWithCount
from .service import CategoryService

router = APIRouter(tags=["Categories"])
admin_router = APIRouter(tags=["Categories"], dependencies=[Depends(require_admin)])
public_router = APIRouter()

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "category", "status": "running"}


@router.get("/", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return await CategoryService.list_categories(db)


@router.get("/with-counts", response_model=list[CategoryWithCount])
async def list_categories_with_counts(db: AsyncSession = Depends(get_db)):
    return await CategoryService.list_with_counts(db)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: int, db: AsyncSession = Depends(get_db)):
    return await CategoryService.get_category(db, category_id)


@admin_router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryCreate, db: AsyncSession = Depends(get_db)):
    return await CategoryService.create_category(db, payload)


@admin_router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(category_id: int, payload: CategoryUpdate, db: AsyncSession = Depends(get_db)):
    return await CategoryService.update_category(db, category_id, payload)


@admin_router.delete("/{category_id}")
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db)):
    await CategoryService.delete_category(db, category_id)
    return {"message": "Category deleted successfully"}
