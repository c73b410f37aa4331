from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.pagination import CatalogPageParams, Page
from shared.security import require_admin
from .schemas import ProductCreate, ProductResponse, ProductSort, ProductUpdate
from .service import ProductService

router = APIRouter(tags=["Products"])
admin_router = APIRouter(tags=["Products"], dependencies=[Depends(require_admin)])
public_router = APIRouter()  # For any public endpoints (e.g. health check)

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "product", "status": "running"}


@router.get("/", response_model=Page[ProductResponse])
async def list_products(
    category: int | None = Query(default=None),
    min_price: Decimal | None = Query(default=None, ge=0),
    max_price: Decimal | None = Query(default=None, ge=0),
    search: str | None = Query(default=None, min_length=1),
    sort: ProductSort | None = Query(default=None),
    paging: CatalogPageParams = Depends(),
    db: AsyncSession = Depends(get_db)
):
    products, total = await ProductService.list_products(
        db,
        category_id=category,
        min_price=min_price,
        max_price=max_price,
        search=search,
        sort=sort,
        skip=paging.skip,
        limit=paging.limit,
    )
    return Page[ProductResponse].build(products, total, paging)


@router.get("/featured", response_model=list[ProductResponse])
async def featured_products(
    limit: int = Query(default=10, ge=1, le=50),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.list_featured(db, limit)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return await ProductService.get_product(db, product_id)


@admin_router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(product: ProductCreate, db: AsyncSession = Depends(get_db)):
    return await ProductService.create_product(db, product)


@admin_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.update_product(db, product_id, payload)


@admin_router.delete("/{product_id}")
async def delete_product(product_id: int, db: AsyncSession = Depends(get_db)):
    await ProductService.delete_product(db, product_id)
    return {"message": "Product deleted successfully"}
