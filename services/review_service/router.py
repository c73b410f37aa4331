from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.pagination import Page, PageParams
from shared.security import Principal, get_current_principal, require_customer
from services.auth_service.dependencies import require_active_customer
from .schemas import HelpfulVote, ReviewCreate, ReviewReportCreate, ReviewResponse, ReviewUpdate
from .service import ReviewService

router = APIRouter(tags=["Reviews"])
public_router = APIRouter()

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "review", "status": "running"}


@router.get("/product/{product_id}", response_model=Page[ReviewResponse])
async def product_reviews(
    product_id: int,
    paging: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    reviews, total = await ReviewService.list_for_product(db, product_id, paging.skip, paging.limit)
    return Page[ReviewResponse].build(reviews, total, paging)


@router.get("/my", response_model=Page[ReviewResponse])
async def my_reviews(
    paging: PageParams = Depends(),
    principal: Principal = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
):
    reviews, total = await ReviewService.list_for_user(db, principal.user_id, paging.skip, paging.limit)
    return Page[ReviewResponse].build(reviews, total, paging)


@router.post("/", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    payload: ReviewCreate,
    principal: Principal = Depends(require_active_customer),
    db: AsyncSession = Depends(get_db),
):
    return await ReviewService.create_review(db, principal.user_id, payload)


@router.put("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: int,
    payload: ReviewUpdate,
    principal: Principal = Depends(require_active_customer),
    db: AsyncSession = Depends(get_db),
):
    return await ReviewService.update_review(db, review_id, principal.user_id, payload)


@router.delete("/{review_id}")
async def delete_review(
    review_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    await ReviewService.delete_review(db, review_id, principal)
    return {"message": "Review deleted successfully"}


@router.post("/{review_id}/helpful")
async def mark_helpful(
    review_id: int,
    payload: HelpfulVote,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    await ReviewService.mark_helpful(db, review_id, principal.user_id, payload)
    return {"message": "Review marked successfully"}


@router.post("/{review_id}/report")
async def report_review(
    review_id: int,
    payload: ReviewReportCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    await ReviewService.report(db, review_id, principal.user_id, payload)
    return {"message": "Review reported successfully"}
