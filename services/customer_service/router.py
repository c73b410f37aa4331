from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.pagination import Page, PageParams
from shared.security import Principal, require_customer
from services.auth_service.dependencies import require_active_customer
from services.auth_service.schemas import Address, UserResponse
from services.order_service.schemas import OrderResponse
from services.order_service.service import OrderService
from services.review_service.schemas import ReviewResponse
from services.review_service.service import ReviewService
from .schemas import CustomerDashboard, ProfileUpdate
from .service import CustomerService

router = APIRouter(tags=["Customers"])
public_router = APIRouter()

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "customer", "status": "running"}


@router.get("/dashboard", response_model=CustomerDashboard)
async def dashboard(
    principal: Principal = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
):
    return await CustomerService.dashboard(db, principal.user_id)


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    principal: Principal = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
):
    return await CustomerService.get_profile(db, principal.user_id)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    payload: ProfileUpdate,
    principal: Principal = Depends(require_active_customer),
    db: AsyncSession = Depends(get_db),
):
    return await CustomerService.update_profile(db, principal.user_id, payload)


@router.get("/orders", response_model=Page[OrderResponse])
async def my_orders(
    paging: PageParams = Depends(),
    principal: Principal = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
):
    orders, total = await OrderService.list_orders(db, principal, skip=paging.skip, limit=paging.limit)
    return Page[OrderResponse].build(orders, total, paging)


@router.get("/reviews", response_model=Page[ReviewResponse])
async def my_reviews(
    paging: PageParams = Depends(),
    principal: Principal = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
):
    reviews, total = await ReviewService.list_for_user(db, principal.user_id, paging.skip, paging.limit)
    return Page[ReviewResponse].build(reviews, total, paging)


@router.get("/addresses", response_model=List[Address])
async def list_addresses(
    principal: Principal = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
):
    return await CustomerService.list_addresses(db, principal.user_id)


@router.post("/addresses", response_model=Address, status_code=status.HTTP_201_CREATED)
async def add_address(
    payload: Address,
    principal: Principal = Depends(require_active_customer),
    db: AsyncSession = Depends(get_db),
):
    return await CustomerService.set_address(db, principal.user_id, payload)
