from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import require_admin
from .schemas import (
    AnalyticsPeriod,
    AnalyticsResponse,
    DashboardResponse,
    OrderStatistics,
    ProductStatistics,
    UserStatistics,
)
from .service import AdminService

router = APIRouter(tags=["Admin"], dependencies=[Depends(require_admin)])
public_router = APIRouter()

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "admin", "status": "running"}


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(db: AsyncSession = Depends(get_db)):
    return await AdminService.dashboard(db)


@router.get("/analytics", response_model=AnalyticsResponse)
async def analytics(
    period: AnalyticsPeriod = Query(default="30d"),
    db: AsyncSession = Depends(get_db),
):
    return await AdminService.analytics(db, period)


@router.get("/users/statistics", response_model=UserStatistics)
async def user_statistics(db: AsyncSession = Depends(get_db)):
    return await AdminService.user_statistics(db)


@router.get("/orders/statistics", response_model=OrderStatistics)
async def order_statistics(db: AsyncSession = Depends(get_db)):
    return await AdminService.order_statistics(db)


@router.get("/products/statistics", response_model=ProductStatistics)
async def product_statistics(db: AsyncSession = Depends(get_db)):
    return await AdminService.product_statistics(db)
