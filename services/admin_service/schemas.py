from datetime import date
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel

from services.order_service.schemas import OrderResponse
from services.product_service.schemas import LowStockProduct

AnalyticsPeriod = Literal["7d", "30d", "90d", "1y"]


class Totals(BaseModel):
    users: int
    products: int
    orders: int
    categories: int
    reviews: int


class TopProduct(BaseModel):
    product_id: int
    name: str
    sold: int
    revenue: float


class RevenueSummary(BaseModel):
    revenue: float
    orders: int


class DashboardResponse(BaseModel):
    totals: Totals
    recent_orders: List[OrderResponse]
    low_stock_products: List[LowStockProduct]
    top_products: List[TopProduct]
    monthly: RevenueSummary


class DailyRevenue(BaseModel):
    day: date
    revenue: float
    orders: int


class DailyCount(BaseModel):
    day: date
    count: int


class AnalyticsResponse(BaseModel):
    period: AnalyticsPeriod
    since: date
    revenue: List[DailyRevenue]
    registrations: List[DailyCount]
    product_performance: List[TopProduct]


class MonthlyCount(BaseModel):
    year: int
    month: int
    count: int


class UserStatistics(BaseModel):
    total: int
    active: int
    customers: int
    admins: int
    registrations_by_month: List[MonthlyCount]


class OrderStatistics(BaseModel):
    total: int
    by_status: Dict[str, int]
    revenue: float
    average_order_value: float


class CategoryCount(BaseModel):
    category: Optional[str] = None
    count: int


class ProductStatistics(BaseModel):
    total: int
    active: int
    out_of_stock: int
    low_stock: int
    by_category: List[CategoryCount]
