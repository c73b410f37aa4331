from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config import settings
from shared.config.database import get_db
from shared.notifications import EmailNotifier, get_notifier
from shared.pagination import Page, PageParams
from shared.security import Principal, get_current_principal, limiter, require_admin
from services.auth_service.dependencies import require_active_customer
from .schemas import OrderCancel, OrderCreate, OrderResponse, OrderStatus, OrderStatusUpdate
from .service import OrderService

router = APIRouter(tags=["Orders"])
public_router = APIRouter()

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "order", "status": "running"}


@router.get("/", response_model=Page[OrderResponse])
async def list_orders(
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    paging: PageParams = Depends(),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Customers see their own orders, admins see every order."""
    orders, total = await OrderService.list_orders(
        db, principal, status=status_filter, skip=paging.skip, limit=paging.limit
    )
    return Page[OrderResponse].build(orders, total, paging)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.get_order_for(db, order_id, principal)


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.ORDER_RATE_LIMIT)
async def place_order(
    request: Request,                               # REQUIRED: slowapi needs this to check IP/Headers
    payload: OrderCreate,
    principal: Principal = Depends(require_active_customer),
    db: AsyncSession = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
):
    return await OrderService.place_order(db, principal.user_id, payload, notifier)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: int,
    payload: OrderCancel | None = None,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    # Only the buyer or an admin gets past this point.
    await OrderService.get_order_for(db, order_id, principal)
    reason = payload.reason if payload else None
    return await OrderService.cancel_order(
        db, order_id, principal.user_id, reason, actor_role=principal.role
    )


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
):
    return await OrderService.update_status(db, order_id, payload, notifier)
