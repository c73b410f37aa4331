"""
Order placement and cancellation.

Placement reserves stock item by item with conditional decrements and writes
the order in the same transaction, so a rejected item rolls back every
reservation made before it. Cancellation flips the status with a
compare-and-set before giving stock back, so concurrent cancels restore
inventory exactly once.
"""
import time
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
import structlog

from shared.errors import (
    AlreadyCancelledError,
    ConflictError,
    FieldValidationError,
    InsufficientStockError,
    NotFoundError,
    PermissionDeniedError,
    ProductUnavailableError,
    TerminalStateError,
)
from shared.notifications import EmailNotifier
from shared.observability import (
    ecomm_notification_failures_total,
    ecomm_order_cancellations_total,
    ecomm_order_placement_duration_seconds,
    ecomm_orders_placed_total,
    ecomm_stock_rejections_total,
)
from shared.security import Principal
from services.product_service.repository import ProductRepository
from .models import STATUS_RANK, Order, OrderItem, utcnow
from .repository import OrderRepository
from .schemas import OrderCreate, OrderStatusUpdate

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")

UPDATABLE_FIELDS = frozenset(OrderStatusUpdate.model_fields)


def compute_total(items) -> Decimal:
    """Server-side total: sum of snapshot price x quantity."""
    total = sum((item.price * item.quantity for item in items), Decimal("0"))
    return total.quantize(CENT)


def ensure_cancellable(status: str) -> None:
    if status == "cancelled":
        raise AlreadyCancelledError()
    if status == "delivered":
        raise TerminalStateError("delivered")


class OrderService:

    @staticmethod
    async def place_order(
        db: AsyncSession,
        buyer_id: int,
        data: OrderCreate,
        notifier: EmailNotifier,
    ) -> Order:
        started = time.perf_counter()
        try:
            order = await OrderService._reserve_and_record(db, buyer_id, data)
        except Exception:
            await db.rollback()
            ecomm_orders_placed_total.labels(status="failed").inc()
            raise

        ecomm_orders_placed_total.labels(status="success").inc()
        ecomm_order_placement_duration_seconds.observe(time.perf_counter() - started)
        logger.info(
            "order.placed",
            order_id=order.id,
            user_id=buyer_id,
            items=len(order.items),
            total_amount=str(order.total_amount),
        )

        await OrderService._notify("order_created", notifier.order_created, order)
        return order

    @staticmethod
    async def _reserve_and_record(db: AsyncSession, buyer_id: int, data: OrderCreate) -> Order:
        items = []
        # Row locks are taken in product id order so two baskets sharing
        # products cannot deadlock; positions keep the caller's order.
        lines = sorted(enumerate(data.items), key=lambda line: line[1].product_id)
        for position, requested in lines:
            product = await ProductRepository.get_product_by_id(db, requested.product_id)
            if product is None:
                ecomm_stock_rejections_total.labels(reason="not_found").inc()
                raise NotFoundError("product", requested.product_id)

            if not product.is_active:
                ecomm_stock_rejections_total.labels(reason="unavailable").inc()
                raise ProductUnavailableError(product.name)

            remaining = await ProductRepository.decrement_stock(db, product.id, requested.quantity)
            if remaining is None:
                await OrderService._reject(db, product, requested.quantity)

            logger.debug(
                "order.stock_reserved",
                product_id=product.id,
                quantity=requested.quantity,
                remaining=remaining,
            )
            items.append(
                OrderItem(
                    position=position,
                    product_id=product.id,
                    name=product.name,
                    quantity=requested.quantity,
                    price=product.price,
                    image=product.primary_image,
                )
            )
        items.sort(key=lambda item: item.position)

        order = Order(
            user_id=buyer_id,
            items=items,
            total_amount=compute_total(items),
            status="pending",
            payment_status="pending",
            payment_method=data.payment_method,
            shipping_address=data.shipping_address.model_dump(),
            notes=data.notes,
        )
        await OrderRepository.create_order(db, order)
        await db.commit()
        return await OrderRepository.get_order(db, order.id)

    @staticmethod
    async def _reject(db: AsyncSession, product, quantity: int) -> None:
        """Explain a refused decrement from the product's state right now."""
        state = await ProductRepository.stock_state(db, product.id)
        if state is None:
            ecomm_stock_rejections_total.labels(reason="not_found").inc()
            raise NotFoundError("product", product.id)
        available, is_active = state
        if not is_active:
            ecomm_stock_rejections_total.labels(reason="unavailable").inc()
            raise ProductUnavailableError(product.name)
        ecomm_stock_rejections_total.labels(reason="insufficient_stock").inc()
        raise InsufficientStockError(product.name, quantity, available)

    @staticmethod
    async def cancel_order(
        db: AsyncSession,
        order_id: int,
        actor_id: int,
        reason: str | None = None,
        actor_role: str = "customer",
    ) -> Order:
        """Cancel an order and put its reserved stock back. Caller authorizes."""
        try:
            order = await OrderService._cancel_and_restore(db, order_id, actor_id, reason)
        except Exception:
            await db.rollback()
            raise

        ecomm_order_cancellations_total.labels(actor_role=actor_role).inc()
        logger.info("order.cancelled", order_id=order_id, cancelled_by=actor_id, reason=reason)
        return order

    @staticmethod
    async def _cancel_and_restore(db: AsyncSession, order_id: int, actor_id: int, reason: str | None) -> Order:
        order = await OrderRepository.get_order(db, order_id)
        if order is None:
            raise NotFoundError("order", order_id)
        items = list(order.items)

        # Status only moves forward, so this settles within a few rounds.
        status = order.status
        while True:
            ensure_cancellable(status)
            if await OrderRepository.mark_cancelled(db, order_id, status, actor_id, reason, utcnow()):
                break
            current = await OrderRepository.get_order(db, order_id)
            status = current.status

        for item in items:
            restored = await ProductRepository.increment_stock(db, item.product_id, item.quantity)
            if restored is None:
                logger.warning(
                    "order.cancel.product_missing",
                    order_id=order_id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                )

        await db.commit()
        return await OrderRepository.get_order(db, order_id)

    @staticmethod
    async def update_status(
        db: AsyncSession,
        order_id: int,
        data: OrderStatusUpdate,
        notifier: EmailNotifier,
    ) -> Order:
        order = await OrderRepository.get_order(db, order_id)
        if order is None:
            raise NotFoundError("order", order_id)
        if order.status == "cancelled":
            raise TerminalStateError("cancelled")

        changes = data.model_dump(exclude_unset=True)
        previous_status = order.status
        new_status = changes.pop("status", None) or previous_status
        payment_status = changes.pop("payment_status", None)

        if new_status != previous_status:
            if order.is_terminal:
                raise TerminalStateError(previous_status)
            if STATUS_RANK[new_status] < STATUS_RANK[previous_status]:
                raise FieldValidationError(
                    "status", f"cannot move from {previous_status} back to {new_status}"
                )
            order.status = new_status
        if payment_status is not None:
            order.payment_status = payment_status
        for field, value in changes.items():
            if field in UPDATABLE_FIELDS:
                setattr(order, field, value)

        try:
            order = await OrderRepository.save_order(db, order)
        except StaleDataError:
            await db.rollback()
            raise ConflictError("Order was modified concurrently, reload and retry")

        logger.info("order.updated", order_id=order_id, status=order.status, previous_status=previous_status)
        if order.status != previous_status:
            await OrderService._notify("order_status", notifier.order_status_changed, order)
        return order

    @staticmethod
    async def get_order_for(db: AsyncSession, order_id: int, principal: Principal) -> Order:
        """Load an order the caller is allowed to see: its buyer or an admin."""
        order = await OrderRepository.get_order(db, order_id)
        if order is None:
            raise NotFoundError("order", order_id)
        if not principal.is_admin and order.user_id != principal.user_id:
            raise PermissionDeniedError("Not authorized to access this order")
        return order

    @staticmethod
    async def list_orders(
        db: AsyncSession,
        principal: Principal,
        status: str | None = None,
        skip: int = 0,
        limit: int = 10,
    ):
        criteria = []
        if not principal.is_admin:
            criteria.append(Order.user_id == principal.user_id)
        if status:
            criteria.append(Order.status == status)
        return await OrderRepository.list_orders(db, *criteria, skip=skip, limit=limit)

    @staticmethod
    async def _notify(kind: str, send, order: Order) -> None:
        # Best effort: a mail outage must never undo a committed order.
        try:
            await send(order.buyer, order)
        except Exception:
            ecomm_notification_failures_total.labels(kind=kind).inc()
            logger.warning("order.notification_failed", kind=kind, order_id=order.id, exc_info=True)
