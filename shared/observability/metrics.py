from prometheus_client import Counter, Histogram

# Business Metrics
ecomm_orders_placed_total = Counter(
    "ecomm_orders_placed_total",
    "Total order placement attempts",
    ["status"] # Labels: 'success', 'failed'
)

ecomm_order_placement_duration_seconds = Histogram(
    "ecomm_order_placement_duration_seconds",
    "Order placement duration in seconds"
)

ecomm_order_cancellations_total = Counter(
    "ecomm_order_cancellations_total",
    "Total orders cancelled",
    ["actor_role"] # Labels: 'customer', 'admin'
)

ecomm_stock_rejections_total = Counter(
    "ecomm_stock_rejections_total",
    "Order items rejected by the catalog",
    ["reason"] # Labels: 'not_found', 'unavailable', 'insufficient_stock'
)

ecomm_notification_failures_total = Counter(
    "ecomm_notification_failures_total",
    "Notifications that could not be delivered",
    ["kind"] # Labels: 'order_created', 'order_status', 'welcome'
)
