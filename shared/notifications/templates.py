from textwrap import dedent

SIGN_OFF = "Best regards,\nThe Ecommerce Team"


def welcome(user) -> tuple[str, str]:
    subject = "Welcome to Our Ecommerce Store!"
    body = dedent(f"""\
        Hi {user.name},

        Welcome to our ecommerce store! We're excited to have you as a customer.

        You can now:
        - Browse our products
        - Place orders
        - Track your shipments
        - Write reviews

        If you have any questions, feel free to contact our support team.

        """) + SIGN_OFF
    return subject, body


def order_confirmation(user, order) -> tuple[str, str]:
    subject = f"Order Confirmation - {order.order_number}"
    lines = "\n".join(
        f"  {item.quantity} x {item.name} @ ${item.price:.2f}" for item in order.items
    )
    body = dedent(f"""\
        Hi {user.name},

        Thank you for your order! Here are your order details:

        Order Number: {order.order_number}
        Order Date: {order.created_at:%Y-%m-%d}
        """) + lines + dedent(f"""

        Total Amount: ${order.total_amount:.2f}

        Order Status: {order.status}

        We'll send you updates as your order progresses.

        """) + SIGN_OFF
    return subject, body


def order_status_update(user, order) -> tuple[str, str]:
    subject = f"Order Status Update - {order.order_number}"
    tracking = []
    if order.tracking_number:
        tracking.append(f"Tracking Number: {order.tracking_number}")
    if order.tracking_url:
        tracking.append(f"Tracking URL: {order.tracking_url}")

    body = dedent(f"""\
        Hi {user.name},

        Your order status has been updated:

        Order Number: {order.order_number}
        New Status: {order.status}
        """)
    if tracking:
        body += "\n" + "\n".join(tracking) + "\n"
    return subject, body + "\n" + SIGN_OFF
