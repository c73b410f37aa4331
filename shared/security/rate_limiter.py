from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from shared.config import settings
from .jwt_handler import read_access_token


def buyer_or_ip(request: Request) -> str:
    """Throttle signed-in buyers per account and anonymous callers per client address."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        identity = read_access_token(token)
        if identity:
            return f"user:{identity[0]}"
    return f"ip:{get_remote_address(request)}"


# Applied per route; order placement uses settings.ORDER_RATE_LIMIT.
limiter = Limiter(key_func=buyer_or_ip, enabled=settings.RATE_LIMIT_ENABLED)
