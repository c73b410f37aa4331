from .jwt_handler import create_access_token, read_access_token
from .dependencies import (
    ROLE_ADMIN,
    ROLE_CUSTOMER,
    Principal,
    get_current_principal,
    get_current_user,
    require_admin,
    require_customer,
)
from .rate_limiter import limiter, buyer_or_ip

__all__ = [
    "create_access_token",
    "read_access_token",
    "ROLE_ADMIN",
    "ROLE_CUSTOMER",
    "Principal",
    "get_current_principal",
    "get_current_user",
    "require_admin",
    "require_customer",
    "limiter",
    "buyer_or_ip"
]
