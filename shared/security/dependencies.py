from dataclasses import dataclass

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from .jwt_handler import read_access_token

ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"

# Defines the expected header format (Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as asserted by the access token."""
    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


async def get_current_principal(request: Request, token: str = Depends(oauth2_scheme)) -> Principal:
    """Dependency to validate the JWT and return the caller's id and role."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    
    if not token:
        raise credentials_exception
        
    identity = read_access_token(token)
    if identity is None:
        raise credentials_exception

    user_id, role = identity
    request.state.user_id = user_id
    return Principal(user_id=user_id, role=role or ROLE_CUSTOMER)


async def get_current_user(principal: Principal = Depends(get_current_principal)) -> str:
    """Dependency returning only the user ID (sub)."""
    return str(principal.user_id)


async def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return principal


async def require_customer(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != ROLE_CUSTOMER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Customer access required"
        )
    return principal
